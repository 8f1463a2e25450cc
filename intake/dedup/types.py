"""
重复检测子系统的数据结构。

输入：
  NameIdentityRecord  — 库里已有患者的只读快照（由 record source 提供）
  MatchCandidate      — 本次提交的患者，检测期间临时存在
  OrderSnapshot       — 已有订单的只读快照（由 order source 提供）

输出：Warning — 按 type 区分的 tagged union，见 WARNING_TYPES。
全部是请求级的临时对象，本子系统不持久化任何东西。
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Optional, Union


@dataclass(frozen=True)
class NameIdentityRecord:
    id: Any
    first_name: str
    last_name: str
    identifier: str  # 6 位 MRN

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class MatchCandidate:
    first_name: str
    last_name: str
    identifier: str
    medication_name: Optional[str] = None


@dataclass(frozen=True)
class OrderSnapshot:
    id: Any
    patient_id: Any
    medication_name: str
    created_at: datetime


# ── Warnings ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DuplicatePatientWarning:
    """MRN 完全一致。不打分，直接判定为重复患者。"""

    type: ClassVar[str] = "DUPLICATE_PATIENT"
    severity: ClassVar[str] = "high"

    message: str
    existing_patient: NameIdentityRecord
    has_same_medication: bool = False
    can_link_to_existing: bool = True

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "severity": self.severity,
            "message": self.message,
            "existing_patient": _patient_dict(self.existing_patient),
            "has_same_medication": self.has_same_medication,
            "can_link_to_existing": self.can_link_to_existing,
        }


@dataclass(frozen=True)
class SimilarPatientWarning:
    """MRN 不同，但综合相似度 >= 阈值。"""

    type: ClassVar[str] = "SIMILAR_PATIENT"
    severity: ClassVar[str] = "medium"

    message: str
    similar_patient: NameIdentityRecord
    similarity_score: float
    has_same_medication: bool = False
    can_link_to_existing: bool = True

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "severity": self.severity,
            "message": self.message,
            "similar_patient": _patient_dict(self.similar_patient),
            "similarity_score": self.similarity_score,
            "has_same_medication": self.has_same_medication,
            "can_link_to_existing": self.can_link_to_existing,
        }


@dataclass(frozen=True)
class DuplicateOrderWarning:
    """同一患者 + 同一药物，在回溯窗口内已有订单。"""

    type: ClassVar[str] = "DUPLICATE_ORDER"
    severity: ClassVar[str] = "high"

    message: str
    existing_order: OrderSnapshot

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "severity": self.severity,
            "message": self.message,
            "existing_order": {
                "id": str(self.existing_order.id),
                "medication_name": self.existing_order.medication_name,
                "created_at": self.existing_order.created_at.isoformat(),
            },
        }


@dataclass(frozen=True)
class ProviderConflictWarning:
    """NPI 已登记给另一个名字。"""

    type: ClassVar[str] = "PROVIDER_CONFLICT"
    severity: ClassVar[str] = "high"

    message: str
    npi: str
    expected_name: str
    actual_name: str

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "severity": self.severity,
            "message": self.message,
            "npi": self.npi,
            "expected_name": self.expected_name,
            "actual_name": self.actual_name,
        }


Warning = Union[
    DuplicatePatientWarning,
    SimilarPatientWarning,
    DuplicateOrderWarning,
    ProviderConflictWarning,
]

WARNING_TYPES: dict[str, type] = {
    cls.type: cls
    for cls in (
        DuplicatePatientWarning,
        SimilarPatientWarning,
        DuplicateOrderWarning,
        ProviderConflictWarning,
    )
}


def _patient_dict(record: NameIdentityRecord) -> dict:
    return {
        "id": str(record.id),
        "mrn": record.identifier,
        "name": record.full_name,
    }
