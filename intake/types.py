"""
IntakeSubmission dataclass — 业务逻辑唯一认识的提交格式。

validators.parse_submission() 把请求 JSON 转成这个结构；
services.py 只消费这个结构，永远不碰原始请求体。
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .dedup import MatchCandidate


@dataclass
class PatientData:
    mrn: str
    first_name: str
    last_name: str
    dob: date


@dataclass
class ProviderData:
    npi: str
    name: str


@dataclass
class MedicationData:
    name: str
    primary_diagnosis: str                    # ICD-10
    additional_diagnoses: list[str] = field(default_factory=list)
    medication_history: list[Any] = field(default_factory=list)


@dataclass
class IntakeSubmission:
    """
    confirm  用户是否已确认警告（WarningError 之后的二次提交为 True）。
    """

    patient: PatientData
    provider: ProviderData
    medication: MedicationData
    patient_records: str = ""
    confirm: bool = False

    def match_candidate(self) -> MatchCandidate:
        return MatchCandidate(
            first_name=self.patient.first_name,
            last_name=self.patient.last_name,
            identifier=self.patient.mrn,
            medication_name=self.medication.name,
        )
