"""
DuplicateDetector — 患者查重。

流程（每次提交）：
1. 从 record source 取最近 N 条患者（N = max_records_to_check，默认 100）
2. 逐条比较：
   - MRN 完全相同 → DUPLICATE_PATIENT（不再打分）
   - 否则综合打分，>= 阈值 → SIMILAR_PATIENT
3. 按取回顺序（最新在前）返回所有警告，不合并、不去重

只查最近 N 条是有意的取舍：重复基本出现在最近录入的记录里，
同步请求里不能全表扫描。更老的重复会漏掉，这是已知的假阴性。
数据量上来以后应该先把这里换成数据库侧的索引近似匹配（pg_trgm 之类），
而不是调大 N。
"""

import logging
import math
import time

from .base import BaseRecordSource
from .config import DetectionConfig
from .scoring import PatientSimilarityScorer
from .types import (
    DuplicatePatientWarning,
    MatchCandidate,
    NameIdentityRecord,
    SimilarPatientWarning,
)

logger = logging.getLogger(__name__)


def normalize_medication(name: str) -> str:
    return name.strip().lower()


def percent(score: float) -> int:
    """四舍五入到整数百分比（.5 向上取整）。"""
    return math.floor(score * 100 + 0.5)


class DuplicateDetector:

    def __init__(
        self,
        record_source: BaseRecordSource,
        config: DetectionConfig | None = None,
        scorer: PatientSimilarityScorer | None = None,
    ):
        self.record_source = record_source
        self.config = config or DetectionConfig()
        self.scorer = scorer or PatientSimilarityScorer(self.config.field_weights)

    def find_similar_patients(self, candidate: MatchCandidate) -> list:
        """
        返回 DuplicatePatientWarning / SimilarPatientWarning 列表。

        record source 抛出的异常原样向上传播。
        """
        started = time.monotonic()
        logger.debug(
            "Checking for similar patients mrn=%s name=%s %s",
            candidate.identifier, candidate.first_name, candidate.last_name,
        )

        records = self.record_source.recent_records(self.config.max_records_to_check)
        warnings = []

        for record in records:
            if record.identifier == candidate.identifier:
                warnings.append(self.exact_match(candidate, record))
                continue

            score = self.scorer.score(candidate, record)
            if score >= self.config.similarity_threshold:
                warnings.append(self._similar_warning(candidate, record, score))

        logger.debug(
            "Similar patient check complete checked=%d found=%d duration_ms=%.1f",
            len(records), len(warnings), (time.monotonic() - started) * 1000,
        )
        return warnings

    # ── helpers ─────────────────────────────────────────────────────────────

    def _has_same_medication(self, candidate: MatchCandidate, record: NameIdentityRecord) -> bool:
        if not candidate.medication_name:
            return False
        wanted = normalize_medication(candidate.medication_name)
        return any(
            normalize_medication(name) == wanted
            for name in self.record_source.medication_names(record.id)
        )

    def exact_match(self, candidate: MatchCandidate, record: NameIdentityRecord) -> DuplicatePatientWarning:
        """MRN 完全一致时的警告；record 不必来自最近 N 条。"""
        same_med = self._has_same_medication(candidate, record)
        if same_med:
            message = (
                f"Patient with MRN {record.identifier} already exists and has an order "
                f"for {candidate.medication_name}."
            )
        else:
            message = (
                f"Patient with MRN {record.identifier} already exists. "
                f"You can add this order to the existing patient."
            )
        return DuplicatePatientWarning(
            message=message,
            existing_patient=record,
            has_same_medication=same_med,
        )

    def _similar_warning(self, candidate, record, score: float) -> SimilarPatientWarning:
        message = (
            f"Similar patient found: {record.full_name} (MRN: {record.identifier}) "
            f"- {percent(score)}% match"
        )
        return SimilarPatientWarning(
            message=message,
            similar_patient=record,
            similarity_score=score,
            has_same_medication=self._has_same_medication(candidate, record),
        )
