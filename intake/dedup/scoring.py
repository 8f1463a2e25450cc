"""
患者综合相似度打分。

score = first * W_first + last * W_last + mrn_prefix * W_id

每一项都是 [0, 1]，权重和为 1.0，所以结果天然落在 [0, 1]。
MRN 完全相同的情况由 DuplicateDetector 提前短路，不会走到这里。
"""

from .config import FieldWeights
from .similarity import similarity

IDENTIFIER_PREFIX_LENGTH = 6


class PatientSimilarityScorer:

    def __init__(self, weights: FieldWeights | None = None):
        self.weights = weights or FieldWeights()

    def field_scores(self, candidate, existing) -> tuple[float, float, float]:
        """返回 (first_score, last_score, id_score)，方便排查打分细节。"""
        first_score = similarity(candidate.first_name.lower(), existing.first_name.lower())
        last_score = similarity(candidate.last_name.lower(), existing.last_name.lower())
        id_score = similarity(
            candidate.identifier[:IDENTIFIER_PREFIX_LENGTH].lower(),
            existing.identifier[:IDENTIFIER_PREFIX_LENGTH].lower(),
        )
        return first_score, last_score, id_score

    def score(self, candidate, existing) -> float:
        first_score, last_score, id_score = self.field_scores(candidate, existing)
        return (
            first_score * self.weights.first_name
            + last_score * self.weights.last_name
            + id_score * self.weights.identifier
        )
