from .config import DetectionConfig, FieldWeights
from .detector import DuplicateDetector
from .orders import OrderCollisionChecker
from .scoring import PatientSimilarityScorer
from .similarity import similarity
from .types import (
    DuplicateOrderWarning,
    DuplicatePatientWarning,
    MatchCandidate,
    NameIdentityRecord,
    OrderSnapshot,
    ProviderConflictWarning,
    SimilarPatientWarning,
    Warning,
)

__all__ = [
    "DetectionConfig",
    "FieldWeights",
    "DuplicateDetector",
    "OrderCollisionChecker",
    "PatientSimilarityScorer",
    "similarity",
    "DuplicateOrderWarning",
    "DuplicatePatientWarning",
    "MatchCandidate",
    "NameIdentityRecord",
    "OrderSnapshot",
    "ProviderConflictWarning",
    "SimilarPatientWarning",
    "Warning",
]
