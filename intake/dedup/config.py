"""
重复检测的配置对象。

阈值和权重是经验值（0.7 / 30-50-20），不是推导出来的常数，
所以统一放在 DetectionConfig 里，构造 Detector / Scorer 时显式传入。
部署时通过 settings.DUPLICATE_DETECTION 调整，测试里直接 new 一个即可。
"""

import math
from dataclasses import dataclass, field

from django.core.exceptions import ImproperlyConfigured


@dataclass(frozen=True)
class FieldWeights:
    first_name: float = 0.3
    last_name: float = 0.5      # 姓最有区分度
    identifier: float = 0.2     # MRN 是分配的，只用来抓录入错误

    def __post_init__(self):
        values = (self.first_name, self.last_name, self.identifier)
        if any(w < 0 for w in values):
            raise ImproperlyConfigured(f"Field weights must be non-negative, got {values}")
        if not math.isclose(sum(values), 1.0, abs_tol=1e-9):
            raise ImproperlyConfigured(f"Field weights must sum to 1.0, got {sum(values)}")


@dataclass(frozen=True)
class DetectionConfig:
    similarity_threshold: float = 0.7
    max_records_to_check: int = 100
    field_weights: FieldWeights = field(default_factory=FieldWeights)
    duplicate_order_window_days: int = 30

    def __post_init__(self):
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ImproperlyConfigured(
                f"SIMILARITY_THRESHOLD must be within [0, 1], got {self.similarity_threshold}"
            )
        if self.max_records_to_check <= 0:
            raise ImproperlyConfigured(
                f"MAX_RECORDS_TO_CHECK must be positive, got {self.max_records_to_check}"
            )
        if self.duplicate_order_window_days <= 0:
            raise ImproperlyConfigured(
                f"DUPLICATE_ORDER_WINDOW_DAYS must be positive, got {self.duplicate_order_window_days}"
            )

    @classmethod
    def from_settings(cls) -> "DetectionConfig":
        """从 settings.DUPLICATE_DETECTION 读取；缺省项用默认值。"""
        from django.conf import settings

        raw = getattr(settings, "DUPLICATE_DETECTION", {}) or {}
        defaults = cls()

        weights = raw.get("FIELD_WEIGHTS")
        if weights is None:
            field_weights = defaults.field_weights
        else:
            field_weights = FieldWeights(
                first_name=float(weights["FIRST_NAME"]),
                last_name=float(weights["LAST_NAME"]),
                identifier=float(weights["IDENTIFIER"]),
            )

        return cls(
            similarity_threshold=float(raw.get("SIMILARITY_THRESHOLD", defaults.similarity_threshold)),
            max_records_to_check=int(raw.get("MAX_RECORDS_TO_CHECK", defaults.max_records_to_check)),
            field_weights=field_weights,
            duplicate_order_window_days=int(
                raw.get("DUPLICATE_ORDER_WINDOW_DAYS", defaults.duplicate_order_window_days)
            ),
        )
