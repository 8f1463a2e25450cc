"""
OrderCollisionChecker — 订单查重。

同一患者 + 同一药物（忽略大小写和首尾空格），
在 duplicate_order_window_days 天内已有订单 → 每条都产生一个 DUPLICATE_ORDER。

药物名不做模糊匹配：药名在这个场景里基本是标准化 / 自动补全的。
窗口下界是闭区间：恰好 now - window 创建的订单也算重复。
"""

import logging
from datetime import timedelta
from typing import Any, Callable

from django.utils import timezone

from .base import BaseOrderSource
from .config import DetectionConfig
from .types import DuplicateOrderWarning, OrderSnapshot

logger = logging.getLogger(__name__)


def format_display_date(value) -> str:
    """Oct 27, 2024"""
    return f"{value:%b} {value.day}, {value.year}"


class OrderCollisionChecker:

    def __init__(
        self,
        order_source: BaseOrderSource,
        config: DetectionConfig | None = None,
        clock: Callable = timezone.now,
    ):
        self.order_source = order_source
        self.config = config or DetectionConfig()
        self.clock = clock

    def window_start(self):
        return self.clock() - timedelta(days=self.config.duplicate_order_window_days)

    def find_duplicate_orders(self, patient_id: Any, medication_name: str) -> list[DuplicateOrderWarning]:
        medication_name = medication_name.strip()
        logger.debug(
            "Checking for duplicate orders patient_id=%s medication=%s",
            patient_id, medication_name,
        )

        orders = self.order_source.orders_since(patient_id, medication_name, self.window_start())
        if not orders:
            return []

        logger.info(
            "Duplicate orders detected patient_id=%s medication=%s count=%d",
            patient_id, medication_name, len(orders),
        )
        return [self._warning(order) for order in orders]

    @staticmethod
    def _warning(order: OrderSnapshot) -> DuplicateOrderWarning:
        return DuplicateOrderWarning(
            message=(
                f"Order for {order.medication_name} already exists for this patient "
                f"(created {format_display_date(order.created_at)})"
            ),
            existing_order=order,
        )
