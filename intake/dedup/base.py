"""
数据源抽象 — Detector / OrderCollisionChecker 只通过这两个接口读数据。

持久化层实现它们（见 sources.py 的 Django ORM 版本），
测试里可以换成内存实现。两个接口都是只读的。

实现方不要吞异常：数据库不可用时必须直接抛出，
检测失败要让整个提交失败，而不是静默返回「没有重复」。
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from .types import NameIdentityRecord, OrderSnapshot


class BaseRecordSource(ABC):

    @abstractmethod
    def recent_records(self, limit: int) -> list[NameIdentityRecord]:
        """最近创建的 limit 条患者记录，按创建时间倒序。"""

    @abstractmethod
    def medication_names(self, record_id: Any) -> list[str]:
        """某个患者名下所有订单的药物名。"""


class BaseOrderSource(ABC):

    @abstractmethod
    def orders_since(
        self,
        patient_id: Any,
        medication_name: str,
        since: datetime,
    ) -> list[OrderSnapshot]:
        """
        同一患者、药物名忽略大小写相等、created_at >= since 的订单，
        按 created_at 倒序。
        """
