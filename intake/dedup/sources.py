"""
Django ORM 版本的 record source / order source。

数据库异常不在这里处理，直接抛给调用方。
"""

from datetime import datetime
from typing import Any

from ..models import Order, Patient
from .base import BaseOrderSource, BaseRecordSource
from .types import NameIdentityRecord, OrderSnapshot


class PatientRecordSource(BaseRecordSource):

    def recent_records(self, limit: int) -> list[NameIdentityRecord]:
        rows = (
            Patient.objects
            .newest_first()
            .values('id', 'first_name', 'last_name', 'mrn')[:limit]
        )
        return [
            NameIdentityRecord(
                id=row['id'],
                first_name=row['first_name'],
                last_name=row['last_name'],
                identifier=row['mrn'],
            )
            for row in rows
        ]

    def medication_names(self, record_id: Any) -> list[str]:
        return list(
            Order.objects
            .filter(patient_id=record_id)
            .values_list('medication_name', flat=True)
        )


class OrderHistorySource(BaseOrderSource):

    def orders_since(self, patient_id: Any, medication_name: str, since: datetime) -> list[OrderSnapshot]:
        rows = (
            Order.objects
            .same_medication(patient_id, medication_name, since=since)
            .order_by('-created_at')
            .values('id', 'patient_id', 'medication_name', 'created_at')
        )
        return [OrderSnapshot(**row) for row in rows]
