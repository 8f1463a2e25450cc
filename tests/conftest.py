"""
Shared fixtures for all tests.

factory-boy factories 放在这里，unit/ 和 integration/ 都可以 import。
内存版 record / order source 用于不需要数据库的查重测试。
"""
import pytest
from datetime import date
from django.test import Client

import factory
from intake.dedup.base import BaseOrderSource, BaseRecordSource
from intake.dedup.types import NameIdentityRecord
from intake.models import Patient, Provider, Order, CarePlan

# 两个通过 Luhn 校验的 NPI
VALID_NPI = '1234567893'
OTHER_VALID_NPI = '9876543213'


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class PatientFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Patient

    mrn = factory.Sequence(lambda n: f'{100000 + n}')
    first_name = 'John'
    last_name = 'Doe'
    dob = date(1990, 1, 15)


class ProviderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Provider

    npi = factory.Sequence(lambda n: f'{1000000000 + n}')
    name = 'Dr. Smith'


class OrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Order

    patient = factory.SubFactory(PatientFactory)
    provider = factory.SubFactory(ProviderFactory)
    medication_name = 'Humira'
    primary_diagnosis = 'L40.0'
    status = 'pending'


class CarePlanFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = CarePlan

    order = factory.SubFactory(OrderFactory)
    content = 'Test care plan content.'
    llm_model = 'claude-sonnet-4-20250514'


# ---------------------------------------------------------------------------
# In-memory sources
# ---------------------------------------------------------------------------

class InMemoryRecordSource(BaseRecordSource):
    """records 按「最新在前」给出；medications: {record_id: [medication names]}"""

    def __init__(self, records=(), medications=None):
        self.records = list(records)
        self.medications = medications or {}
        self.requested_limits = []

    def recent_records(self, limit):
        self.requested_limits.append(limit)
        return self.records[:limit]

    def medication_names(self, record_id):
        return list(self.medications.get(record_id, []))


class InMemoryOrderSource(BaseOrderSource):

    def __init__(self, orders=()):
        self.orders = list(orders)
        self.calls = []

    def orders_since(self, patient_id, medication_name, since):
        self.calls.append((patient_id, medication_name, since))
        matched = [
            o for o in self.orders
            if o.patient_id == patient_id
            and o.medication_name.strip().lower() == medication_name.strip().lower()
            and o.created_at >= since
        ]
        return sorted(matched, key=lambda o: o.created_at, reverse=True)


def make_record(id, first_name, last_name, identifier):
    return NameIdentityRecord(id=id, first_name=first_name, last_name=last_name, identifier=identifier)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def api_client():
    """Django test client for integration tests."""
    return Client()


@pytest.fixture
def sample_order_payload():
    """Minimal valid payload for POST /api/orders/."""
    return {
        'patient': {
            'mrn': '999001',
            'first_name': 'Alice',
            'last_name': 'Wang',
            'dob': '1985-03-20',
        },
        'provider': {
            'npi': VALID_NPI,
            'name': 'Dr. Test',
        },
        'medication': {
            'name': 'Humira',
            'primary_diagnosis': 'L40.0',
        },
    }
