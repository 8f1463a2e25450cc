"""
Intake 编排层。

对每次提交：
1. Provider 检查 — NPI 已登记给别的名字 → PROVIDER_CONFLICT 警告
2. Patient 查重 — DuplicateDetector（最近 N 条，MRN 短路 + 相似度打分）
   MRN 已存在但不在最近 N 条里 → 仍补一条 DUPLICATE_PATIENT
3. Order 查重 — MRN 已存在时，对该患者跑 OrderCollisionChecker

查重只产出警告，是否拦截在这里决定：
  有警告且未 confirm → WarningError（409），前端确认后带 confirm=true 重提。
检查 + 写入放在同一个 transaction.atomic() 里。
"""

import logging

from django.db import transaction

from .dedup import (
    DetectionConfig,
    DuplicateDetector,
    DuplicatePatientWarning,
    NameIdentityRecord,
    OrderCollisionChecker,
    ProviderConflictWarning,
)
from .dedup.sources import OrderHistorySource, PatientRecordSource
from .exceptions import NotFoundError, ValidationError, WarningError
from .models import Order, Patient, Provider

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20


def build_detector(config=None):
    return DuplicateDetector(PatientRecordSource(), config or DetectionConfig.from_settings())


def build_order_checker(config=None):
    return OrderCollisionChecker(OrderHistorySource(), config or DetectionConfig.from_settings())


def _normalize_name(name):
    return ' '.join(name.split()).lower()


def check_provider(provider_data):
    """
    返回 (existing_provider_or_None, warnings)。
    - NPI 不存在 → (None, [])
    - NPI 存在 + 名字相同（忽略大小写 / 多余空格）→ (existing, [])
    - NPI 存在 + 名字不同 → (existing, [PROVIDER_CONFLICT])
    """
    existing = Provider.objects.filter(npi=provider_data.npi).first()
    if existing is None:
        return None, []

    if _normalize_name(existing.name) == _normalize_name(provider_data.name):
        return existing, []

    logger.warning(
        "Provider NPI conflict npi=%s existing=%r submitted=%r",
        provider_data.npi, existing.name, provider_data.name,
    )
    warning = ProviderConflictWarning(
        message=(
            f'NPI {provider_data.npi} is registered to "{existing.name}". '
            f'You entered "{provider_data.name}".'
        ),
        npi=provider_data.npi,
        expected_name=provider_data.name,
        actual_name=existing.name,
    )
    return existing, [warning]


def _patient_record(patient):
    return NameIdentityRecord(
        id=patient.id,
        first_name=patient.first_name,
        last_name=patient.last_name,
        identifier=patient.mrn,
    )


def _screen(submission, config=None):
    """跑完三项检查，返回 (provider, patient, warnings)；不写库。"""
    config = config or DetectionConfig.from_settings()

    provider, warnings = check_provider(submission.provider)

    detector = build_detector(config)
    candidate = submission.match_candidate()
    warnings.extend(detector.find_similar_patients(candidate))

    # 检测器只看最近 N 条；MRN 完全一致按全表判断
    patient = Patient.objects.filter(mrn=submission.patient.mrn).first()
    if patient is not None:
        if not any(
            isinstance(w, DuplicatePatientWarning) and w.existing_patient.id == patient.id
            for w in warnings
        ):
            warnings.append(detector.exact_match(candidate, _patient_record(patient)))
        warnings.extend(
            build_order_checker(config).find_duplicate_orders(patient.id, submission.medication.name)
        )

    return provider, patient, warnings


def check_submission(submission):
    """只校验不创建：返回本次提交会触发的全部警告。"""
    _, _, warnings = _screen(submission)
    logger.info(
        "Submission screened mrn=%s warnings=%s",
        submission.patient.mrn, [w.type for w in warnings],
    )
    return warnings


def create_order(submission):
    """
    查重 + 创建 patient / provider / order，提交 Celery 任务。
    返回 (order, warnings)；warnings 是用户已确认过的警告。

    Raises:
        WarningError: 有警告且 submission.confirm 为 False
    """
    with transaction.atomic():
        provider, patient, warnings = _screen(submission)

        if warnings and not submission.confirm:
            logger.info(
                "Submission paused for confirmation mrn=%s warnings=%s",
                submission.patient.mrn, [w.type for w in warnings],
            )
            raise WarningError.from_warnings(warnings)

        if provider is None:
            provider = Provider.objects.create(
                npi=submission.provider.npi,
                name=submission.provider.name,
            )

        # MRN 已存在 → 把订单挂到现有患者上
        if patient is None:
            patient = Patient.objects.create(
                mrn=submission.patient.mrn,
                first_name=submission.patient.first_name,
                last_name=submission.patient.last_name,
                dob=submission.patient.dob,
            )

        medication = submission.medication
        order = Order.objects.create(
            patient=patient,
            provider=provider,
            medication_name=medication.name,
            primary_diagnosis=medication.primary_diagnosis,
            additional_diagnoses=medication.additional_diagnoses,
            medication_history=medication.medication_history,
            patient_records=submission.patient_records,
            status='pending',
        )
        logger.info(
            "Order created order_id=%s patient_id=%s acknowledged_warnings=%d",
            order.id, patient.id, len(warnings),
        )

        from intake.tasks import generate_care_plan
        order_id = str(order.id)
        transaction.on_commit(lambda: generate_care_plan.delay(order_id))

    return order, warnings


def get_order_detail(order_id):
    """Get order by ID. Raises NotFoundError (404) if not found."""
    try:
        return Order.objects.select_related('patient', 'provider').get(id=order_id)
    except Order.DoesNotExist:
        raise NotFoundError('Order', order_id)


def get_care_plan_download(order_id):
    order = get_order_detail(order_id)

    if order.status != 'completed':
        raise ValidationError(
            message='Care plan not ready yet',
            code='CAREPLAN_NOT_READY',
            detail={'order_id': str(order_id), 'current_status': order.status},
        )

    return order


def search_orders(query):
    """空查询返回最新的 SEARCH_LIMIT 条。"""
    orders = Order.objects.select_related('patient').search(query).order_by('-created_at')
    return list(orders[:SEARCH_LIMIT])
