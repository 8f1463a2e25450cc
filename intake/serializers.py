"""
Response serializers — ORM 对象 / Warning → JSON-able dict。

只负责「输出格式化」，不做解析或校验（见 validators.py）。
"""

from .dedup.types import WARNING_TYPES


def serialize_warning(warning):
    """Warning 是封闭的 tagged union，遇到未登记的类型直接报错。"""
    if WARNING_TYPES.get(getattr(warning, 'type', None)) is not type(warning):
        raise TypeError(f"Unknown warning type: {type(warning).__name__}")
    return warning.to_dict()


def serialize_warnings(warnings):
    return [serialize_warning(w) for w in warnings]


def serialize_validation_result(warnings):
    return {
        'valid': True,
        'warnings': serialize_warnings(warnings),
    }


def serialize_order_created(order, warnings=()):
    body = {
        'order_id': str(order.id),
        'patient_id': str(order.patient_id),
        'status': order.status,
        'message': 'Order received. Care Plan generation queued.',
        'created_at': order.created_at.isoformat(),
    }
    if warnings:
        body['acknowledged_warnings'] = serialize_warnings(warnings)
    return body


def serialize_order_detail(order):
    """状态相关字段按 status 分支输出。"""
    response = {
        'order_id': str(order.id),
        'status': order.status,
        'patient': {
            'id': str(order.patient.id),
            'name': order.patient.full_name,
            'mrn': order.patient.mrn,
        },
        'provider': {
            'name': order.provider.name,
            'npi': order.provider.npi,
        },
        'medication': order.medication_name,
        'created_at': order.created_at.isoformat(),
        'updated_at': order.updated_at.isoformat(),
    }

    if order.status == 'processing':
        response['message'] = 'Care Plan is being generated, please wait...'
    elif order.status == 'pending':
        response['message'] = 'Order is queued for processing'
    elif order.status == 'completed':
        response['message'] = 'Care Plan generated successfully'
        response['completed_at'] = order.completed_at.isoformat() if order.completed_at else None
        response['care_plan'] = {
            'content': order.care_plan.content,
            'generated_at': order.care_plan.generated_at.isoformat(),
            'llm_model': order.care_plan.llm_model,
            'download_url': f'/api/orders/{order.id}/download',
        }
    elif order.status == 'failed':
        response['message'] = 'Care Plan generation failed'
        response['error'] = {
            'message': order.error_message,
            'retry_allowed': True,
        }

    return response


def serialize_search_results(orders):
    results = [
        {
            'order_id': str(order.id),
            'status': order.status,
            'patient_name': order.patient.full_name,
            'patient_mrn': order.patient.mrn,
            'medication': order.medication_name,
            'created_at': order.created_at.isoformat(),
        }
        for order in orders
    ]
    return {
        'count': len(results),
        'orders': results,
    }


def care_plan_filename(order):
    medication = '_'.join(order.medication_name.split())
    return f"careplan_{order.patient.mrn}_{medication}_{order.created_at:%Y%m%d}.txt"
