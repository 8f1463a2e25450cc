"""
统一异常处理器，挂在 REST_FRAMEWORK['EXCEPTION_HANDLER']。

错误响应统一格式：
{
    "type":    "validation_error" | "block" | "warning" | "error",
    "code":    "VALIDATION_ERROR",
    "message": "...",
    "detail":  { ... }  // 可选
}
成功响应没有 type 字段。
"""

import logging

from django.http import JsonResponse
from rest_framework.exceptions import ParseError
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.views import exception_handler as drf_default_handler

from .exceptions import BaseAppException

logger = logging.getLogger(__name__)


def unified_exception_handler(exc, context):
    """
    优先级：
    1. BaseAppException 及其子类 → 统一格式
    2. DRF 的 ValidationError / ParseError（请求体不是合法 JSON）→ 转成统一格式
    3. 其他异常 → 交给 DRF 默认处理；DRF 也不认识的返回 None，由 Django 抛 500
    """
    view = context.get('view') if context else None

    if isinstance(exc, BaseAppException):
        if exc.http_status >= 500:
            logger.error("Unhandled business error in %s: %s", type(view).__name__, exc.message)
        return JsonResponse(exc.to_dict(), status=exc.http_status)

    if isinstance(exc, DRFValidationError):
        return JsonResponse({
            'type': 'validation_error',
            'code': 'VALIDATION_ERROR',
            'message': 'Request validation failed',
            'detail': exc.detail,
        }, status=400)

    if isinstance(exc, ParseError):
        return JsonResponse({
            'type': 'validation_error',
            'code': 'MALFORMED_REQUEST',
            'message': str(exc.detail),
        }, status=400)

    return drf_default_handler(exc, context)
