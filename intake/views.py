"""
HTTP 层 — 只做「解析请求 → 调 service → 序列化响应」。

异常不在这里处理：BaseAppException 由 exception_handler.unified_exception_handler 统一兜底。
"""

from django.http import HttpResponse
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .serializers import (
    care_plan_filename,
    serialize_order_created,
    serialize_order_detail,
    serialize_search_results,
    serialize_validation_result,
)
from .validators import parse_submission


class PatientValidateView(APIView):
    """POST /api/patients/validate/ — 只查重，不写库。"""

    def post(self, request):
        submission = parse_submission(request.data)
        warnings = services.check_submission(submission)
        return Response(serialize_validation_result(warnings))


class OrderCreateView(APIView):
    """POST /api/orders/ — 查重 + 创建订单 + 异步生成 Care Plan。"""

    def post(self, request):
        submission = parse_submission(request.data)
        order, warnings = services.create_order(submission)
        return Response(serialize_order_created(order, warnings), status=201)


class OrderSearchView(APIView):
    """GET /api/orders/search/?q=..."""

    def get(self, request):
        orders = services.search_orders(request.query_params.get('q', ''))
        return Response(serialize_search_results(orders))


class OrderDetailView(APIView):
    """GET /api/orders/<order_id>/"""

    def get(self, request, order_id):
        order = services.get_order_detail(order_id)
        return Response(serialize_order_detail(order))


class OrderDownloadView(APIView):
    """GET /api/orders/<order_id>/download — Care Plan 纯文本下载。"""

    def get(self, request, order_id):
        order = services.get_care_plan_download(order_id)
        response = HttpResponse(order.care_plan.content, content_type='text/plain; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="{care_plan_filename(order)}"'
        return response
