"""
Unit tests for exception classes and unified_exception_handler.

不需要数据库：
1. BaseAppException 默认值、各子类的 type / code / http_status
2. WarningError.from_warnings 把 Warning 列表序列化进 detail
3. unified_exception_handler 把异常转成统一格式的 JsonResponse
"""
import json

import pytest
from rest_framework.exceptions import ParseError
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.test import APIRequestFactory
from rest_framework.views import APIView

from intake.dedup import ProviderConflictWarning
from intake.exception_handler import unified_exception_handler
from intake.exceptions import BaseAppException, BlockError, NotFoundError, ValidationError, WarningError


# -------------------------------------------------------------------
# Exception classes
# -------------------------------------------------------------------

class TestBaseAppException:

    def test_defaults(self):
        exc = BaseAppException('something broke')
        assert exc.message == 'something broke'
        assert exc.type == 'error'
        assert exc.code == 'UNKNOWN_ERROR'
        assert exc.http_status == 500
        assert exc.detail is None

    def test_override_code_and_status(self):
        exc = BaseAppException('bad', code='CUSTOM_CODE', http_status=418)
        assert exc.code == 'CUSTOM_CODE'
        assert exc.http_status == 418


class TestSubclasses:

    def test_validation_error(self):
        exc = ValidationError('npi invalid', code='INVALID_NPI')
        assert exc.type == 'validation_error'
        assert exc.code == 'INVALID_NPI'
        assert exc.http_status == 400

    def test_block_error(self):
        exc = BlockError('not found', code='ORDER_NOT_FOUND', http_status=404)
        assert exc.type == 'block'
        assert exc.http_status == 404

    def test_not_found_error(self):
        exc = NotFoundError('Order', 'abc')
        assert isinstance(exc, BlockError)
        assert exc.http_status == 404
        assert exc.to_dict() == {
            'type': 'block',
            'code': 'ORDER_NOT_FOUND',
            'message': 'Order not found',
            'detail': {'order_id': 'abc'},
        }

    def test_warning_error_defaults(self):
        exc = WarningError('needs confirm')
        assert exc.type == 'warning'
        assert exc.code == 'CONFIRMATION_REQUIRED'
        assert exc.http_status == 409

    def test_warning_error_from_warnings(self):
        warning = ProviderConflictWarning(
            message='NPI conflict', npi='1234567893', expected_name='Dr. A', actual_name='Dr. B',
        )
        exc = WarningError.from_warnings([warning])

        assert exc.detail['warnings'] == [warning.to_dict()]
        assert exc.detail['warnings'][0]['type'] == 'PROVIDER_CONFLICT'
        assert 'confirm=true' in exc.message


# -------------------------------------------------------------------
# unified_exception_handler
# -------------------------------------------------------------------

def handle(exc):
    response = unified_exception_handler(exc, {'view': None})
    return response.status_code, json.loads(response.content)


class TestUnifiedExceptionHandler:

    def test_block_error(self):
        status, body = handle(BlockError('blocked', code='ORDER_NOT_FOUND', detail={'id': '1'}, http_status=404))

        assert status == 404
        assert body == {'type': 'block', 'code': 'ORDER_NOT_FOUND', 'message': 'blocked', 'detail': {'id': '1'}}

    def test_no_detail_field_when_none(self):
        _, body = handle(BlockError('blocked'))
        assert 'detail' not in body

    def test_warning_error(self):
        status, body = handle(WarningError('confirm pls', detail={'warnings': [{'type': 'SIMILAR_PATIENT'}]}))

        assert status == 409
        assert body['type'] == 'warning'
        assert body['detail']['warnings'][0]['type'] == 'SIMILAR_PATIENT'

    def test_drf_validation_error(self):
        status, body = handle(DRFValidationError({'q': ['required']}))

        assert status == 400
        assert body['type'] == 'validation_error'
        assert body['detail'] == {'q': ['required']}

    def test_parse_error(self):
        status, body = handle(ParseError('JSON parse error'))

        assert status == 400
        assert body['code'] == 'MALFORMED_REQUEST'

    def test_unknown_exception_not_handled(self):
        assert unified_exception_handler(RuntimeError('boom'), {'view': None}) is None


class _RaisingView(APIView):
    exc_to_raise = None

    def get(self, request):
        if self.exc_to_raise:
            raise self.exc_to_raise
        return Response({'ok': True})


class TestHandlerWiredIntoViews:

    def call(self, exc):
        view = _RaisingView.as_view(exc_to_raise=exc)
        return view(APIRequestFactory().get('/'))

    def test_no_exception_passes_through(self):
        assert self.call(None).status_code == 200

    def test_app_exception_rendered(self):
        response = self.call(ValidationError('bad input'))
        assert response.status_code == 400
        assert json.loads(response.content)['type'] == 'validation_error'

    def test_non_app_exception_propagates(self):
        with pytest.raises(RuntimeError):
            self.call(RuntimeError('unexpected'))
