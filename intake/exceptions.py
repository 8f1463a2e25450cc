"""
统一异常体系。

所有业务异常继承 BaseAppException，包含：
- type:        错误类型标识（validation_error / block / warning）
- code:        业务错误码（VALIDATION_ERROR / ORDER_NOT_FOUND / CONFIRMATION_REQUIRED / ...）
- message:     人类可读的描述
- detail:      可选的附加信息（dict / list / None）
- http_status: HTTP 状态码

注意：查重子系统（intake.dedup）本身从不抛「发现重复」异常，只返回 Warning 列表。
是否因为警告而暂停提交，由 services.create_order 决定（见 WarningError）。
"""


class BaseAppException(Exception):
    """所有业务异常的基类。"""

    type = 'error'
    code = 'UNKNOWN_ERROR'
    http_status = 500

    def __init__(self, message, code=None, detail=None, http_status=None):
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.detail = detail
        super().__init__(message)

    def to_dict(self):
        """响应体；detail 为 None 时不输出该字段。"""
        body = {'type': self.type, 'code': self.code, 'message': self.message}
        if self.detail is not None:
            body['detail'] = self.detail
        return body


class ValidationError(BaseAppException):
    """输入校验失败，400。detail = {'errors': [{'field', 'message'}, ...]}"""

    type = 'validation_error'
    code = 'VALIDATION_ERROR'
    http_status = 400


class BlockError(BaseAppException):
    """业务规则阻止操作 / 资源不存在。service 层抛出，默认 409。"""

    type = 'block'
    code = 'BUSINESS_BLOCK'
    http_status = 409


class NotFoundError(BlockError):
    http_status = 404

    def __init__(self, resource, resource_id):
        super().__init__(
            message=f'{resource} not found',
            code=f'{resource.upper()}_NOT_FOUND',
            detail={f'{resource.lower()}_id': str(resource_id)},
        )


class WarningError(BaseAppException):
    """
    查重产生了警告，需要用户确认后继续。

    不代表「失败」，而是「暂停」：
    前端展示 detail['warnings']，用户确认后带 confirm=true 重新提交。
    """

    type = 'warning'
    code = 'CONFIRMATION_REQUIRED'
    http_status = 409

    @classmethod
    def from_warnings(cls, warnings):
        return cls(
            message='Potential duplicates detected. Review the warnings and resubmit with confirm=true.',
            detail={'warnings': [w.to_dict() for w in warnings]},
        )
