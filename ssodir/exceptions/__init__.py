"""异常处理模块

使用示例:
    from ssodir.exceptions import Err, ErrorCode, register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)

    raise Err.forbidden("岗位不在管理范围内", code=ErrorCode.POSITION_OUT_OF_SCOPE)
"""

from .exceptions import (
    Err,
    ErrorCode,
    ErrorCodeType,
    BusinessException,
    AuthenticationException,
    AuthorizationException,
    ServiceUnavailableException,
)

from .handlers import (
    register_exception_handlers,
    make_business_exception_handler,
    make_unhandled_exception_handler,
)

__all__ = [
    "Err",
    "ErrorCode",
    "ErrorCodeType",
    "BusinessException",
    "AuthenticationException",
    "AuthorizationException",
    "ServiceUnavailableException",
    "register_exception_handlers",
    "make_business_exception_handler",
    "make_unhandled_exception_handler",
]
