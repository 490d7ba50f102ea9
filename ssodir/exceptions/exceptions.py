"""异常基类与错误代码

目录类库抛出的所有异常都继承 BusinessException，由 handlers 渲染为统一的 JSON 信封。
子类通过类属性声明 HTTP 状态码、默认错误代码和默认消息，构造时只需传入上下文：

    class NoSubordinates(DirectoryException):
        status_code = status.HTTP_403_FORBIDDEN
        default_code = ErrorCode.NO_SUBORDINATES
        default_message = "用户没有下属"

    raise NoSubordinates(user_id="u-1")
"""

from enum import Enum
from typing import Any, List, Optional, Union

from fastapi import status


class ErrorCode(str, Enum):
    """错误代码

    继承自 str，可直接写入响应的 error_code 字段。
    """

    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"

    # 调用方身份 (401)
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    NOT_LOGGED_IN = "NOT_LOGGED_IN"

    # 层级守卫 (403)
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"
    POSITION_OUT_OF_SCOPE = "POSITION_OUT_OF_SCOPE"
    NO_SUBORDINATES = "NO_SUBORDINATES"
    EMPLOYEE_NOT_IN_SUBORDINATES = "EMPLOYEE_NOT_IN_SUBORDINATES"
    NOT_A_LABORER = "NOT_A_LABORER"
    IS_A_LABORER = "IS_A_LABORER"

    # 目录数据 (400 / 404)
    DIRECTORY_ERROR = "DIRECTORY_ERROR"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    DEPARTMENT_NOT_FOUND = "DEPARTMENT_NOT_FOUND"
    POSITION_NOT_ASSIGNED = "POSITION_NOT_ASSIGNED"

    # 远程目录服务 (503)
    DIRECTORY_UNAVAILABLE = "DIRECTORY_UNAVAILABLE"


ErrorCodeType = Union[str, ErrorCode]


class BusinessException(Exception):
    """业务异常基类

    属性:
        message: 面向调用方的消息
        code: 错误代码
        status_code: HTTP 状态码
        details: 补充说明列表，渲染为 msg_details
        extra: 上下文（岗位ID、人员ID、操作名等），调试模式下渲染为 debug_info
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: ErrorCodeType = ErrorCode.DIRECTORY_ERROR
    default_message: str = "目录操作失败"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCodeType] = None,
        status_code: Optional[int] = None,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code
        self.details = list(details) if details else []
        self.extra = extra
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, code={self.code!r}, extra={self.extra!r})"


class AuthenticationException(BusinessException):
    """调用方未登录、令牌无效，或目录服务拒绝了内部凭证"""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = ErrorCode.AUTHENTICATION_FAILED
    default_message = "认证失败"


class AuthorizationException(BusinessException):
    """调用方无权查看目标岗位或人员"""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = ErrorCode.AUTHORIZATION_FAILED
    default_message = "权限不足"


class ServiceUnavailableException(BusinessException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = ErrorCode.DIRECTORY_UNAVAILABLE
    default_message = "目录服务暂时不可用"


class Err:
    """路由与守卫中常用异常的快捷入口

    使用示例:
        raise Err.auth("请先登录", code=ErrorCode.NOT_LOGGED_IN)
        raise Err.forbidden("岗位不在管理范围内", code=ErrorCode.POSITION_OUT_OF_SCOPE, position_id="p-1")
    """

    @staticmethod
    def auth(message: Optional[str] = None, **kwargs) -> AuthenticationException:
        return AuthenticationException(message, **kwargs)

    @staticmethod
    def forbidden(message: Optional[str] = None, **kwargs) -> AuthorizationException:
        return AuthorizationException(message, **kwargs)
