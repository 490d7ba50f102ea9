"""FastAPI 异常处理器

把目录异常渲染为与 Resp.OK 对称的错误信封：
    {"status": "error", "message": ..., "msg_details": [...], "data": {}, "error_code": ...}

层级守卫（403 / 404）是预期结果，只记 DEBUG；目录服务不可用（5xx）记 WARNING，
带上失败的操作名和 ID 批次，便于与网关的 ERROR 日志对照。
"""

from typing import Any, Dict

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ssodir.log import get_logger
from ssodir.response import ResponseStatus
from .exceptions import BusinessException, ErrorCode

logger = get_logger()


def _error_envelope(message: str, code: str, details=None) -> Dict[str, Any]:
    return {
        "status": ResponseStatus.ERROR.value,
        "message": message,
        "msg_details": list(details or []),
        "data": {},
        "error_code": code,
    }


def make_business_exception_handler(debug: bool = False):
    """创建业务异常处理器

    Args:
        debug: 为 True 时把异常上下文（岗位ID、操作名等）作为 debug_info 返回
    """

    async def business_exception_handler(request: Request, exc: BusinessException) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning(
                f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: "
                f"operation={exc.extra.get('operation')} ids={exc.extra.get('ids')}"
            )
        else:
            logger.debug(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")

        content = _error_envelope(exc.message, exc.code, exc.details)
        if debug and exc.extra:
            content["debug_info"] = exc.extra
        return JSONResponse(status_code=exc.status_code, content=content)

    return business_exception_handler


def make_unhandled_exception_handler(debug: bool = False):
    """创建兜底异常处理器，记录完整堆栈，调试模式下返回异常类型和消息"""

    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"{request.method} {request.url.path} -> unhandled {type(exc).__name__}: {exc}")

        details = [f"{type(exc).__name__}: {exc}"] if debug else []
        content = _error_envelope("服务器内部错误", ErrorCode.INTERNAL_SERVER_ERROR.value, details)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    return unhandled_exception_handler


def register_exception_handlers(app, debug: bool = False) -> None:
    """注册异常处理器

    使用示例:
        app = FastAPI()
        register_exception_handlers(app, debug=settings.debug)
    """
    app.add_exception_handler(BusinessException, make_business_exception_handler(debug))
    app.add_exception_handler(Exception, make_unhandled_exception_handler(debug))
