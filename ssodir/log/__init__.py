"""日志模块

使用示例:
    from ssodir.log import get_logger, configure_logging, request_log_filters

    logger = get_logger()
    configure_logging(settings.logging)
    logger.error(f"Directory request failed: {request_log_filters.apply(context)}")
"""

from .logger import (
    MicrosecondFormatter,
    DEFAULT_LOG_FORMAT,
    ROOT_LOGGER_NAME,
    configure_logging,
    get_logger,
    gateway_logger,
)

from .filter_hooks import (
    RequestLogFilter,
    CredentialMaskFilter,
    RequestLogFilters,
    request_log_filters,
    CREDENTIAL_FIELD_PATTERNS,
    FILTERED_PLACEHOLDER,
)

__all__ = [
    "MicrosecondFormatter",
    "DEFAULT_LOG_FORMAT",
    "ROOT_LOGGER_NAME",
    "configure_logging",
    "get_logger",
    "gateway_logger",
    "RequestLogFilter",
    "CredentialMaskFilter",
    "RequestLogFilters",
    "request_log_filters",
    "CREDENTIAL_FIELD_PATTERNS",
    "FILTERED_PLACEHOLDER",
]
