"""网关请求日志的脱敏

目录网关在请求失败时记录请求上下文：操作名、URL、ID 批次，以及内部接口的
基本认证和 Authorization 请求头。写日志之前，上下文依次经过已注册的过滤器，
凭证类字段的值被替换为占位符。

使用示例:
    from ssodir.log import request_log_filters, CredentialMaskFilter

    safe = request_log_filters.apply({"operation": "get_personnel_by_ids", "auth": ("svc", "secret")})
    # {"operation": "get_personnel_by_ids", "auth": "*SENSITIVE DATA FILTERED*"}

    # 业务项目需要额外屏蔽的字段
    request_log_filters.register(CredentialMaskFilter(patterns=[r"snils"]))
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

# 按字段名匹配（不区分大小写）；auth / cookie 只做整词匹配，避免误伤 author 之类的字段
CREDENTIAL_FIELD_PATTERNS = (
    r'password|passwd|pwd',
    r'token',
    r'secret|api_?key',
    r'credential',
    r'^(auth|authorization|cookie)$',
)

FILTERED_PLACEHOLDER = "*SENSITIVE DATA FILTERED*"

RequestContext = Dict[str, Any]


class RequestLogFilter(ABC):
    """请求上下文过滤器"""

    def applies_to(self, context: RequestContext) -> bool:
        return True

    @abstractmethod
    def apply(self, context: RequestContext) -> RequestContext:
        """返回过滤后的新字典，不修改入参"""


class CredentialMaskFilter(RequestLogFilter):
    """按字段名递归屏蔽凭证，嵌套的字典、列表、元组都会被检查

    Args:
        patterns: 字段名正则列表，默认 CREDENTIAL_FIELD_PATTERNS
    """

    def __init__(self, patterns: Optional[Iterable[str]] = None):
        self.patterns = [
            re.compile(pattern, re.IGNORECASE)
            for pattern in (CREDENTIAL_FIELD_PATTERNS if patterns is None else patterns)
        ]

    def _is_credential(self, key: Any) -> bool:
        return isinstance(key, str) and any(pattern.search(key) for pattern in self.patterns)

    def _mask(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                key: FILTERED_PLACEHOLDER if self._is_credential(key) else self._mask(item)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [self._mask(item) for item in value]
        return value

    def apply(self, context: RequestContext) -> RequestContext:
        return self._mask(context)


class RequestLogFilters:
    """已注册的过滤器链，按注册顺序执行"""

    def __init__(self, filters: Iterable[RequestLogFilter] = ()):
        self._filters: List[RequestLogFilter] = list(filters)

    def register(self, log_filter: RequestLogFilter):
        self._filters.append(log_filter)

    def unregister(self, log_filter: RequestLogFilter):
        if log_filter in self._filters:
            self._filters.remove(log_filter)

    def clear(self):
        self._filters.clear()

    @property
    def filters(self) -> List[RequestLogFilter]:
        return list(self._filters)

    def apply(self, context: RequestContext) -> RequestContext:
        result = dict(context)
        for log_filter in self._filters:
            if log_filter.applies_to(result):
                result = log_filter.apply(result)
        return result


# 网关使用的全局过滤器链，默认屏蔽凭证
request_log_filters = RequestLogFilters([CredentialMaskFilter()])
