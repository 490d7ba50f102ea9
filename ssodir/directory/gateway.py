"""目录网关

DirectoryGateway 是目录服务（SSO）的窄接口，核心引擎只依赖这个抽象。
HttpDirectoryGateway 是基于 requests 的默认实现。

使用示例:
    from ssodir.config import DirectorySettings
    from ssodir.directory import HttpDirectoryGateway

    gateway = HttpDirectoryGateway(DirectorySettings())
    positions = gateway.get_direct_subordinates("pos-1", include_inactive_positions=False)

错误约定:
    - 连接失败、超时、非预期的 HTTP 状态、响应无法解码 -> DirectoryUnavailable
    - 单个部门查询返回 404 -> DepartmentNotFound
    - 401 -> AuthenticationException
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from ssodir.config import DirectorySettings
from ssodir.exceptions import AuthenticationException
from ssodir.log import gateway_logger as logger, request_log_filters
from .exceptions import DirectoryUnavailable, DepartmentNotFound
from .schemas import Position, PersonnelNumber, Department, DepartmentWithChildren

EntityT = TypeVar("EntityT", bound=BaseModel)


class DirectoryGateway(ABC):
    """目录网关抽象

    所有方法都可能抛出 DirectoryUnavailable。
    按 ID 查询的方法对单次请求的 ID 数量有上限，调用方负责分批（见 BatchFetcher）。
    """

    @abstractmethod
    def get_direct_subordinates(self, position_id: str, include_inactive_positions: bool = False) -> List[Position]:
        """获取岗位的直接下属岗位"""

    @abstractmethod
    def get_positions_by_ids(self, ids: List[str]) -> List[Position]:
        """按ID批量获取岗位（单次最多 500 个）"""

    @abstractmethod
    def get_personnel_by_ids(self, ids: List[str]) -> List[PersonnelNumber]:
        """按ID批量获取人员（单次最多 1000 个）"""

    @abstractmethod
    def get_departments_by_ids(self, ids: List[str]) -> List[Department]:
        """按ID批量获取部门（单次最多 500 个）"""

    @abstractmethod
    def get_department_children(self, department_id: str) -> List[Department]:
        """获取部门的子部门"""

    @abstractmethod
    def get_position(self, position_id: str) -> Position:
        """获取单个岗位"""

    @abstractmethod
    def get_department(self, department_id: str) -> Department:
        """获取单个部门，不存在时抛出 DepartmentNotFound"""

    @abstractmethod
    def get_top_departments(self, flatten: bool = False) -> List[DepartmentWithChildren]:
        """获取顶级部门（含子部门）"""

    @abstractmethod
    def get_positions_by_departments(self, department_ids: List[str]) -> List[Position]:
        """获取指定部门下的所有岗位"""

    @abstractmethod
    def get_position_attributes(self, position_ids: List[str]) -> List[Dict[str, Any]]:
        """获取岗位扩展属性（原始字典）"""

    @abstractmethod
    def get_user_by_token(self, token: str) -> Optional[PersonnelNumber]:
        """根据访问令牌解析当前用户，令牌无效时返回 None"""


class HttpDirectoryGateway(DirectoryGateway):
    """基于 requests 的目录网关

    - 内部接口使用 HTTP Basic 认证（internal_api_login / internal_api_password）
    - 超时为 (connect_timeout, timeout) 二元组
    - 不跟随重定向
    - 按 ID 查询统一使用 POST + JSON {"ids": [...]}，避免查询字符串长度限制
    - 响应信封为 {"data": ...}
    """

    def __init__(self, settings: DirectorySettings = None, session: requests.Session = None):
        self.settings = settings or DirectorySettings()
        self.base_url = self.settings.url.rstrip("/")
        self.session = session or requests.Session()

    # ==================== 底层请求 ====================

    def _log_failure(self, operation: str, url: str, message: str, ids: Optional[List[str]] = None, **context):
        log_data = request_log_filters.apply({
            "operation": operation,
            "url": url,
            "ids": ids,
            "message": message,
            **context,
        })
        logger.error(f"Directory request failed: {log_data}")

    def _send(
        self,
        method: str,
        path: str,
        operation: str,
        ids: Optional[List[str]] = None,
        internal: bool = True,
        **kwargs
    ) -> requests.Response:
        """发送请求，网络层异常统一转换为 DirectoryUnavailable"""
        url = f"{self.base_url}{path}"
        if internal:
            kwargs["auth"] = (self.settings.internal_api_login, self.settings.internal_api_password)

        logger.debug(f"{method} {url} operation={operation}")
        try:
            return self.session.request(
                method,
                url,
                timeout=(self.settings.connect_timeout, self.settings.timeout),
                verify=self.settings.verify_ssl,
                allow_redirects=False,
                **kwargs
            )
        except requests.RequestException as e:
            self._log_failure(operation, url, str(e), ids, **self._loggable(kwargs))
            raise DirectoryUnavailable(operation=operation, ids=ids) from e

    @staticmethod
    def _loggable(kwargs: Dict[str, Any]) -> Dict[str, Any]:
        context = {}
        for key in ("params", "headers", "auth"):
            if kwargs.get(key) is not None:
                context[key] = kwargs[key]
        return context

    def _data(self, response: requests.Response, operation: str, ids: Optional[List[str]] = None) -> Any:
        """校验状态码并取出响应信封中的 data"""
        if response.status_code == 401:
            raise AuthenticationException("目录服务拒绝认证", operation=operation)

        if response.status_code >= 300:
            message = f"HTTP {response.status_code}: {response.text[:200]}"
            self._log_failure(operation, response.url, message, ids)
            raise DirectoryUnavailable(operation=operation, ids=ids)

        try:
            body = response.json()
        except ValueError as e:
            self._log_failure(operation, response.url, f"invalid JSON: {e}", ids)
            raise DirectoryUnavailable(operation=operation, ids=ids) from e

        if not isinstance(body, dict):
            return None
        return body.get("data")

    def _decode_list(self, data: Any, entity: Type[EntityT], operation: str, ids: Optional[List[str]] = None) -> List[EntityT]:
        if not data:
            return []
        try:
            return [entity.model_validate(item) for item in data]
        except ValidationError as e:
            self._log_failure(operation, self.base_url, f"invalid payload: {e}", ids)
            raise DirectoryUnavailable(operation=operation, ids=ids) from e

    def _decode_one(self, data: Any, entity: Type[EntityT], operation: str, ids: Optional[List[str]] = None) -> EntityT:
        if not data:
            self._log_failure(operation, self.base_url, "empty payload", ids)
            raise DirectoryUnavailable(operation=operation, ids=ids)
        try:
            return entity.model_validate(data)
        except ValidationError as e:
            self._log_failure(operation, self.base_url, f"invalid payload: {e}", ids)
            raise DirectoryUnavailable(operation=operation, ids=ids) from e

    def _post_ids(self, path: str, ids: List[str], entity: Type[EntityT], operation: str, **extra_body) -> List[EntityT]:
        response = self._send("POST", path, operation, ids=ids, json={"ids": list(ids), **extra_body})
        return self._decode_list(self._data(response, operation, ids), entity, operation, ids)

    # ==================== 接口实现 ====================

    def get_direct_subordinates(self, position_id: str, include_inactive_positions: bool = False) -> List[Position]:
        operation = "get_direct_subordinates"
        response = self._send(
            "GET",
            f"/internal/positions/{position_id}/direct-subordinates",
            operation,
            ids=[position_id],
            params={"include_inactive_positions": str(include_inactive_positions).lower()},
        )
        return self._decode_list(self._data(response, operation, [position_id]), Position, operation, [position_id])

    def get_positions_by_ids(self, ids: List[str]) -> List[Position]:
        return self._post_ids("/internal/positions", ids, Position, "get_positions_by_ids")

    def get_personnel_by_ids(self, ids: List[str]) -> List[PersonnelNumber]:
        return self._post_ids("/internal/personnel-numbers", ids, PersonnelNumber, "get_personnel_by_ids")

    def get_departments_by_ids(self, ids: List[str]) -> List[Department]:
        return self._post_ids("/internal/departments", ids, Department, "get_departments_by_ids")

    def get_department_children(self, department_id: str) -> List[Department]:
        operation = "get_department_children"
        response = self._send(
            "GET", "/internal/departments", operation,
            ids=[department_id], params={"parent_id": department_id},
        )
        return self._decode_list(self._data(response, operation, [department_id]), Department, operation, [department_id])

    def get_position(self, position_id: str) -> Position:
        operation = "get_position"
        response = self._send("GET", f"/internal/positions/{position_id}", operation, ids=[position_id])
        return self._decode_one(self._data(response, operation, [position_id]), Position, operation, [position_id])

    def get_department(self, department_id: str) -> Department:
        operation = "get_department"
        response = self._send("GET", f"/internal/departments/{department_id}", operation, ids=[department_id])
        if response.status_code == 404:
            raise DepartmentNotFound(department_id)
        return self._decode_one(self._data(response, operation, [department_id]), Department, operation, [department_id])

    def get_top_departments(self, flatten: bool = False) -> List[DepartmentWithChildren]:
        operation = "get_top_departments"
        params = {"flatten": "true"} if flatten else None
        response = self._send("GET", "/internal/top-departments", operation, params=params)
        return self._decode_list(self._data(response, operation), DepartmentWithChildren, operation)

    def get_positions_by_departments(self, department_ids: List[str]) -> List[Position]:
        operation = "get_positions_by_departments"
        response = self._send(
            "POST", "/internal/positions/search", operation,
            ids=department_ids, json={"department_ids": list(department_ids)},
        )
        return self._decode_list(self._data(response, operation, department_ids), Position, operation, department_ids)

    def get_position_attributes(self, position_ids: List[str]) -> List[Dict[str, Any]]:
        operation = "get_position_attributes"
        response = self._send(
            "POST", "/internal/position-attrs", operation,
            ids=position_ids, json={"ids": list(position_ids)},
        )
        return list(self._data(response, operation, position_ids) or [])

    def get_user_by_token(self, token: str) -> Optional[PersonnelNumber]:
        operation = "get_user_by_token"
        response = self._send(
            "GET", "/auth/user", operation,
            internal=False, headers={"Authorization": f"Bearer {token}"},
        )
        if response.status_code == 401:
            return None
        data = self._data(response, operation)
        if not data:
            return None
        return self._decode_one(data, PersonnelNumber, operation)

    def close(self):
        """关闭底层 HTTP 会话"""
        self.session.close()


__all__ = [
    "DirectoryGateway",
    "HttpDirectoryGateway",
]
