"""
目录模块 - 异常定义

异常层级:
    BusinessException
    ├── DirectoryException              - 目录异常基类 (400)
    │   ├── UserNotFound                - 人员不存在 (404)
    │   ├── DepartmentNotFound          - 部门不存在 (404)
    │   ├── PositionNotAssigned         - 调用方没有当前岗位 (400)
    │   ├── NoSubordinates              - 调用方没有下属 (403)
    │   ├── EmployeeNotInSubordinates   - 员工不在下属树中 (403)
    │   ├── NotALaborer                 - 员工不是工人 (403)
    │   └── IsALaborer                  - 调用方是工人 (403)
    └── ServiceUnavailableException
        └── DirectoryUnavailable        - 目录服务不可用 (503)

业务守卫类异常属于预期控制流，抛出时不记录日志；
DirectoryUnavailable 由网关/批量层在记录上下文后抛出。
"""

from typing import Optional, List, Any

from fastapi import status

from ssodir.exceptions import (
    BusinessException,
    ServiceUnavailableException,
    ErrorCode,
)


class DirectoryException(BusinessException):
    """目录异常基类"""


class DirectoryUnavailable(ServiceUnavailableException):
    """目录服务不可用

    任何网关/网络故障都转换为此异常。原始异常通过 __cause__ 保留。

    使用示例:
        try:
            ...
        except requests.RequestException as e:
            raise DirectoryUnavailable(operation="get_personnel_by_ids", ids=ids) from e
    """

    def __init__(
        self,
        message: Optional[str] = None,
        operation: Optional[str] = None,
        ids: Optional[List[str]] = None,
        **extra: Any
    ):
        ids = list(ids) if ids is not None else None
        super().__init__(message, operation=operation, ids=ids, **extra)
        self.operation = operation
        self.ids = ids


class UserNotFound(DirectoryException):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = ErrorCode.USER_NOT_FOUND

    def __init__(self, user_id: Optional[str]):
        super().__init__(f"人员不存在: {user_id}", user_id=user_id)
        self.user_id = user_id


class DepartmentNotFound(DirectoryException):
    """部门不存在

    只作为网关的"未找到"信号，业务层将其转换为 None。
    """

    status_code = status.HTTP_404_NOT_FOUND
    default_code = ErrorCode.DEPARTMENT_NOT_FOUND

    def __init__(self, department_id: str):
        super().__init__(f"部门不存在: {department_id}", department_id=department_id)
        self.department_id = department_id


class PositionNotAssigned(DirectoryException):
    """调用方没有当前岗位"""

    default_code = ErrorCode.POSITION_NOT_ASSIGNED
    default_message = "用户没有当前岗位"

    def __init__(self, user_id: Optional[str] = None):
        super().__init__(user_id=user_id)
        self.user_id = user_id


class NoSubordinates(DirectoryException):
    """调用方没有直接下属"""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = ErrorCode.NO_SUBORDINATES
    default_message = "用户没有下属"

    def __init__(self, user_id: Optional[str] = None):
        super().__init__(user_id=user_id)
        self.user_id = user_id


class EmployeeNotInSubordinates(DirectoryException):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = ErrorCode.EMPLOYEE_NOT_IN_SUBORDINATES

    def __init__(self, employee_id: Optional[str]):
        super().__init__(f"员工不在下属中: {employee_id}", employee_id=employee_id)
        self.employee_id = employee_id


class NotALaborer(DirectoryException):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = ErrorCode.NOT_A_LABORER

    def __init__(self, user_id: str):
        super().__init__(f"员工不是工人: {user_id}", user_id=user_id)
        self.user_id = user_id


class IsALaborer(DirectoryException):
    """调用方是工人，不允许执行该操作"""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = ErrorCode.IS_A_LABORER

    def __init__(self, user_id: str):
        super().__init__(f"工人不允许执行该操作: {user_id}", user_id=user_id)
        self.user_id = user_id


__all__ = [
    "DirectoryException",
    "DirectoryUnavailable",
    "UserNotFound",
    "DepartmentNotFound",
    "PositionNotAssigned",
    "NoSubordinates",
    "EmployeeNotInSubordinates",
    "NotALaborer",
    "IsALaborer",
]
