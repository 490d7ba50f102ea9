"""权限判定

从用户的部门权限映射和全局超级管理员标签推导管理范围。

    - 超级管理员：跳过所有部门范围检查
    - 部门管理员：department_permissions[department_id] 中包含 admin 标签
    - 管理范围：直接管理的部门，以及这些部门的后代部门（由部门闭包仓储判定）
"""

from typing import Iterable, Optional, Set

from ssodir.enums import DepartmentPermission, GlobalPermission
from ssodir.repository import DepartmentClosure
from .context import OperationContext
from .hierarchy import HierarchyResolver
from .schemas import PersonnelNumber, Position


class PermissionEvaluator:
    """权限判定器

    使用示例:
        evaluator = PermissionEvaluator(closure_repository, resolver)
        if evaluator.can_manage(user, ["d-11"]):
            ...
    """

    def __init__(
        self,
        closure_repository: Optional[DepartmentClosure] = None,
        resolver: Optional[HierarchyResolver] = None
    ):
        self.closure_repository = closure_repository
        self.resolver = resolver

    @staticmethod
    def is_super_admin(user: Optional[PersonnelNumber]) -> bool:
        return user is not None and GlobalPermission.SUPER_ADMIN.value in user.permissions

    @staticmethod
    def is_department_admin(user: Optional[PersonnelNumber], department_id: Optional[str]) -> bool:
        if user is None or not department_id:
            return False
        permissions = user.department_permissions.get(department_id)
        return bool(permissions) and DepartmentPermission.ADMIN.value in permissions

    @staticmethod
    def admin_department_ids(user: Optional[PersonnelNumber]) -> Set[str]:
        if user is None:
            return set()
        return {
            department_id
            for department_id, permissions in user.department_permissions.items()
            if DepartmentPermission.ADMIN.value in permissions
        }

    def can_manage(self, user: Optional[PersonnelNumber], department_ids: Iterable[str]) -> bool:
        """用户是否可以管理全部给定部门"""
        if self.is_super_admin(user):
            return True

        department_ids = list(department_ids)
        if all(self.is_department_admin(user, department_id) for department_id in department_ids):
            return True

        admin_ids = self.admin_department_ids(user)
        if not admin_ids or self.closure_repository is None:
            return False
        return self.closure_repository.are_all_descendants_of(department_ids, admin_ids)

    def is_position_in_subordinates(self, context: OperationContext, position: Optional[Position]) -> bool:
        """岗位是否在调用方的管辖范围内

        超级管理员、岗位所在部门的管理员直接通过；
        否则检查岗位是否在调用方的直接下属岗位中（不做空缺回退）。
        """
        if position is None:
            return False

        user = context.user
        if self.is_super_admin(user) or self.is_department_admin(user, position.department_id):
            return True

        if self.resolver is None:
            return False
        subordinates = self.resolver.direct_subordinates(context, include_vacancy_fallback=False)
        return any(subordinate.id == position.id for subordinate in subordinates)


__all__ = [
    "PermissionEvaluator",
]
