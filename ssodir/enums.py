"""
目录模块 - 枚举定义

提供权限标签相关的枚举类型
"""

from enum import Enum


class GlobalPermission(str, Enum):
    """全局权限标签

    出现在 PersonnelNumber.permissions 中
    """
    SUPER_ADMIN = "super_admin"    # 超级管理员，跳过所有部门范围检查


class DepartmentPermission(str, Enum):
    """部门权限标签

    出现在 PersonnelNumber.department_permissions[department_id] 中
    """
    ADMIN = "admin"                # 部门管理员
    VIEW = "view"                  # 查看部门成员


__all__ = [
    "GlobalPermission",
    "DepartmentPermission",
]
