"""仓储模块

部门闭包表与部门岗位快照的 SQLAlchemy 实现。
"""

from .models import (
    DirectoryBase,
    DepartmentTreePath,
    DepartmentPosition,
)

from .department_repository import (
    DepartmentClosure,
    DepartmentClosureRepository,
)

__all__ = [
    "DirectoryBase",
    "DepartmentTreePath",
    "DepartmentPosition",
    "DepartmentClosure",
    "DepartmentClosureRepository",
]
