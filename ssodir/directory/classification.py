"""部门与岗位分类

班组判定按部门名称关键字进行，结果只计算一次：
已经带有 is_brigade 的部门不再重新判定。
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, TypeVar

from .hierarchy import current_position
from .schemas import Department, PersonnelNumber, Position

DEFAULT_BRIGADE_MARKERS = ("БРИГАДА", "УЧАСТОК")

DepartmentT = TypeVar("DepartmentT", bound=Department)


class DepartmentClassifier(ABC):
    """部门分类器"""

    @abstractmethod
    def is_brigade(self, name: Optional[str]) -> bool:
        """部门名称是否表示班组/工段"""


class NameDepartmentClassifier(DepartmentClassifier):
    """按名称关键字判定班组，名称统一转大写后比较"""

    def __init__(self, markers: Iterable[str] = DEFAULT_BRIGADE_MARKERS):
        self.markers = tuple(marker.upper() for marker in markers)

    def is_brigade(self, name: Optional[str]) -> bool:
        if not name:
            return False
        upper_name = name.upper()
        return any(marker in upper_name for marker in self.markers)


def with_brigade_flag(department: Optional[DepartmentT], classifier: DepartmentClassifier) -> Optional[DepartmentT]:
    """返回带 is_brigade 的部门；已有标志时原样返回"""
    if department is None or department.is_brigade is not None:
        return department
    return department.model_copy(update={"is_brigade": classifier.is_brigade(department.name)})


def is_position_laborer(position: Optional[Position]) -> bool:
    return bool(position and position.is_worker)


def is_position_rss(position: Optional[Position]) -> bool:
    return bool(position and position.is_mse)


def has_position_subordinates(position: Optional[Position]) -> bool:
    return bool(position and position.subordinates_count and position.subordinates_count > 0)


def is_user_laborer(user: Optional[PersonnelNumber]) -> bool:
    """用户当前岗位是否为工人岗位"""
    return is_position_laborer(current_position(user))


def is_user_rss(user: Optional[PersonnelNumber]) -> bool:
    """用户当前岗位是否为管理/专业技术岗位"""
    return is_position_rss(current_position(user))


__all__ = [
    "DEFAULT_BRIGADE_MARKERS",
    "DepartmentClassifier",
    "NameDepartmentClassifier",
    "with_brigade_flag",
    "is_position_laborer",
    "is_position_rss",
    "has_position_subordinates",
    "is_user_laborer",
    "is_user_rss",
]
