"""层级解析

在岗判定规则：
    人员（或岗位上的任职透视字段）为"在岗"当且仅当
    is_acting 为假，且 employment_percent > 0、调用方要求包含零/未指定比例、
    或 employment_percent 为空 三者之一成立。

空缺跳过遍历：
    从根岗位出发获取直接下属。有在岗人员的岗位直接收录且不再向下；
    空缺岗位（开启回退时）用它自己的直接下属替代并继续向下，
    结果按深度优先发现顺序展平到根的结果中。
"""

from typing import List, Optional, Set, Iterable

from ssodir.exceptions import Err, ErrorCode
from ssodir.log import get_logger
from .context import OperationContext
from .exceptions import DirectoryUnavailable, PositionNotAssigned
from .gateway import DirectoryGateway
from .schemas import Position, PersonnelNumber

logger = get_logger()


def _is_active(is_acting: bool, employment_percent: Optional[float], with_empty_percent: bool) -> bool:
    percent = employment_percent or 0
    return not is_acting and (percent > 0 or with_empty_percent or employment_percent is None)


def is_active_personnel(personnel: PersonnelNumber, with_empty_percent: bool = False) -> bool:
    """人员是否在岗"""
    return _is_active(personnel.is_acting, personnel.employment_percent, with_empty_percent)


def active_incumbents(position: Position, with_empty_percent: bool = False) -> List[PersonnelNumber]:
    """岗位的全部在岗人员，保持原顺序"""
    return [
        personnel for personnel in position.personnel_numbers
        if is_active_personnel(personnel, with_empty_percent)
    ]


def position_incumbent(position: Position, with_empty_percent: bool = False) -> Optional[PersonnelNumber]:
    """岗位的第一个在岗人员，空缺时返回 None"""
    for personnel in position.personnel_numbers:
        if is_active_personnel(personnel, with_empty_percent):
            return personnel
    return None


def collect_incumbents(positions: Iterable[Position]) -> List[PersonnelNumber]:
    """多个岗位的在岗人员，按岗位顺序拼接"""
    out = []
    for position in positions:
        out.extend(active_incumbents(position))
    return out


def current_position(user: Optional[PersonnelNumber], with_empty_percent: bool = False) -> Optional[Position]:
    """用户当前岗位：user.positions 中第一个透视字段满足在岗规则的岗位"""
    if user is None:
        return None
    for position in user.positions:
        if _is_active(position.is_acting, position.employment_percent, with_empty_percent):
            return position
    return None


class HierarchyResolver:
    """层级解析器

    使用示例:
        resolver = HierarchyResolver(gateway)
        occupied = resolver.resolve_occupied_subordinates("pos-A")
    """

    def __init__(self, gateway: DirectoryGateway):
        self.gateway = gateway

    def fetch_direct_subordinates(self, position_id: str) -> List[Position]:
        """获取直接下属（不含失效岗位）"""
        try:
            return list(self.gateway.get_direct_subordinates(position_id, include_inactive_positions=False))
        except Exception as e:
            logger.error(f"get_direct_subordinates failed: {e}; position_id={position_id}")
            raise DirectoryUnavailable(operation="get_direct_subordinates", ids=[position_id]) from e

    def resolve_occupied_subordinates(
        self,
        root_position_id: str,
        include_vacancy_fallback: bool = True
    ) -> List[Position]:
        """解析根岗位下的有人岗位

        Args:
            root_position_id: 根岗位ID
            include_vacancy_fallback: 是否用空缺岗位的下属替代空缺岗位；
                关闭时原样返回直接下属（包括空缺岗位）

        Returns:
            深度优先发现顺序的岗位列表；根没有直接下属时为空列表
        """
        subordinates = self.fetch_direct_subordinates(root_position_id)
        if not include_vacancy_fallback:
            return subordinates
        return self._walk(subordinates, {root_position_id})

    def _walk(self, subordinates: List[Position], visited: Set[str]) -> List[Position]:
        found: List[Position] = []
        for position in subordinates:
            if position.id in visited:
                continue
            visited.add(position.id)

            if position_incumbent(position) is not None:
                found.append(position)
                continue

            # 远端偶尔会把被查询的岗位本身也返回
            children = [
                child for child in self.fetch_direct_subordinates(position.id)
                if child.id != position.id
            ]
            found.extend(self._walk(children, visited))
        return found

    def direct_subordinates(
        self,
        context: OperationContext,
        include_vacancy_fallback: bool = True
    ) -> List[Position]:
        """调用方当前岗位的下属岗位，按参数在上下文中分别备忘"""
        cached = context.cached_subordinates(include_vacancy_fallback)
        if cached is not None:
            return cached

        user = context.user
        if user is None:
            raise Err.auth("请先登录", code=ErrorCode.NOT_LOGGED_IN)
        position = current_position(user)
        if position is None:
            raise PositionNotAssigned(user.id)

        positions = self.resolve_occupied_subordinates(position.id, include_vacancy_fallback)
        context.remember_subordinates(include_vacancy_fallback, positions)
        context.cache.record_many(collect_incumbents(positions))
        return list(positions)


def is_user_in_subordinates(subordinates: List[Position], employee_id: Optional[str]) -> bool:
    """员工是否是给定岗位列表中某个岗位的在岗人员"""
    if not subordinates or not employee_id:
        return False
    return any(personnel.id == employee_id for personnel in collect_incumbents(subordinates))


__all__ = [
    "is_active_personnel",
    "active_incumbents",
    "position_incumbent",
    "collect_incumbents",
    "current_position",
    "is_user_in_subordinates",
    "HierarchyResolver",
]
