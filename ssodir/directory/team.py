"""团队组装

把有人岗位转换为以人员为中心的记录（透视记录）：

    incumbent copy
      └── positions = [position copy]
                        ├── global_position_id / global_position_name = 根岗位
                        ├── is_my_team = 调用方标志
                        └── personnel_numbers = [incumbent copy（positions 清空）]

所有"标注"都生成新对象，已获取的实例保持不变。
"""

from typing import List, Optional, Set

from .hierarchy import HierarchyResolver, active_incumbents, current_position, position_incumbent
from .schemas import Position, PersonnelNumber


def pivot_record(
    root_position: Position,
    position: Position,
    incumbent: PersonnelNumber,
    is_my_team: bool
) -> PersonnelNumber:
    """为一个在岗人员生成透视记录"""
    annotated = position.model_copy(update={
        "personnel_numbers": [incumbent.model_copy(update={"positions": []})],
        "global_position_id": root_position.id,
        "global_position_name": root_position.name,
        "is_my_team": is_my_team,
        "employment_percent": incumbent.employment_percent,
        "is_acting": incumbent.is_acting,
    })
    return incumbent.model_copy(update={"positions": [annotated]})


class TeamAssembler:
    """团队组装器

    使用示例:
        assembler = TeamAssembler(resolver)
        occupied = resolver.resolve_occupied_subordinates(root.id)
        team = assembler.build_team(root, occupied, is_callers_own_team=True)
    """

    def __init__(self, resolver: Optional[HierarchyResolver] = None):
        self.resolver = resolver

    def build_team(
        self,
        root_position: Position,
        occupied_positions: List[Position],
        is_callers_own_team: bool
    ) -> List[PersonnelNumber]:
        """把有人岗位列表转换为透视记录列表，顺序与岗位发现顺序一致"""
        team: List[PersonnelNumber] = []
        seen: Set[str] = set()
        for position in occupied_positions:
            if position.id in seen:
                continue
            seen.add(position.id)
            for incumbent in active_incumbents(position):
                team.append(pivot_record(root_position, position, incumbent, is_callers_own_team))
        return team

    def expand_team(
        self,
        root_position: Position,
        subordinates: List[Position],
        is_my_team: bool,
        visited: Optional[Set[str]] = None
    ) -> List[PersonnelNumber]:
        """逐级展开团队

        有人岗位：在岗人员以 root_position 为透视根；
        空缺岗位：取其直接下属，以该空缺岗位为透视根、is_my_team=False 继续展开。
        """
        if self.resolver is None:
            raise RuntimeError("expand_team requires a HierarchyResolver")
        if visited is None:
            visited = {root_position.id}

        team: List[PersonnelNumber] = []
        for position in subordinates:
            if position.id in visited:
                continue
            visited.add(position.id)

            incumbents = active_incumbents(position)
            if incumbents:
                team.extend(pivot_record(root_position, position, incumbent, is_my_team) for incumbent in incumbents)
                continue

            children = self.resolver.resolve_occupied_subordinates(position.id, include_vacancy_fallback=False)
            team.extend(self.expand_team(position, children, False, visited))
        return team

    @staticmethod
    def revert_position(position: Position) -> Optional[PersonnelNumber]:
        """岗位 -> 其在岗人员（positions 为不含人员的岗位副本），空缺时返回 None"""
        incumbent = position_incumbent(position)
        if incumbent is None:
            return None
        return incumbent.model_copy(update={
            "positions": [position.model_copy(update={"personnel_numbers": []})],
        })

    @staticmethod
    def revert_personnel_number(user: PersonnelNumber) -> Optional[Position]:
        """人员 -> 其当前岗位（personnel_numbers 为不含岗位的人员副本），没有岗位时返回 None"""
        position = current_position(user)
        if position is None:
            return None
        return position.model_copy(update={
            "personnel_numbers": [user.model_copy(update={"positions": []})],
        })


__all__ = [
    "pivot_record",
    "TeamAssembler",
]
