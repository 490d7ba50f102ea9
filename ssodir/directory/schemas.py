"""
目录模块 - 实体 Schema

目录服务返回的实体在网关边界一次性解码为不可变的 Pydantic 模型：
    - 未知字段直接忽略
    - 远端未提供的可选字段使用文档化的默认值（False / None）
    - 需要"标注"时通过 model_copy(update=...) 生成新值，绝不修改已获取的实例
"""

from typing import Optional, List, Dict, Set

from pydantic import BaseModel, Field, ConfigDict


class DirectoryEntity(BaseModel):
    """目录实体基类"""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Position(DirectoryEntity):
    """岗位

    部门中的一个席位，可能空缺也可能有在岗人员。

    透视字段（global_position_id / global_position_name / is_my_team、
    employment_percent / is_acting）只出现在以人员为中心的结果中。
    """
    id: str = Field(..., description="岗位ID")
    name: Optional[str] = Field(None, description="岗位名称")
    department_id: Optional[str] = Field(None, description="所属部门ID")
    department: Optional["Department"] = Field(None, description="所属部门")
    personnel_numbers: List["PersonnelNumber"] = Field(default_factory=list, description="在岗人员（含历史）")
    subordinates_count: Optional[int] = Field(None, description="下属岗位数量")
    is_worker: bool = Field(False, description="是否工人岗位")
    is_mse: bool = Field(False, description="是否管理/专业技术岗位")
    start_date: Optional[str] = Field(None, description="岗位生效日期")
    end_date: Optional[str] = Field(None, description="岗位失效日期")

    # 透视字段
    global_position_id: Optional[str] = Field(None, description="团队根岗位ID")
    global_position_name: Optional[str] = Field(None, description="团队根岗位名称")
    is_my_team: Optional[bool] = Field(None, description="是否属于调用方自己的团队")
    employment_percent: Optional[float] = Field(None, description="任职人员在该岗位的聘用比例")
    is_acting: bool = Field(False, description="任职人员是否为代理")


class PersonnelNumber(DirectoryEntity):
    """人员编号（用户）

    一个员工记录，可能先后任职多个岗位。
    """
    id: str = Field(..., description="人员ID")
    name: Optional[str] = Field(None, description="姓名")
    employment_percent: Optional[float] = Field(None, description="聘用比例")
    is_acting: bool = Field(False, description="是否代理任职")
    department_permissions: Dict[str, Set[str]] = Field(default_factory=dict, description="部门ID -> 权限标签集合")
    permissions: Set[str] = Field(default_factory=set, description="全局权限标签")
    positions: List[Position] = Field(default_factory=list, description="任职岗位")


class Department(DirectoryEntity):
    """部门"""
    id: str = Field(..., description="部门ID")
    name: str = Field("", description="部门名称")
    manager_id: Optional[str] = Field(None, description="负责人岗位ID")
    parent_id: Optional[str] = Field(None, description="上级部门ID")
    manager: Optional[Position] = Field(None, description="负责人岗位（仅在请求时填充）")
    is_brigade: Optional[bool] = Field(None, description="是否班组/工段，按名称推断一次")


class DepartmentWithChildren(Department):
    """带子部门的部门"""
    children: List["DepartmentWithChildren"] = Field(default_factory=list, description="子部门")


class UserDto(DirectoryEntity):
    """用户上下文 DTO

    供业务层使用的"某个员工 + 其部门 + 其当前岗位"组合。
    """
    id: str = Field(..., description="人员ID")
    department_id: Optional[str] = Field(None, description="当前部门ID")
    user: PersonnelNumber = Field(..., description="人员")
    position: Optional[Position] = Field(None, description="当前岗位")


Position.model_rebuild()
PersonnelNumber.model_rebuild()
Department.model_rebuild()
DepartmentWithChildren.model_rebuild()
UserDto.model_rebuild()


__all__ = [
    "DirectoryEntity",
    "Position",
    "PersonnelNumber",
    "Department",
    "DepartmentWithChildren",
    "UserDto",
]
