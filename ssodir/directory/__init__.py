"""目录模块

组织目录（部门、岗位、人员）的层级解析与团队组装。

快速开始:
    from ssodir.directory import DirectoryService, HttpDirectoryGateway, OperationContext

    gateway = HttpDirectoryGateway(settings.directory)
    service = DirectoryService(gateway, settings=settings.directory)

    context = OperationContext(user_resolver=lambda: gateway.get_user_by_token(token))
    team = service.get_team(context)
"""

from .schemas import (
    DirectoryEntity,
    Position,
    PersonnelNumber,
    Department,
    DepartmentWithChildren,
    UserDto,
)

from .exceptions import (
    DirectoryException,
    DirectoryUnavailable,
    UserNotFound,
    DepartmentNotFound,
    PositionNotAssigned,
    NoSubordinates,
    EmployeeNotInSubordinates,
    NotALaborer,
    IsALaborer,
)

from .gateway import DirectoryGateway, HttpDirectoryGateway
from .batch import BatchFetcher, chunked
from .context import RequestScopedCache, OperationContext, UserResolver
from .hierarchy import (
    HierarchyResolver,
    is_active_personnel,
    active_incumbents,
    position_incumbent,
    collect_incumbents,
    current_position,
    is_user_in_subordinates,
)
from .team import TeamAssembler, pivot_record
from .permissions import PermissionEvaluator
from .classification import (
    DEFAULT_BRIGADE_MARKERS,
    DepartmentClassifier,
    NameDepartmentClassifier,
    with_brigade_flag,
    is_position_laborer,
    is_position_rss,
    has_position_subordinates,
    is_user_laborer,
    is_user_rss,
)
from .service import DirectoryService

__all__ = [
    # 实体
    "DirectoryEntity",
    "Position",
    "PersonnelNumber",
    "Department",
    "DepartmentWithChildren",
    "UserDto",

    # 异常
    "DirectoryException",
    "DirectoryUnavailable",
    "UserNotFound",
    "DepartmentNotFound",
    "PositionNotAssigned",
    "NoSubordinates",
    "EmployeeNotInSubordinates",
    "NotALaborer",
    "IsALaborer",

    # 网关与批量
    "DirectoryGateway",
    "HttpDirectoryGateway",
    "BatchFetcher",
    "chunked",

    # 上下文
    "RequestScopedCache",
    "OperationContext",
    "UserResolver",

    # 层级与团队
    "HierarchyResolver",
    "is_active_personnel",
    "active_incumbents",
    "position_incumbent",
    "collect_incumbents",
    "current_position",
    "is_user_in_subordinates",
    "TeamAssembler",
    "pivot_record",

    # 权限与分类
    "PermissionEvaluator",
    "DEFAULT_BRIGADE_MARKERS",
    "DepartmentClassifier",
    "NameDepartmentClassifier",
    "with_brigade_flag",
    "is_position_laborer",
    "is_position_rss",
    "has_position_subordinates",
    "is_user_laborer",
    "is_user_rss",

    # 服务
    "DirectoryService",
]
