"""
ssodir - 组织目录类库

从远程身份服务（SSO）读取部门、岗位、人员，回答层级问题：
谁向谁汇报、谁管理某个部门、哪些岗位空缺、调用方可以查看哪些人员。
"""

from .version import __version__, __author__, __description__

# 导出响应模块
from .response import (
    Resp,
    ItemResponse,
)

# 导出异常处理模块
from .exceptions import (
    Err,
    ErrorCode,
    BusinessException,
    AuthenticationException,
    AuthorizationException,
    ServiceUnavailableException,
    register_exception_handlers,
)

# 导出日志模块
from .log import (
    configure_logging,
    get_logger,
    request_log_filters,
)

# 导出配置模块
from .config import (
    AppSettings,
    DirectorySettings,
    DatabaseSettings,
    LoggingSettings,
    load_settings,
)

# 导出枚举
from .enums import GlobalPermission, DepartmentPermission

# 导出目录模块
from .directory import (
    Position,
    PersonnelNumber,
    Department,
    DepartmentWithChildren,
    UserDto,
    DirectoryUnavailable,
    UserNotFound,
    DepartmentNotFound,
    PositionNotAssigned,
    NoSubordinates,
    EmployeeNotInSubordinates,
    NotALaborer,
    IsALaborer,
    DirectoryGateway,
    HttpDirectoryGateway,
    BatchFetcher,
    RequestScopedCache,
    OperationContext,
    HierarchyResolver,
    TeamAssembler,
    PermissionEvaluator,
    NameDepartmentClassifier,
    DirectoryService,
)

# 导出仓储模块
from .repository import (
    DepartmentClosure,
    DepartmentClosureRepository,
)

# 导出 API
from .api import create_directory_router, create_app

__all__ = [
    "__version__",
    "__author__",
    "__description__",

    # 响应
    "Resp",
    "ItemResponse",

    # 异常
    "Err",
    "ErrorCode",
    "BusinessException",
    "AuthenticationException",
    "AuthorizationException",
    "ServiceUnavailableException",
    "register_exception_handlers",

    # 日志
    "configure_logging",
    "get_logger",
    "request_log_filters",

    # 配置
    "AppSettings",
    "DirectorySettings",
    "DatabaseSettings",
    "LoggingSettings",
    "load_settings",

    # 枚举
    "GlobalPermission",
    "DepartmentPermission",

    # 目录
    "Position",
    "PersonnelNumber",
    "Department",
    "DepartmentWithChildren",
    "UserDto",
    "DirectoryUnavailable",
    "UserNotFound",
    "DepartmentNotFound",
    "PositionNotAssigned",
    "NoSubordinates",
    "EmployeeNotInSubordinates",
    "NotALaborer",
    "IsALaborer",
    "DirectoryGateway",
    "HttpDirectoryGateway",
    "BatchFetcher",
    "RequestScopedCache",
    "OperationContext",
    "HierarchyResolver",
    "TeamAssembler",
    "PermissionEvaluator",
    "NameDepartmentClassifier",
    "DirectoryService",

    # 仓储
    "DepartmentClosure",
    "DepartmentClosureRepository",

    # API
    "create_directory_router",
    "create_app",
]
