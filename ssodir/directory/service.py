"""
目录模块 - 业务服务

DirectoryService 是对外暴露的业务层门面，组合：
    - BatchFetcher：分批获取
    - HierarchyResolver：空缺跳过遍历
    - TeamAssembler：团队透视记录
    - PermissionEvaluator：管理范围判定
    - DepartmentClosure：部门闭包查询（可选）

所有依赖当前用户的方法都接收一个 OperationContext，
人员缓存和下属备忘都保存在上下文中，服务本身无请求级状态，可在线程间共享。
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ssodir.config import DirectorySettings
from ssodir.exceptions import Err, ErrorCode
from ssodir.log import get_logger
from ssodir.repository import DepartmentClosure
from .batch import BatchFetcher
from .classification import (
    DepartmentClassifier,
    NameDepartmentClassifier,
    with_brigade_flag,
    is_position_laborer,
    is_position_rss,
    has_position_subordinates,
    is_user_laborer,
    is_user_rss,
)
from .context import OperationContext
from .exceptions import (
    DirectoryUnavailable,
    DepartmentNotFound,
    UserNotFound,
    NoSubordinates,
    EmployeeNotInSubordinates,
    NotALaborer,
    IsALaborer,
)
from .gateway import DirectoryGateway
from .hierarchy import HierarchyResolver, current_position, is_user_in_subordinates
from .permissions import PermissionEvaluator
from .schemas import Position, PersonnelNumber, Department, DepartmentWithChildren, UserDto
from .team import TeamAssembler

logger = get_logger()

DepartmentView = Union[Department, Dict[str, Any]]


class DirectoryService:
    """目录业务服务

    使用示例:
        from ssodir import DirectoryService, HttpDirectoryGateway, OperationContext

        service = DirectoryService(HttpDirectoryGateway(settings), closure_repository=repository)

        context = OperationContext(user_resolver=lambda: gateway.get_user_by_token(token))
        team = service.get_team(context)
        manageable = service.are_departments_in_user_management(context, ["d-11", "d-12"])
    """

    def __init__(
        self,
        gateway: DirectoryGateway,
        closure_repository: Optional[DepartmentClosure] = None,
        settings: Optional[DirectorySettings] = None,
        classifier: Optional[DepartmentClassifier] = None,
    ):
        self.gateway = gateway
        self.settings = settings or DirectorySettings()
        self.closure_repository = closure_repository
        self.classifier = classifier or NameDepartmentClassifier(self.settings.brigade_markers)

        self.fetcher = BatchFetcher(gateway, self.settings)
        self.resolver = HierarchyResolver(gateway)
        self.assembler = TeamAssembler(self.resolver)
        self.evaluator = PermissionEvaluator(closure_repository, self.resolver)

    # ==================== 内部工具 ====================

    def _call(self, operation: str, ids: List[str], func: Callable, *args, **kwargs):
        """调用网关，除 DepartmentNotFound 外的异常记录后转换为 DirectoryUnavailable"""
        try:
            return func(*args, **kwargs)
        except DepartmentNotFound:
            raise
        except Exception as e:
            logger.error(f"{operation} failed: {e}; ids={ids}")
            raise DirectoryUnavailable(operation=operation, ids=ids) from e

    def _require_repository(self) -> DepartmentClosure:
        if self.closure_repository is None:
            raise ValueError("未配置部门闭包仓储 closure_repository")
        return self.closure_repository

    @staticmethod
    def _require_user(context: OperationContext) -> PersonnelNumber:
        user = context.user
        if user is None:
            raise Err.auth("请先登录", code=ErrorCode.NOT_LOGGED_IN)
        return user

    def _flag(self, department: Optional[Department]) -> Optional[Department]:
        return with_brigade_flag(department, self.classifier)

    @staticmethod
    def _project(department: Department, fields: List[str]) -> Dict[str, Any]:
        """按点号路径把部门投影为字典，如 "manager.name" """
        out: Dict[str, Any] = {"id": department.id}
        for field in fields:
            value: Any = department
            for key in field.split("."):
                value = value.get(key) if isinstance(value, dict) else getattr(value, key, None)
                if value is None:
                    break
            out[field] = value
        return out

    # ==================== 岗位查询 ====================

    def get_position(self, position_id: str) -> Position:
        return self._call("get_position", [position_id], self.gateway.get_position, position_id)

    def get_positions(self, position_ids: Iterable[str]) -> List[Position]:
        return self.fetcher.fetch_positions(list(position_ids))

    def get_department_positions(self, department_ids: Iterable[str]) -> Optional[List[Position]]:
        """部门下的全部岗位，空输入返回 None"""
        department_ids = list(department_ids)
        if not department_ids:
            return None
        return self._call(
            "get_positions_by_departments", department_ids,
            self.gateway.get_positions_by_departments, department_ids,
        )

    def get_position_attributes(self, position_ids: Iterable[str]) -> List[Dict[str, Any]]:
        position_ids = list(position_ids)
        if not position_ids:
            return []
        return self._call(
            "get_position_attributes", position_ids,
            self.gateway.get_position_attributes, position_ids,
        )

    # ==================== 人员查询 ====================

    def get_user_by_id(self, user_id: Optional[str], context: OperationContext) -> PersonnelNumber:
        """按ID获取人员并记入请求缓存，不存在时抛出 UserNotFound"""
        users = self.fetcher.fetch_personnel([user_id]) if user_id else []
        if not users:
            raise UserNotFound(user_id)
        user = users[0]
        context.cache.record(user)
        return user

    def get_users_by_ids(
        self,
        user_ids: Iterable[Optional[str]],
        context: OperationContext
    ) -> Dict[str, PersonnelNumber]:
        """按ID批量获取人员并记入请求缓存，忽略 None 并去重，返回 id -> 人员"""
        ids = list(dict.fromkeys(user_id for user_id in user_ids if user_id is not None))
        if not ids:
            return {}

        out: Dict[str, PersonnelNumber] = {}
        for user in self.fetcher.fetch_personnel(ids):
            out[user.id] = user
        context.cache.record_many(out.values())
        return out

    # ==================== 部门查询 ====================

    def get_departments(
        self,
        department_ids: Iterable[str],
        indexed: bool = False,
        fields: Optional[List[str]] = None,
    ) -> Union[List[DepartmentView], Dict[str, DepartmentView]]:
        """按ID批量获取部门

        Args:
            department_ids: 部门ID列表
            indexed: 为 True 时返回 id -> 部门 的字典
            fields: 指定时每个部门投影为只含 id 和这些点号路径字段的字典
        """
        department_ids = list(department_ids)
        if not department_ids:
            return {} if indexed else []

        views: List[DepartmentView] = [
            self._project(department, fields) if fields else self._flag(department)
            for department in self.fetcher.fetch_departments(department_ids)
        ]
        if not indexed:
            return views
        return {view["id"] if isinstance(view, dict) else view.id: view for view in views}

    def get_department_by_id(self, department_id: str) -> Optional[Department]:
        """获取单个部门，目录服务报告不存在时返回 None"""
        try:
            department = self._call("get_department", [department_id], self.gateway.get_department, department_id)
        except DepartmentNotFound:
            return None
        return self._flag(department)

    def get_child_departments(self, department_id: str) -> List[Department]:
        departments = self._call(
            "get_department_children", [department_id],
            self.gateway.get_department_children, department_id,
        )
        return [self._flag(department) for department in departments]

    def get_top_department(self, flatten: bool = False) -> Optional[DepartmentWithChildren]:
        """顶级部门，只保留一级子部门（子部门自身的 children 清空）"""
        departments = self._call("get_top_departments", [], self.gateway.get_top_departments, flatten)
        if not departments:
            return None

        top = self._flag(departments[0])
        children = [self._flag(child).model_copy(update={"children": []}) for child in top.children]
        return top.model_copy(update={"children": children})

    # ==================== 以用户为中心 ====================

    @staticmethod
    def get_user_position(user: Optional[PersonnelNumber], with_empty_percent: bool = False) -> Optional[Position]:
        return current_position(user, with_empty_percent)

    def get_user_department(self, user: Optional[PersonnelNumber], with_manager: bool = False) -> Optional[Department]:
        """用户当前岗位所在部门，可选附带负责人岗位"""
        position = current_position(user)
        department = self._flag(position.department) if position else None
        if not with_manager or department is None or not department.manager_id:
            return department

        managers = self.fetcher.fetch_positions([department.manager_id])
        return department.model_copy(update={"manager": managers[0] if managers else None})

    @staticmethod
    def get_user_managed_department(user: Optional[PersonnelNumber]) -> Optional[Department]:
        """用户作为负责人管理的部门：当前岗位所在部门的 manager_id 等于该岗位"""
        position = current_position(user)
        department = position.department if position else None
        if department is not None and department.manager_id == position.id:
            return department
        return None

    @staticmethod
    def is_user_laborer(user: Optional[PersonnelNumber]) -> bool:
        return is_user_laborer(user)

    @staticmethod
    def is_user_rss(user: Optional[PersonnelNumber]) -> bool:
        return is_user_rss(user)

    @staticmethod
    def is_position_laborer(position: Optional[Position]) -> bool:
        return is_position_laborer(position)

    @staticmethod
    def is_position_rss(position: Optional[Position]) -> bool:
        return is_position_rss(position)

    @staticmethod
    def has_position_subordinates(position: Optional[Position]) -> bool:
        return has_position_subordinates(position)

    def get_user_dto(
        self,
        context: OperationContext,
        employee_id: Optional[str] = None,
        no_worker_only: bool = True,
        worker_only: bool = False,
    ) -> UserDto:
        """构造用户 DTO

        未指定 employee_id 时使用调用方本人（no_worker_only 时调用方不能是工人）；
        指定时员工必须存在并在调用方的团队中（worker_only 时员工必须是工人）。
        """
        if not employee_id:
            user = self._require_user(context)
            if no_worker_only and is_user_laborer(user):
                raise IsALaborer(user.id)
        else:
            user = self.get_user_by_id(employee_id, context)
            self.check_employee_in_team(context, employee_id)
            if worker_only and not is_user_laborer(user):
                raise NotALaborer(user.id)

        department = self.get_user_department(user)
        return UserDto(
            id=user.id,
            department_id=department.id if department else None,
            user=user,
            position=current_position(user),
        )

    # ==================== 层级 ====================

    def get_subordinates_by_position_id(
        self,
        position_id: str,
        include_vacancy_fallback: bool = True
    ) -> List[Position]:
        return self.resolver.resolve_occupied_subordinates(position_id, include_vacancy_fallback)

    def get_direct_subordinates(
        self,
        context: OperationContext,
        include_vacancy_fallback: bool = True
    ) -> List[Position]:
        """调用方的下属岗位，在上下文中按参数备忘；调用方没有当前岗位时抛出 PositionNotAssigned"""
        return self.resolver.direct_subordinates(context, include_vacancy_fallback)

    def get_team(self, context: OperationContext) -> List[PersonnelNumber]:
        """调用方的团队

        直接下属中的在岗人员以调用方岗位为透视根、is_my_team=True；
        空缺的直接下属岗位逐级展开，以空缺岗位为透视根、is_my_team=False。
        """
        subordinates = self.get_direct_subordinates(context, include_vacancy_fallback=False)
        user = context.user
        if not subordinates:
            raise NoSubordinates(user.id if user else None)

        team = self.assembler.expand_team(current_position(user), subordinates, True)
        for member in team:
            if member.id not in context.cache:
                context.cache.record(member)
        return team

    def check_employee_in_team(self, context: OperationContext, employee_id: Optional[str]) -> bool:
        subordinates = self.get_direct_subordinates(context)
        if not subordinates:
            user = context.user
            raise NoSubordinates(user.id if user else None)
        if not is_user_in_subordinates(subordinates, employee_id):
            raise EmployeeNotInSubordinates(employee_id)
        return True

    @staticmethod
    def is_user_in_subordinates(subordinates: List[Position], employee_id: Optional[str]) -> bool:
        return is_user_in_subordinates(subordinates, employee_id)

    def is_position_in_subordinates(self, context: OperationContext, position: Optional[Position]) -> bool:
        return self.evaluator.is_position_in_subordinates(context, position)

    def revert_position(self, position: Position) -> Optional[PersonnelNumber]:
        return self.assembler.revert_position(position)

    def revert_personnel_number(self, user: PersonnelNumber) -> Optional[Position]:
        return self.assembler.revert_personnel_number(user)

    # ==================== 权限 ====================

    def is_user_admin(self, context: OperationContext) -> bool:
        return self.evaluator.is_super_admin(context.user)

    def is_user_department_admin(self, user: Optional[PersonnelNumber], department_id: Optional[str]) -> bool:
        return self.evaluator.is_department_admin(user, department_id)

    def get_user_admin_department_ids(self, user: Optional[PersonnelNumber]) -> List[str]:
        return sorted(self.evaluator.admin_department_ids(user))

    def are_departments_in_user_management(self, context: OperationContext, department_ids: Iterable[str]) -> bool:
        return self.evaluator.can_manage(context.user, department_ids)

    # ==================== 部门闭包 ====================

    def get_child_department_ids(self, department_id: str, functional_direction_id: Optional[str] = None) -> List[str]:
        return self._require_repository().child_department_ids(department_id, functional_direction_id)

    def is_user_in_department(self, department_id: str, user_id: str) -> bool:
        return self._require_repository().personnel_number_in_department(department_id, user_id) is not None

    def get_department_positions_count(
        self,
        department_ids: Iterable[str],
        with_personnel_number_only: bool = True,
        with_depth: bool = False,
    ) -> Dict[str, int]:
        """部门岗位数量：with_depth 时包含全部后代部门"""
        repository = self._require_repository()
        department_ids = list(department_ids)
        if not with_depth:
            return repository.department_positions_counts(department_ids, with_personnel_number_only)
        return {
            department_id: repository.department_positions_count_with_depth(department_id, with_personnel_number_only)
            for department_id in department_ids
        }

    # ==================== 缓存 ====================

    @staticmethod
    def get_users_list(context: OperationContext):
        """本次操作中已解析的全部人员（只读）"""
        return context.cache.users()


__all__ = [
    "DirectoryService",
]
