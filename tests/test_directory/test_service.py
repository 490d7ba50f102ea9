"""DirectoryService 测试

使用 conftest 中的标准场景:
    A (boss)
    ├── C (U1)
    └── B (空缺)
        └── D (U2)
"""

import pytest

from ssodir.directory import (
    DirectoryService,
    DirectoryUnavailable,
    DepartmentWithChildren,
    OperationContext,
    UserNotFound,
    NoSubordinates,
    EmployeeNotInSubordinates,
    NotALaborer,
    IsALaborer,
    PositionNotAssigned,
)
from ssodir.exceptions import AuthenticationException, ErrorCode
from tests.helpers import FakeGateway, make_user, make_position, make_department, held


class TestGetTeam:
    """get_team 测试"""

    def test_scenario_team(self, service, boss_context):
        """测试团队：U1 以 A 为根属于本人团队，U2 以空缺岗位 B 为根"""
        team = service.get_team(boss_context)

        assert [member.id for member in team] == ["u-1", "u-2"]
        assert team[0].positions[0].global_position_id == "A"
        assert team[0].positions[0].is_my_team is True
        assert team[1].positions[0].global_position_id == "B"
        assert team[1].positions[0].is_my_team is False

    def test_team_members_cached(self, service, boss_context):
        """测试团队成员记入请求缓存"""
        service.get_team(boss_context)

        assert set(service.get_users_list(boss_context)) == {"u-boss", "u-1", "u-2"}

    def test_no_subordinates(self, service):
        """测试没有下属时抛出 NoSubordinates"""
        user = make_user("u-lonely", positions=[held(make_position("Z"))])

        with pytest.raises(NoSubordinates) as exc_info:
            service.get_team(OperationContext.for_user(user))

        assert exc_info.value.code == ErrorCode.NO_SUBORDINATES
        assert exc_info.value.status_code == 403

    def test_no_position(self, service):
        with pytest.raises(PositionNotAssigned):
            service.get_team(OperationContext.for_user(make_user("u-nobody")))

    def test_directory_call_made_once_per_context(self, service, scenario_gateway, boss_context):
        """测试同一上下文中多次调用只请求一次直接下属"""
        service.get_team(boss_context)
        service.get_team(boss_context)

        assert scenario_gateway.calls_to("get_direct_subordinates").count("A") == 1


class TestSubordinates:
    """下属查询测试"""

    def test_direct_subordinates_with_fallback(self, service, boss_context):
        assert [p.id for p in service.get_direct_subordinates(boss_context)] == ["C", "D"]

    def test_direct_subordinates_without_fallback(self, service, boss_context):
        result = service.get_direct_subordinates(boss_context, include_vacancy_fallback=False)

        assert [p.id for p in result] == ["C", "B"]

    def test_subordinates_by_position_id(self, service):
        assert [p.id for p in service.get_subordinates_by_position_id("A")] == ["C", "D"]

    def test_check_employee_in_team(self, service, boss_context):
        """测试空缺岗位下的员工也在团队中"""
        assert service.check_employee_in_team(boss_context, "u-2") is True

    def test_check_employee_not_in_team(self, service, boss_context):
        with pytest.raises(EmployeeNotInSubordinates):
            service.check_employee_in_team(boss_context, "u-stranger")

    def test_position_in_subordinates(self, service, boss_context, scenario):
        assert service.is_position_in_subordinates(boss_context, scenario["C"]) is True
        assert service.is_position_in_subordinates(boss_context, scenario["D"]) is False


class TestGetUserDto:
    """get_user_dto 测试"""

    def test_self(self, service, boss_context):
        """测试不指定员工时返回调用方本人"""
        dto = service.get_user_dto(boss_context)

        assert dto.id == "u-boss"
        assert dto.department_id == "d-1"
        assert dto.position.id == "A"

    def test_laborer_caller_rejected(self, service):
        worker = make_user("u-w", positions=[held(make_position("W", is_worker=True))])

        with pytest.raises(IsALaborer):
            service.get_user_dto(OperationContext.for_user(worker))

    def test_laborer_caller_allowed(self, service):
        worker = make_user("u-w", positions=[held(make_position("W", is_worker=True))])

        dto = service.get_user_dto(OperationContext.for_user(worker), no_worker_only=False)

        assert dto.id == "u-w"

    def test_employee_in_team(self, service, boss_context):
        dto = service.get_user_dto(boss_context, employee_id="u-2")

        assert dto.id == "u-2"
        assert dto.position is None
        assert "u-2" in boss_context.cache

    def test_employee_must_be_laborer(self, service, boss_context):
        with pytest.raises(NotALaborer):
            service.get_user_dto(boss_context, employee_id="u-1", worker_only=True)

    def test_unknown_employee(self, service, boss_context):
        with pytest.raises(UserNotFound):
            service.get_user_dto(boss_context, employee_id="u-ghost")

    def test_anonymous(self, service):
        with pytest.raises(AuthenticationException):
            service.get_user_dto(OperationContext(user_resolver=lambda: None))


class TestUsers:
    """人员查询测试"""

    def test_get_user_by_id(self, service):
        """测试按ID获取人员并记入请求缓存"""
        context = OperationContext()

        assert service.get_user_by_id("u-1", context).id == "u-1"
        assert "u-1" in context.cache

    def test_get_user_by_id_missing(self, service):
        with pytest.raises(UserNotFound):
            service.get_user_by_id("u-ghost", OperationContext())

        with pytest.raises(UserNotFound):
            service.get_user_by_id(None, OperationContext())

    def test_get_users_by_ids_dedup(self, service, scenario_gateway):
        """测试忽略 None 并去重"""
        users = service.get_users_by_ids(["u-1", None, "u-1", "u-2"], OperationContext())

        assert sorted(users) == ["u-1", "u-2"]
        assert scenario_gateway.calls_to("get_personnel_by_ids") == [["u-1", "u-2"]]

    def test_get_users_by_ids_empty(self, service, scenario_gateway):
        assert service.get_users_by_ids([None], OperationContext()) == {}
        assert scenario_gateway.calls_to("get_personnel_by_ids") == []

    def test_get_users_records_context(self, service):
        context = OperationContext()

        service.get_users_by_ids(["u-1", "u-2"], context)

        assert set(service.get_users_list(context)) == {"u-1", "u-2"}


class TestUserCentric:
    """以用户为中心的查询测试"""

    def test_user_position(self, service, scenario):
        assert service.get_user_position(scenario["boss"]).id == "A"
        assert service.get_user_position(None) is None

    def test_user_department(self, service, scenario):
        department = service.get_user_department(scenario["boss"])

        assert department.id == "d-1"
        assert department.is_brigade is False
        assert department.manager is None

    def test_user_department_with_manager(self, service, scenario):
        department = service.get_user_department(scenario["boss"], with_manager=True)

        assert department.manager.id == "A"

    def test_managed_department(self, service, scenario):
        """测试负责人管理的部门"""
        assert service.get_user_managed_department(scenario["boss"]).id == "d-1"

    def test_not_a_manager(self, service):
        department = make_department("d-1", manager_id="A")
        user = make_user("u-x", positions=[held(make_position("C", department=department))])

        assert service.get_user_managed_department(user) is None
        assert service.get_user_managed_department(make_user("u-y")) is None


class TestDepartments:
    """部门查询测试"""

    def test_get_departments(self, service):
        departments = service.get_departments(["d-1"])

        assert [d.id for d in departments] == ["d-1"]
        assert departments[0].is_brigade is False

    def test_get_departments_indexed(self, service):
        departments = service.get_departments(["d-1"], indexed=True)

        assert list(departments) == ["d-1"]

    def test_get_departments_fields(self, service):
        """测试按点号路径投影字段"""
        departments = service.get_departments(["d-1"], fields=["name", "manager.name"])

        assert departments == [{"id": "d-1", "name": "Цех №1", "manager.name": None}]

    def test_get_departments_empty(self, service, scenario_gateway):
        assert service.get_departments([]) == []
        assert service.get_departments([], indexed=True) == {}
        assert scenario_gateway.calls_to("get_departments_by_ids") == []

    def test_get_department_by_id(self, service):
        assert service.get_department_by_id("d-1").name == "Цех №1"

    def test_get_department_by_id_missing(self, service):
        assert service.get_department_by_id("d-missing") is None

    def test_get_child_departments(self, scenario_gateway):
        scenario_gateway.children["d-1"] = [make_department("d-11", name="Бригада №1", parent_id="d-1")]
        service = DirectoryService(scenario_gateway)

        children = service.get_child_departments("d-1")

        assert [d.id for d in children] == ["d-11"]
        assert children[0].is_brigade is True

    def test_get_top_department(self):
        """测试顶级部门只保留一级子部门"""
        top = DepartmentWithChildren(
            id="root",
            name="Завод",
            children=[
                DepartmentWithChildren(
                    id="c-1",
                    name="Участок 1",
                    children=[DepartmentWithChildren(id="gc-1", name="Бригада")],
                ),
            ],
        )
        service = DirectoryService(FakeGateway(top_departments=[top]))

        result = service.get_top_department()

        assert result.id == "root"
        assert result.is_brigade is False
        assert [c.id for c in result.children] == ["c-1"]
        assert result.children[0].is_brigade is True
        assert result.children[0].children == []

    def test_get_top_department_empty(self):
        assert DirectoryService(FakeGateway()).get_top_department() is None


class TestPositions:
    """岗位查询测试"""

    def test_get_positions(self, service):
        assert [p.id for p in service.get_positions(["A", "C"])] == ["A", "C"]

    def test_get_department_positions_empty(self, service):
        assert service.get_department_positions([]) is None

    def test_get_department_positions(self, service):
        positions = service.get_department_positions(["d-1"])

        assert {p.id for p in positions} == {"A", "B", "C", "D"}

    def test_get_position_attributes_empty(self, service):
        assert service.get_position_attributes([]) == []

    def test_get_position_unexpected_error(self, service):
        """测试网关的非业务异常转换为 DirectoryUnavailable"""
        with pytest.raises(DirectoryUnavailable) as exc_info:
            service.get_position("missing")

        assert exc_info.value.operation == "get_position"
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_get_position_authentication_failure(self, service, scenario_gateway):
        """测试目录服务拒绝认证转换为 DirectoryUnavailable"""
        scenario_gateway.fail_on["get_position"] = AuthenticationException("目录服务拒绝认证")

        with pytest.raises(DirectoryUnavailable) as exc_info:
            service.get_position("A")

        assert exc_info.value.ids == ["A"]
        assert isinstance(exc_info.value.__cause__, AuthenticationException)


class TestPermissions:
    """权限相关测试"""

    def test_is_user_admin(self, service):
        admin = make_user("u-root", permissions=["super_admin"])

        assert service.is_user_admin(OperationContext.for_user(admin)) is True
        assert service.is_user_admin(OperationContext()) is False

    def test_admin_department_ids_sorted(self, service):
        user = make_user("u", department_permissions={"d-2": ["admin"], "d-1": ["admin"], "d-3": ["view"]})

        assert service.get_user_admin_department_ids(user) == ["d-1", "d-2"]

    def test_is_user_department_admin(self, service):
        user = make_user("u", department_permissions={"d-1": ["admin"]})

        assert service.is_user_department_admin(user, "d-1") is True
        assert service.is_user_department_admin(user, "d-11") is False

    def test_departments_in_management(self, service):
        user = make_user("u", department_permissions={"d-1": ["admin"]})
        context = OperationContext.for_user(user)

        assert service.are_departments_in_user_management(context, ["d-11", "d-12"]) is True
        assert service.are_departments_in_user_management(context, ["d-2"]) is False


class TestClosurePassthrough:
    """部门闭包查询测试"""

    def test_child_department_ids(self, service):
        assert service.get_child_department_ids("d-1") == ["d-11", "d-12", "d-111"]
        assert service.get_child_department_ids("d-1", "fd-prod") == ["d-11", "d-111"]

    def test_is_user_in_department(self, service, closure_repository):
        closure_repository.add_position("d-111", "C", "u-1")

        assert service.is_user_in_department("d-1", "u-1") is True
        assert service.is_user_in_department("d-12", "u-1") is False

    def test_department_positions_count(self, service, closure_repository):
        closure_repository.add_position("d-1", "A", "u-boss")
        closure_repository.add_position("d-11", "C", "u-1")
        closure_repository.add_position("d-11", "B", None)

        assert service.get_department_positions_count(["d-1", "d-11", "d-2"]) == {"d-1": 1, "d-11": 1, "d-2": 0}
        assert service.get_department_positions_count(["d-11"], with_personnel_number_only=False) == {"d-11": 2}
        assert service.get_department_positions_count(["d-1"], with_depth=True) == {"d-1": 2}

    def test_without_repository(self, scenario_gateway):
        service = DirectoryService(scenario_gateway)

        with pytest.raises(ValueError):
            service.get_child_department_ids("d-1")
