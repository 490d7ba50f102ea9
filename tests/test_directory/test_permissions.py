"""权限判定测试

部门树（见 conftest.closure_repository）:
    d-1
    ├── d-11
    │   └── d-111
    └── d-12
    d-2
"""

import pytest

from ssodir.directory import HierarchyResolver, OperationContext, PermissionEvaluator
from tests.helpers import make_user, make_position


@pytest.fixture
def evaluator(closure_repository, scenario_gateway):
    return PermissionEvaluator(closure_repository, HierarchyResolver(scenario_gateway))


class TestAdminFlags:
    """管理员标记测试"""

    def test_super_admin(self):
        assert PermissionEvaluator.is_super_admin(make_user("u", permissions=["super_admin"])) is True
        assert PermissionEvaluator.is_super_admin(make_user("u")) is False
        assert PermissionEvaluator.is_super_admin(None) is False

    def test_department_admin(self):
        user = make_user("u", department_permissions={"d-1": ["admin"], "d-2": ["view"]})

        assert PermissionEvaluator.is_department_admin(user, "d-1") is True
        assert PermissionEvaluator.is_department_admin(user, "d-2") is False
        assert PermissionEvaluator.is_department_admin(user, "d-3") is False
        assert PermissionEvaluator.is_department_admin(user, None) is False

    def test_admin_department_ids(self):
        user = make_user("u", department_permissions={"d-1": ["admin", "view"], "d-2": ["view"], "d-3": ["admin"]})

        assert PermissionEvaluator.admin_department_ids(user) == {"d-1", "d-3"}
        assert PermissionEvaluator.admin_department_ids(None) == set()


class TestCanManage:
    """can_manage 测试"""

    def test_super_admin_manages_everything(self, evaluator):
        user = make_user("u", permissions=["super_admin"])

        assert evaluator.can_manage(user, ["d-2", "unknown"]) is True

    def test_descendants_of_admin_department(self, evaluator):
        """测试 d-1 管理员可管理 d-11、d-12"""
        user = make_user("u", department_permissions={"d-1": ["admin"]})

        assert evaluator.can_manage(user, ["d-11", "d-12"]) is True
        assert evaluator.can_manage(user, ["d-111"]) is True

    def test_one_outside_fails(self, evaluator):
        """测试任一部门不在管理范围内则失败"""
        user = make_user("u", department_permissions={"d-1": ["admin"]})

        assert evaluator.can_manage(user, ["d-11", "d-2"]) is False

    def test_directly_administered(self, evaluator):
        user = make_user("u", department_permissions={"d-2": ["admin"]})

        assert evaluator.can_manage(user, ["d-2"]) is True

    def test_no_admin_departments(self, evaluator):
        assert evaluator.can_manage(make_user("u"), ["d-11"]) is False

    def test_without_repository(self):
        """测试没有闭包仓储时只认直接管理"""
        evaluator = PermissionEvaluator()
        user = make_user("u", department_permissions={"d-1": ["admin"]})

        assert evaluator.can_manage(user, ["d-1"]) is True
        assert evaluator.can_manage(user, ["d-11"]) is False


class TestIsPositionInSubordinates:
    """is_position_in_subordinates 测试"""

    def test_direct_subordinate(self, evaluator, boss_context, scenario):
        assert evaluator.is_position_in_subordinates(boss_context, scenario["C"]) is True
        assert evaluator.is_position_in_subordinates(boss_context, scenario["B"]) is True

    def test_deeper_position_not_direct(self, evaluator, boss_context, scenario):
        """测试不做空缺回退：空缺岗位下的岗位不算直接下属"""
        assert evaluator.is_position_in_subordinates(boss_context, scenario["D"]) is False

    def test_department_admin(self, evaluator, scenario_gateway):
        """测试岗位所在部门的管理员直接通过且不请求下属"""
        user = make_user("u-admin", department_permissions={"d-9": ["admin"]})
        position = make_position("X", department_id="d-9")

        assert evaluator.is_position_in_subordinates(OperationContext.for_user(user), position) is True
        assert scenario_gateway.calls_to("get_direct_subordinates") == []

    def test_super_admin(self, evaluator):
        user = make_user("u-root", permissions=["super_admin"])

        assert evaluator.is_position_in_subordinates(OperationContext.for_user(user), make_position("X")) is True

    def test_none_position(self, evaluator, boss_context):
        assert evaluator.is_position_in_subordinates(boss_context, None) is False
