"""成功响应信封测试"""

import json

from ssodir.response import ResponseStatus, Resp, ItemResponse
from tests.helpers import make_user, make_department, make_position


def get_response_content(response) -> dict:
    """从 JSONResponse 中获取内容"""
    return json.loads(response.body.decode())


class TestOK:
    """Resp.OK 测试"""

    def test_envelope(self):
        response = Resp.OK(data={"result": True})
        content = get_response_content(response)

        assert response.status_code == 200
        assert content == {
            "status": ResponseStatus.SUCCESS.value,
            "message": "请求成功",
            "msg_details": [],
            "data": {"result": True},
        }

    def test_message(self):
        assert get_response_content(Resp.OK(message="校验完成"))["message"] == "校验完成"

    def test_vacant_position_occupant(self):
        """测试空缺岗位没有在岗人员时 data 为空对象"""
        assert get_response_content(Resp.OK(data=None))["data"] == {}

    def test_nested_none_kept(self):
        content = get_response_content(Resp.OK(data={"manager": None}))

        assert content["data"] == {"manager": None}


class TestEntities:
    """实体序列化测试"""

    def test_department(self):
        content = get_response_content(Resp.OK(data=make_department("d-1", manager_id="A")))

        assert content["data"]["id"] == "d-1"
        assert content["data"]["manager_id"] == "A"
        assert content["data"]["is_brigade"] is None

    def test_team_members(self):
        """测试人员列表中的权限集合导出为列表"""
        user = make_user("u-1", permissions=["super_admin"], department_permissions={"d-1": ["admin"]})

        content = get_response_content(Resp.OK(data=[user]))

        assert content["data"][0]["permissions"] == ["super_admin"]
        assert content["data"][0]["department_permissions"] == {"d-1": ["admin"]}

    def test_positions_tuple(self):
        content = get_response_content(Resp.OK(data=(make_position("C"), make_position("D"))))

        assert [p["id"] for p in content["data"]] == ["C", "D"]

    def test_admin_department_ids_sorted(self):
        content = get_response_content(Resp.OK(data={"ids": {"d-2", "d-1"}}))

        assert content["data"]["ids"] == ["d-1", "d-2"]

    def test_item_response_model(self):
        """测试泛型响应模型可用于文档声明"""
        item = ItemResponse[dict](data={"result": True})

        assert item.status == "success"
        assert item.msg_details == []
        assert item.data == {"result": True}
