"""成功响应信封

目录路由返回的数据多为冻结的 pydantic 实体（岗位、人员、部门）及其列表，
权限检查返回 {"result": bool}。Resp.OK 把它们序列化为：
    {"status": "success", "message": "请求成功", "msg_details": [], "data": ...}

data 为 None（例如空缺岗位没有在岗人员）时输出 {}。
"""

from enum import Enum
from typing import Any, Generic, List, TypeVar

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

T = TypeVar('T')


class ResponseStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class ItemResponse(BaseModel, Generic[T]):
    """用于 response_model 的信封声明

    使用示例:
        @router.get("/team", response_model=ItemResponse[List[PersonnelNumber]])
    """
    status: str = Field(default=ResponseStatus.SUCCESS.value, description="响应状态")
    message: str = Field(default="请求成功", description="响应消息")
    msg_details: List[str] = Field(default_factory=list, description="详细信息")
    data: T = Field(description="数据")


def _to_jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, (list, tuple)):
        return [_to_jsonable(item) for item in data]
    # 部门ID集合等输出为排序后的列表
    if isinstance(data, (set, frozenset)):
        return sorted(_to_jsonable(item) for item in data)
    if isinstance(data, dict):
        return {key: _to_jsonable(value) for key, value in data.items()}
    return data


class Resp:
    """响应快捷类

    使用示例:
        return Resp.OK(data=service.get_team(context))
        return Resp.OK(data={"result": manageable}, message="校验完成")
    """

    @staticmethod
    def OK(data: Any = None, message: str = "请求成功") -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={
                "status": ResponseStatus.SUCCESS.value,
                "message": message,
                "msg_details": [],
                "data": {} if data is None else _to_jsonable(data),
            },
        )
