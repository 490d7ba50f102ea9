"""
目录模块 - 只读 API

提供当前用户团队、下属、管理部门等查询接口。只使用 GET 请求。

认证：
    访问令牌优先取 Authorization: Bearer 头，其次取 auth_token Cookie；
    都没有时返回 401。每个请求创建独立的 OperationContext。
"""

from typing import Callable, List, Optional

from fastapi import APIRouter, Cookie, Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ssodir.exceptions import Err, ErrorCode
from ssodir.response import Resp, ItemResponse
from ssodir.directory import (
    DirectoryService,
    OperationContext,
    PersonnelNumber,
    Position,
    Department,
)

bearer_scheme = HTTPBearer(auto_error=False)

TokenUserResolver = Callable[[str], Optional[PersonnelNumber]]


def create_directory_router(
    service: DirectoryService,
    user_resolver: Optional[TokenUserResolver] = None,
) -> APIRouter:
    """创建目录只读路由

    Args:
        service: 目录业务服务
        user_resolver: 令牌 -> 当前用户，默认使用网关的 get_user_by_token

    Returns:
        APIRouter

    生成的路由:
        GET /team                     - 当前用户的团队
        GET /subordinates             - 当前用户的下属岗位
        GET /managed-department       - 当前用户作为负责人管理的部门
        GET /position/occupant        - 岗位的在岗人员
        GET /departments/children     - 子部门
        GET /departments/manageable   - 部门是否都在当前用户管理范围内

    使用示例:
        app = FastAPI()
        register_exception_handlers(app)
        app.include_router(create_directory_router(service), prefix="/directory")
    """
    router = APIRouter()
    resolve_user = user_resolver or service.gateway.get_user_by_token

    def get_context(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        auth_token: Optional[str] = Cookie(None),
    ) -> OperationContext:
        token = credentials.credentials if credentials else auth_token
        if not token:
            raise Err.auth("请先登录", code=ErrorCode.NOT_LOGGED_IN)

        user = resolve_user(token)
        if user is None:
            raise Err.auth("无法验证凭证")
        return OperationContext.for_user(user)

    @router.get(
        "/team",
        response_model=ItemResponse[List[PersonnelNumber]],
        summary="获取我的团队",
    )
    def get_team(context: OperationContext = Depends(get_context)):
        """当前用户的团队，没有下属时返回 403"""
        return Resp.OK(data=service.get_team(context))

    @router.get(
        "/subordinates",
        response_model=ItemResponse[List[Position]],
        summary="获取我的下属岗位",
    )
    def get_subordinates(
        include_vacancy_fallback: bool = Query(True, description="是否用空缺岗位的下属替代空缺岗位"),
        context: OperationContext = Depends(get_context),
    ):
        return Resp.OK(data=service.get_direct_subordinates(context, include_vacancy_fallback))

    @router.get(
        "/managed-department",
        response_model=ItemResponse[Optional[Department]],
        summary="获取我管理的部门",
    )
    def get_managed_department(context: OperationContext = Depends(get_context)):
        return Resp.OK(data=service.get_user_managed_department(context.user))

    @router.get(
        "/position/occupant",
        response_model=ItemResponse[Optional[PersonnelNumber]],
        summary="获取岗位的在岗人员",
    )
    def get_position_occupant(
        position_id: str = Query(..., description="岗位ID"),
        context: OperationContext = Depends(get_context),
    ):
        """岗位空缺时 data 为空"""
        position = service.get_position(position_id)
        if not service.is_position_in_subordinates(context, position):
            raise Err.forbidden("岗位不在管理范围内", code=ErrorCode.POSITION_OUT_OF_SCOPE, position_id=position_id)
        return Resp.OK(data=service.revert_position(position))

    @router.get(
        "/departments/children",
        response_model=ItemResponse[List[Department]],
        summary="获取子部门",
    )
    def get_child_departments(
        department_id: str = Query(..., description="部门ID"),
        context: OperationContext = Depends(get_context),
    ):
        return Resp.OK(data=service.get_child_departments(department_id))

    @router.get(
        "/departments/manageable",
        response_model=ItemResponse[dict],
        summary="检查部门管理权限",
    )
    def check_departments_manageable(
        department_ids: List[str] = Query(..., description="部门ID列表"),
        context: OperationContext = Depends(get_context),
    ):
        result = service.are_departments_in_user_management(context, department_ids)
        return Resp.OK(data={"result": result})

    return router


__all__ = [
    "create_directory_router",
]
