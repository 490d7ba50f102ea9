"""响应模块

使用示例:
    from ssodir.response import Resp, ItemResponse

    @router.get("/team", response_model=ItemResponse[List[PersonnelNumber]])
    def get_team():
        return Resp.OK(data=team)
"""

from .base_response import (
    ResponseStatus,
    ItemResponse,
    Resp,
)

__all__ = [
    "ResponseStatus",
    "ItemResponse",
    "Resp",
]
