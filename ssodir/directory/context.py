"""操作上下文

一次逻辑操作（通常是一次 HTTP 请求）期间的状态都放在 OperationContext 中，
由调用方显式创建并传入各业务方法，不存在进程级单例：

    - 当前认证用户（通过可注入的解析器延迟获取，首次访问时记入缓存）
    - RequestScopedCache：本次操作中解析过的人员
    - 直接下属备忘：按 include_vacancy_fallback 参数分别缓存

使用示例:
    context = OperationContext(user_resolver=lambda: gateway.get_user_by_token(token))
    team = service.get_team(context)
    seen = context.cache.users()
"""

from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .schemas import PersonnelNumber, Position

UserResolver = Callable[[], Optional[PersonnelNumber]]


class RequestScopedCache:
    """请求级人员缓存

    id -> PersonnelNumber，无淘汰策略，生命周期等于一次操作。
    """

    def __init__(self):
        self._users: Dict[str, PersonnelNumber] = {}

    def record(self, user: Optional[PersonnelNumber]) -> None:
        """记录一个人员，None 忽略"""
        if user is not None:
            self._users[user.id] = user

    def record_many(self, users: Iterable[PersonnelNumber]) -> None:
        for user in users:
            self.record(user)

    def get(self, user_id: str) -> Optional[PersonnelNumber]:
        return self._users.get(user_id)

    def users(self) -> Mapping[str, PersonnelNumber]:
        """返回当前已收集人员的只读快照"""
        return MappingProxyType(dict(self._users))

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._users

    def __len__(self) -> int:
        return len(self._users)


class OperationContext:
    """一次逻辑操作的上下文"""

    def __init__(
        self,
        user_resolver: Optional[UserResolver] = None,
        user: Optional[PersonnelNumber] = None,
        cache: Optional[RequestScopedCache] = None,
    ):
        self._user_resolver = user_resolver
        self._user = user
        self._resolved = user is not None
        self.cache = cache if cache is not None else RequestScopedCache()
        self._subordinates: Dict[bool, List[Position]] = {}
        if user is not None:
            self.cache.record(user)

    @classmethod
    def for_user(cls, user: PersonnelNumber) -> "OperationContext":
        """以已知用户创建上下文"""
        return cls(user=user)

    @property
    def user(self) -> Optional[PersonnelNumber]:
        """当前认证用户，首次访问时解析并记入缓存"""
        if not self._resolved:
            self._user = self._user_resolver() if self._user_resolver else None
            self._resolved = True
            self.cache.record(self._user)
        return self._user

    def cached_subordinates(self, include_vacancy_fallback: bool) -> Optional[List[Position]]:
        positions = self._subordinates.get(include_vacancy_fallback)
        return list(positions) if positions is not None else None

    def remember_subordinates(self, include_vacancy_fallback: bool, positions: List[Position]) -> None:
        self._subordinates[include_vacancy_fallback] = list(positions)


__all__ = [
    "UserResolver",
    "RequestScopedCache",
    "OperationContext",
]
