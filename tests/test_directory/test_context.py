"""操作上下文测试"""

import pytest

from ssodir.directory import OperationContext, RequestScopedCache
from tests.helpers import make_user, make_position


class TestRequestScopedCache:
    """请求级缓存测试"""

    def test_record_and_get(self):
        cache = RequestScopedCache()
        cache.record(make_user("u-1"))

        assert "u-1" in cache
        assert cache.get("u-1").id == "u-1"
        assert len(cache) == 1

    def test_record_none_ignored(self):
        cache = RequestScopedCache()
        cache.record(None)

        assert len(cache) == 0

    def test_record_many_same_id_once(self):
        """测试同一ID只保留一条"""
        cache = RequestScopedCache()
        cache.record_many([make_user("u-1"), make_user("u-2"), make_user("u-1", name="Again")])

        assert sorted(cache.users()) == ["u-1", "u-2"]
        assert cache.get("u-1").name == "Again"

    def test_users_snapshot_read_only(self):
        """测试 users() 返回只读快照"""
        cache = RequestScopedCache()
        cache.record(make_user("u-1"))
        snapshot = cache.users()

        with pytest.raises(TypeError):
            snapshot["u-2"] = make_user("u-2")

        cache.record(make_user("u-2"))
        assert "u-2" not in snapshot


class TestOperationContext:
    """操作上下文测试"""

    def test_for_user_records_user(self):
        context = OperationContext.for_user(make_user("u-1"))

        assert context.user.id == "u-1"
        assert "u-1" in context.cache

    def test_lazy_resolver_called_once(self):
        """测试用户解析器延迟调用且只调用一次"""
        calls = []

        def resolver():
            calls.append(1)
            return make_user("u-1")

        context = OperationContext(user_resolver=resolver)
        assert calls == []

        assert context.user.id == "u-1"
        assert context.user.id == "u-1"
        assert calls == [1]
        assert "u-1" in context.cache

    def test_anonymous(self):
        context = OperationContext(user_resolver=lambda: None)

        assert context.user is None
        assert len(context.cache) == 0

    def test_subordinates_memo_per_flag(self):
        """测试下属备忘按参数分开保存"""
        context = OperationContext()
        context.remember_subordinates(True, [make_position("C")])

        assert [p.id for p in context.cached_subordinates(True)] == ["C"]
        assert context.cached_subordinates(False) is None

    def test_contexts_isolated(self):
        """测试两个上下文互不影响"""
        first = OperationContext.for_user(make_user("u-1"))
        second = OperationContext.for_user(make_user("u-2"))
        first.remember_subordinates(True, [make_position("C")])

        assert second.cached_subordinates(True) is None
        assert "u-1" not in second.cache
