"""测试辅助工具"""

from .directory_helpers import (
    make_user,
    make_position,
    make_department,
    held,
    FakeGateway,
)

__all__ = [
    "make_user",
    "make_position",
    "make_department",
    "held",
    "FakeGateway",
]
