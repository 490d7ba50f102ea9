"""目录 API 模块"""

from .directory_api import create_directory_router
from .app import create_app

__all__ = [
    "create_directory_router",
    "create_app",
]
