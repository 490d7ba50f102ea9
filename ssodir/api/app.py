"""
目录模块 - 应用工厂

把配置、日志、网关、部门闭包仓储、异常处理器和只读路由装配成一个 FastAPI 应用。
嵌入已有应用时直接使用 create_directory_router 即可。

使用示例:
    # uvicorn "ssodir.api.app:create_app" --factory
    app = create_app(config_path="config/directory.yaml")
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from ssodir.config import AppSettings, load_settings
from ssodir.directory import DirectoryGateway, DirectoryService, HttpDirectoryGateway
from ssodir.exceptions import register_exception_handlers
from ssodir.log import configure_logging, get_logger
from ssodir.repository import DepartmentClosure, DepartmentClosureRepository
from ssodir.version import __version__
from .directory_api import create_directory_router

logger = get_logger()


def create_app(
    settings: Optional[AppSettings] = None,
    config_path: Optional[str] = None,
    gateway: Optional[DirectoryGateway] = None,
    closure_repository: Optional[DepartmentClosure] = None,
    prefix: str = "/directory",
) -> FastAPI:
    """创建目录服务应用

    Args:
        settings: 完整配置；未提供时通过 load_settings(config_path) 加载
        config_path: YAML 配置文件路径，未提供时读取 SSODIR_CONFIG_FILE
        gateway: 目录网关，默认按 settings.directory 创建 HttpDirectoryGateway，应用关闭时关闭其会话
        closure_repository: 部门闭包仓储，默认在配置了 database.url 时创建
        prefix: 路由前缀

    Returns:
        FastAPI 应用，DirectoryService 实例挂在 app.state.directory_service
    """
    settings = settings or load_settings(config_path)
    configure_logging(settings.logging)

    owned_gateway = None
    if gateway is None:
        gateway = owned_gateway = HttpDirectoryGateway(settings.directory)

    if closure_repository is None and settings.database.url:
        closure_repository = DepartmentClosureRepository.from_settings(settings.database)
    if closure_repository is None:
        logger.warning("database.url is not configured; department closure queries are disabled")

    service = DirectoryService(gateway, closure_repository=closure_repository, settings=settings.directory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owned_gateway is not None:
            owned_gateway.close()

    app = FastAPI(title="ssodir", version=__version__, lifespan=lifespan)
    register_exception_handlers(app, debug=settings.debug)
    app.include_router(create_directory_router(service), prefix=prefix, tags=["directory"])
    app.state.directory_service = service

    logger.info(f"Directory API ready: directory={settings.directory.url} prefix={prefix} debug={settings.debug}")
    return app


__all__ = [
    "create_app",
]
