"""配置模块

- DirectorySettings / DatabaseSettings / LoggingSettings: 各自带环境变量前缀
- AppSettings: 聚合三者
- load_settings: 从 YAML 文件加载 AppSettings

快速开始:
    from ssodir.config import load_settings

    settings = load_settings("config/directory.yaml")

配置优先级: 显式参数（含 YAML 文件内容） > 环境变量 > 默认值
"""

from .settings import (
    AppSettings,
    DirectorySettings,
    DatabaseSettings,
    LoggingSettings,
    parse_size,
)

from .loader import (
    CONFIG_FILE_ENV,
    read_yaml,
    load_settings,
)

__all__ = [
    "AppSettings",
    "DirectorySettings",
    "DatabaseSettings",
    "LoggingSettings",
    "parse_size",
    "CONFIG_FILE_ENV",
    "read_yaml",
    "load_settings",
]
