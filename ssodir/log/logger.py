"""
日志工具

类库内部只通过 get_logger() 取得 "ssodir.*" 命名空间下的日志器，不主动配置处理器。
宿主应用（或 ssodir.app.create_app）调用 configure_logging() 为 "ssodir" 日志器
挂上控制台 / 滚动文件处理器。
"""

import inspect
import logging
import os
import time
from logging.handlers import RotatingFileHandler
from typing import Optional

from ssodir.config import LoggingSettings

ROOT_LOGGER_NAME = "ssodir"

DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s"


class MicrosecondFormatter(logging.Formatter):
    """时间戳精确到微秒，便于对齐并发批次请求的日志"""

    def formatTime(self, record, datefmt=None):
        seconds = time.strftime(datefmt or "%Y-%m-%d %H:%M:%S", self.converter(record.created))
        return "%s.%06d" % (seconds, (record.created - int(record.created)) * 1000000)


def configure_logging(
    settings: Optional[LoggingSettings] = None,
    logger_name: str = ROOT_LOGGER_NAME,
) -> logging.Logger:
    """按 LoggingSettings 配置类库日志器

    重复调用会替换之前挂上的处理器。日志仍向上传播，宿主的根日志器照常收到记录。

    Args:
        settings: 日志配置，默认从 SSODIR_LOG_* 环境变量读取
        logger_name: 要配置的日志器，默认 "ssodir"

    使用示例:
        configure_logging(LoggingSettings(level="DEBUG", file_path="logs/directory.log"))
    """
    settings = settings or LoggingSettings()
    target = logging.getLogger(logger_name)
    target.setLevel(getattr(logging, settings.level.upper(), logging.INFO))

    for handler in list(target.handlers):
        target.removeHandler(handler)
        handler.close()

    formatter = MicrosecondFormatter(DEFAULT_LOG_FORMAT)

    if settings.enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        target.addHandler(console_handler)

    if settings.file_path:
        log_dir = os.path.dirname(settings.file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=settings.file_path,
            maxBytes=settings.parsed_file_max_bytes,
            backupCount=settings.file_backup_count,
            encoding=settings.file_encoding,
        )
        file_handler.setFormatter(formatter)
        target.addHandler(file_handler)

    return target


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """获取日志器

    - 无参数：使用调用模块的 __name__，如 ssodir/directory/batch.py -> "ssodir.directory.batch"
    - 不带点号的简写自动加前缀："gateway" -> "ssodir.gateway"
    - 带点号的名称原样使用："requests.adapters"
    """
    if name is None:
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        name = caller.f_globals.get('__name__', ROOT_LOGGER_NAME) if caller is not None else ROOT_LOGGER_NAME
    elif name != ROOT_LOGGER_NAME and '.' not in name:
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)


# 目录网关的请求失败日志
gateway_logger = get_logger("gateway")
