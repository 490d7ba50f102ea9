"""YAML 配置加载

配置文件按 AppSettings 的结构分节（directory / database / logging），
未写出的字段取环境变量，再取默认值。

查找顺序:
    1. 调用方传入的 config_path
    2. 环境变量 SSODIR_CONFIG_FILE
    3. 都没有时只使用环境变量和默认值

使用示例:
    from ssodir.config import load_settings

    settings = load_settings("config/directory.yaml", directory={"max_workers": 4})
"""

import os
from typing import Any, Dict, Optional

import yaml

from .settings import AppSettings

CONFIG_FILE_ENV = "SSODIR_CONFIG_FILE"


def read_yaml(config_path: str, base_dir: Optional[str] = None) -> Dict[str, Any]:
    """读取 YAML 文件，空文件返回空字典

    Raises:
        FileNotFoundError: 文件不存在
        ValueError: 顶层不是映射
    """
    if base_dir and not os.path.isabs(config_path):
        config_path = os.path.join(base_dir, config_path)

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"配置文件不存在: {os.path.abspath(config_path)}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"配置文件顶层必须是映射: {config_path}")
    return data


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    config_path: Optional[str] = None,
    base_dir: Optional[str] = None,
    **overrides: Any
) -> AppSettings:
    """加载 AppSettings

    Args:
        config_path: YAML 配置文件路径
        base_dir: 解析相对路径的基础目录
        **overrides: 按节覆盖的配置，如 directory={"url": ...}，与文件内容逐层合并
    """
    config_path = config_path or os.getenv(CONFIG_FILE_ENV)
    data = read_yaml(config_path, base_dir) if config_path else {}
    return AppSettings(**_merge(data, overrides))
