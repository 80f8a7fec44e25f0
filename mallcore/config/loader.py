"""YAML 配置读取

使用示例:
    from mallcore.config import AppSettings, load_yaml_config

    settings = load_yaml_config("config/settings.yaml", AppSettings)
"""

import os
from typing import Any, Dict, Optional, Type, TypeVar

import yaml


SettingsT = TypeVar("SettingsT")


class ConfigLoader:
    """读取 YAML 文件为字典，结果按绝对路径缓存

    空文件读取为 {}。文件不存在抛出 FileNotFoundError，格式错误抛出 yaml.YAMLError。
    """

    _cache: Dict[str, Dict[str, Any]] = {}

    @staticmethod
    def resolve(config_path: str, base_dir: Optional[str] = None) -> str:
        """相对路径优先相对 base_dir，其次相对当前工作目录"""
        if not os.path.isabs(config_path) and base_dir:
            config_path = os.path.join(base_dir, config_path)
        return os.path.abspath(config_path)

    @classmethod
    def load(cls, config_path: str, base_dir: Optional[str] = None, use_cache: bool = True) -> Dict[str, Any]:
        path = cls.resolve(config_path, base_dir)
        if use_cache and path in cls._cache:
            return cls._cache[path]
        if not os.path.isfile(path):
            raise FileNotFoundError(f"配置文件不存在: {path}")

        with open(path, encoding="utf-8") as stream:
            data = yaml.safe_load(stream) or {}
        if use_cache:
            cls._cache[path] = data
        return data

    @classmethod
    def reload(cls, config_path: str, base_dir: Optional[str] = None) -> Dict[str, Any]:
        """丢弃缓存后重新读取"""
        cls._cache.pop(cls.resolve(config_path, base_dir), None)
        return cls.load(config_path, base_dir)

    @classmethod
    def clear_cache(cls) -> None:
        cls._cache.clear()


def load_yaml_config(
    config_path: str,
    settings_class: Type[SettingsT],
    base_dir: Optional[str] = None,
    **overrides: Any,
) -> SettingsT:
    """读取 YAML 并构造配置对象

    overrides 覆盖同名的顶层键；环境变量仍高于 YAML 中的值。

    使用示例:
        settings = load_yaml_config("config/settings.yaml", AppSettings, debug=True)
    """
    values = {**ConfigLoader.load(config_path, base_dir), **overrides}
    return settings_class(**values)
