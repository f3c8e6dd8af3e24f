"""配置加载工具。

此模块提供了配置文件的加载、保存和格式转换功能。
配置文件使用JSON格式，键名使用camelCase，
但在Python代码中使用snake_case（符合Pydantic规范）。
"""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from mucbot.config.schema import BotConfig


def get_config_path() -> Path:
    """
    获取默认配置文件路径。

    Returns:
        配置文件路径（~/.mucbot/config.json）
    """
    return Path.home() / ".mucbot" / "config.json"


def load_config(config_path: Path | None = None) -> BotConfig:
    """
    从文件加载配置或创建默认配置。

    如果配置文件不存在或加载失败，会返回默认配置对象（环境变量仍然生效）。
    加载时会把camelCase键名转换为snake_case。

    Args:
        config_path: 可选的配置文件路径，如果未提供则使用默认路径

    Returns:
        加载的配置对象
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            return BotConfig.model_validate(convert_keys(data))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            logger.warning("Using default configuration.")

    return BotConfig()


def save_config(config: BotConfig, config_path: Path | None = None) -> Path:
    """
    保存配置到文件。

    保存前会将snake_case键名转换为camelCase。

    Args:
        config: 要保存的配置对象
        config_path: 可选的保存路径，如果未提供则使用默认路径

    Returns:
        实际写入的路径
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = convert_to_camel(config.model_dump())

    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    return path


def convert_keys(data: Any) -> Any:
    """
    将camelCase键名转换为snake_case（用于Pydantic）。

    递归处理字典和列表。
    """
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """将snake_case键名转换为camelCase，递归处理字典和列表。"""
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """
    将camelCase转换为snake_case。

    例如：keepaliveIntervalS -> keepalive_interval_s
    """
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)


def snake_to_camel(name: str) -> str:
    """
    将snake_case转换为camelCase。

    例如：join_rooms -> joinRooms
    """
    components = name.split("_")
    return components[0] + "".join(x.title() for x in components[1:])
