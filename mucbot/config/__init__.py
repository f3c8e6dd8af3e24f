"""mucbot配置模块。

此模块提供了配置文件的加载、保存和模式定义功能。
"""

from mucbot.config.loader import get_config_path, load_config, save_config
from mucbot.config.schema import BotConfig

__all__ = ["BotConfig", "load_config", "save_config", "get_config_path"]
