"""处理器注册模块。

此模块提供了处理器注册表、插件和插件加载功能。
"""

from mucbot.plugins.base import HandlerEntry, HandlerKind, Plugin, compile_pattern
from mucbot.plugins.loader import load_plugins
from mucbot.plugins.registry import HandlerRegistry

__all__ = [
    "HandlerEntry",
    "HandlerKind",
    "HandlerRegistry",
    "Plugin",
    "compile_pattern",
    "load_plugins",
]
