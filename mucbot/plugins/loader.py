"""插件加载。

按调用者给出的模块名列表导入插件模块，收集每个模块的 ``plugin`` 属性。
不扫描目录：要加载哪些扩展完全由配置决定。
"""

import importlib
from typing import Iterable

from loguru import logger

from mucbot.plugins.base import Plugin


def load_plugins(module_names: Iterable[str]) -> list[Plugin]:
    """
    导入插件模块并收集其中的插件。

    某个插件导入失败或没有 ``plugin`` 属性时只记录日志并跳过，
    不会中断其他插件的加载。

    Args:
        module_names: 点分模块名列表，例如 ``["mucbot.plugins.builtin"]``

    Returns:
        按给定顺序加载成功的插件列表
    """
    plugins: list[Plugin] = []
    for name in module_names:
        try:
            module = importlib.import_module(name)
        except Exception as e:
            logger.error(f"Failed to import plugin module {name}: {e}")
            continue

        plugin = getattr(module, "plugin", None)
        if not isinstance(plugin, Plugin):
            logger.warning(f"Module {name} has no `plugin` attribute, skipping")
            continue
        plugins.append(plugin)
    return plugins
