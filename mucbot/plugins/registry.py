"""处理器注册表。

此模块实现了处理器注册表，按注册顺序保存两个独立的处理器列表：
普通消息处理器和@提及处理器。注册表由调用者创建并传入会话。
"""

from typing import Iterable

from loguru import logger

from mucbot.plugins.base import (
    HandlerCallback,
    HandlerEntry,
    HandlerKind,
    Plugin,
    compile_pattern,
)


class HandlerRegistry:
    """
    消息与@提及处理器注册表。

    - 只追加：条目从不移除或重排
    - 允许重复：同一模式和回调注册两次会各自触发
    """

    def __init__(self, entries: Iterable[tuple[HandlerKind, HandlerEntry]] | None = None):
        """
        初始化注册表。

        Args:
            entries: 可选的已合并条目列表，按顺序追加
        """
        self._handlers: dict[HandlerKind, list[HandlerEntry]] = {
            HandlerKind.MESSAGE: [],
            HandlerKind.MENTION: [],
        }
        if entries:
            self.extend(entries)

    def register(
        self,
        kind: HandlerKind | str,
        pattern: str,
        callback: HandlerCallback,
        flags: str | int = 0,
        owner: str | None = None,
    ) -> HandlerEntry:
        """
        注册一个处理器。

        Args:
            kind: "message" 或 "mention"
            pattern: 正则模式文本
            callback: 匹配时调用的回调，签名为 ``(session, message, captures)``
            flags: re标志整数或修饰符字母（例如"i"）
            owner: 可选的所属插件标签

        Returns:
            新追加的处理器条目

        Raises:
            ValueError: kind或修饰符无效
        """
        entry = HandlerEntry(compile_pattern(pattern, flags), callback, owner)
        self.add(HandlerKind(kind), entry)
        return entry

    def on_message(self, pattern: str, callback: HandlerCallback, flags: str | int = 0,
                   owner: str | None = None) -> HandlerEntry:
        return self.register(HandlerKind.MESSAGE, pattern, callback, flags, owner)

    def on_mention(self, pattern: str, callback: HandlerCallback, flags: str | int = 0,
                   owner: str | None = None) -> HandlerEntry:
        return self.register(HandlerKind.MENTION, pattern, callback, flags, owner)

    def add(self, kind: HandlerKind, entry: HandlerEntry) -> None:
        self._handlers[kind].append(entry)

    def extend(self, entries: Iterable[tuple[HandlerKind, HandlerEntry]]) -> None:
        for kind, entry in entries:
            self.add(HandlerKind(kind), entry)

    def add_plugin(self, plugin: Plugin) -> None:
        """合并一个插件的所有处理器，保留其注册顺序。"""
        self.extend(plugin.entries())
        logger.info(f"Loaded Plugin: {plugin.name}")

    def handlers(self, kind: HandlerKind | str) -> list[HandlerEntry]:
        """返回指定通道的处理器（副本），按注册顺序。"""
        return list(self._handlers[HandlerKind(kind)])

    @property
    def message_handlers(self) -> list[HandlerEntry]:
        return self.handlers(HandlerKind.MESSAGE)

    @property
    def mention_handlers(self) -> list[HandlerEntry]:
        return self.handlers(HandlerKind.MENTION)

    def __len__(self) -> int:
        """返回两个通道的处理器总数。"""
        return sum(len(v) for v in self._handlers.values())
