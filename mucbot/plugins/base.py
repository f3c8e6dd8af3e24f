"""处理器注册的基础类型。

此模块定义了处理器条目和插件：
- HandlerKind: 分发通道（普通消息或@提及）
- HandlerEntry: 已编译的正则、回调和所属插件标签
- Plugin: 带所属标签的一组注册，由调用者合并进注册表
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Iterator

# 回调签名：callback(session, message, captures)，可以是普通函数或协程函数
HandlerCallback = Callable[[Any, Any, list[str | None]], Awaitable[None] | None]

# 修饰符字母到re标志的映射。g和y是JavaScript风格的修饰符，接受但忽略
_FLAG_LETTERS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "a": re.ASCII,
    "u": re.UNICODE,
    "g": 0,
    "y": 0,
}


class HandlerKind(str, Enum):
    """分发通道。"""

    MESSAGE = "message"
    MENTION = "mention"


def parse_flags(flags: str | int | re.RegexFlag) -> int:
    """
    把修饰符数据转换为re标志。

    Args:
        flags: re标志整数，或修饰符字母字符串（例如"im"）

    Returns:
        re标志整数

    Raises:
        ValueError: 包含未知的修饰符字母
    """
    if isinstance(flags, int):
        return int(flags)
    value = 0
    for letter in flags:
        if letter not in _FLAG_LETTERS:
            raise ValueError(f"Unknown regex modifier: {letter!r}")
        value |= _FLAG_LETTERS[letter]
    return value


def compile_pattern(pattern: str, flags: str | int = 0) -> re.Pattern:
    """
    用模式文本和修饰符编译正则。

    模式和修饰符是两个独立的字段，从不从已编译对象的字符串形式还原。

    Raises:
        TypeError: pattern不是字符串
        ValueError: 修饰符未知
        re.error: 模式无法编译
    """
    if not isinstance(pattern, str):
        raise TypeError(f"pattern must be text, got {type(pattern).__name__}")
    return re.compile(pattern, parse_flags(flags))


@dataclass
class HandlerEntry:
    """
    一个已注册的处理器。

    只用于追加，注册后不会被移除或重排。
    """

    pattern: re.Pattern  # 已编译的正则
    callback: HandlerCallback  # 匹配时调用的回调
    owner: str | None = None  # 所属插件标签，仅用于错误归属

    def describe(self) -> str:
        return f"/{self.pattern.pattern}/"


class Plugin:
    """
    一个扩展提供的处理器集合。

    插件模块在模块级别创建 ``plugin = Plugin("name")``，并用装饰器注册处理器::

        plugin = Plugin("weather")

        @plugin.mention(r"weather in (\\w+)", "i")
        async def weather(session, message, captures):
            ...

    注册顺序会被保留，合并进 ``HandlerRegistry`` 时每个条目都带上插件名。
    """

    def __init__(self, name: str):
        self.name = name
        self._entries: list[tuple[HandlerKind, HandlerEntry]] = []

    def register(
        self,
        kind: HandlerKind | str,
        pattern: str,
        callback: HandlerCallback,
        flags: str | int = 0,
    ) -> HandlerEntry:
        entry = HandlerEntry(compile_pattern(pattern, flags), callback, self.name)
        self._entries.append((HandlerKind(kind), entry))
        return entry

    def message(self, pattern: str, flags: str | int = 0) -> Callable[[HandlerCallback], HandlerCallback]:
        """装饰器：注册普通消息处理器。"""
        def decorator(callback: HandlerCallback) -> HandlerCallback:
            self.register(HandlerKind.MESSAGE, pattern, callback, flags)
            return callback
        return decorator

    def mention(self, pattern: str, flags: str | int = 0) -> Callable[[HandlerCallback], HandlerCallback]:
        """装饰器：注册@提及处理器。"""
        def decorator(callback: HandlerCallback) -> HandlerCallback:
            self.register(HandlerKind.MENTION, pattern, callback, flags)
            return callback
        return decorator

    def entries(self) -> Iterator[tuple[HandlerKind, HandlerEntry]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Plugin({self.name!r}, handlers={len(self)})"
