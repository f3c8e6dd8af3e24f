"""处理器分发。

此模块把一条入站群聊消息分发给注册表中所有匹配的处理器：
1. 丢弃空消息和机器人自己发出的消息
2. 按注册顺序运行所有匹配的普通消息处理器
3. 如果消息@了机器人，再按注册顺序运行所有匹配的@提及处理器

每个回调在调用点被单独隔离：回调抛出的异常只记录日志，
不会影响同一消息的其他处理器，也不会影响后续事件。
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from mucbot.plugins.base import HandlerEntry
from mucbot.plugins.registry import HandlerRegistry
from mucbot.session.messages import InboundMessage

if TYPE_CHECKING:
    from mucbot.session.controller import Session


@dataclass
class DispatchResult:
    """一次分发的结果统计。"""

    matched: int = 0  # 匹配并被调用的处理器数
    failed: int = 0  # 其中抛出异常的数量
    mention: bool = False  # 消息是否被识别为@提及


class Dispatcher:
    """
    消息分发器。

    回调可以是普通函数或协程函数；协程会被就地等待，
    所以同一次分发中的回调仍然是顺序执行的。长时间运行的回调
    会推迟后续的分发。
    """

    def __init__(self, registry: HandlerRegistry):
        self.registry = registry

    async def dispatch(self, session: Session, message: InboundMessage) -> DispatchResult:
        """
        分发一条入站群聊消息。

        Args:
            session: 当前会话，作为第一个参数传给回调
            message: 入站消息

        Returns:
            分发结果统计
        """
        result = DispatchResult()
        if not message.body or self._is_self(session, message):
            return result

        await self._run(session, message, self.registry.message_handlers, result)

        # 握手完成之前没有提及模式，视为不匹配
        pattern = session.mention_pattern
        if pattern is not None and pattern.search(message.body):
            result.mention = True
            await self._run(session, message, self.registry.mention_handlers, result)

        return result

    @staticmethod
    def _is_self(session: Session, message: InboundMessage) -> bool:
        if message.sender == session.jid:
            return True
        return bool(session.nick) and message.nick == session.nick

    async def _run(
        self,
        session: Session,
        message: InboundMessage,
        handlers: list[HandlerEntry],
        result: DispatchResult,
    ) -> None:
        for entry in handlers:
            match = entry.pattern.search(message.body)
            if not match:
                continue

            result.matched += 1
            captures = list(match.groups())
            try:
                outcome = entry.callback(session, message, captures)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                result.failed += 1
                if entry.owner:
                    logger.exception(
                        f"Plugin '{entry.owner}' had encountered an error (matching '{entry.describe()}')"
                    )
                else:
                    logger.exception("Encountered an error")
