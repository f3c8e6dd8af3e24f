"""传输层的事件类型。

此模块定义了传输层推送给会话控制器的入站事件：
- connected: 流已建立并完成认证
- disconnected: 连接断开
- error: 传输层错误（套接字、认证、流错误）
- stanza: 收到一个结构化的节（iq、message、presence）
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal
from xml.etree.ElementTree import Element

EventKind = Literal["connected", "disconnected", "error", "stanza"]


@dataclass
class TransportEvent:
    """
    从传输层接收的入站事件。

    会话控制器按顺序逐个消费这些事件，每个事件处理完成后才处理下一个。
    """

    kind: EventKind  # 事件类型
    stanza: Element | None = None  # kind为"stanza"时携带的节
    error: str | None = None  # kind为"error"时的错误描述
    timestamp: datetime = field(default_factory=datetime.now)  # 事件时间戳

    @classmethod
    def connected(cls) -> "TransportEvent":
        return cls("connected")

    @classmethod
    def disconnected(cls, reason: str | None = None) -> "TransportEvent":
        return cls("disconnected", error=reason)

    @classmethod
    def failure(cls, error: str) -> "TransportEvent":
        return cls("error", error=error)

    @classmethod
    def of(cls, stanza: Element) -> "TransportEvent":
        return cls("stanza", stanza=stanza)
