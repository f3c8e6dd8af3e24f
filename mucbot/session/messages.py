"""群聊消息的数据结构。

此模块定义了会话引擎使用的消息类型：
- InboundMessage: 从群聊房间收到的消息，每个入站事件构造一次，分发后丢弃
- OutboundMessage: 要发送到群聊房间的消息
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element

from mucbot.stanzas import MUC_USER_NS, bare_jid, child, child_text, jid_resource

if TYPE_CHECKING:
    from mucbot.session.identity import IdentityTracker


@dataclass
class InboundMessage:
    """
    从群聊房间接收的消息。

    ``sender`` 是发送者的真实JID（当节本身或身份跟踪器能提供时），
    否则回退为发送者在房间中的昵称。
    """

    sender: str  # 发送者JID（或昵称）
    room: str  # 房间JID
    body: str  # 消息文本内容
    nick: str = ""  # 发送者在房间中的昵称
    raw: Element | None = None  # 原始节

    @classmethod
    def from_stanza(cls, stanza: Element, identity: IdentityTracker | None = None) -> InboundMessage:
        """
        从groupchat类型的message节构造消息。

        Args:
            stanza: 入站message节
            identity: 可选的身份跟踪器，用于把昵称解析为JID

        Returns:
            入站消息
        """
        origin = stanza.get("from", "")
        nick = jid_resource(origin)
        sender = ""

        item = child(child(stanza, "x", MUC_USER_NS), "item")
        if item is not None and item.get("jid"):
            sender = bare_jid(item.get("jid"))
        elif identity is not None and nick:
            user = identity.find_by_name(nick)
            if user is not None:
                sender = user.jid

        return cls(
            sender=sender or nick,
            room=bare_jid(origin),
            body=child_text(stanza, "body") or "",
            nick=nick,
            raw=stanza,
        )


@dataclass
class OutboundMessage:
    """
    要发送到群聊房间的消息。

    设置 ``reply_to`` （用户JID）时，消息正文前会加上 ``@mentionName ``。
    """

    room: str  # 目标房间JID
    body: str  # 消息内容
    reply_to: str | None = None  # 要@的用户JID（可选）
