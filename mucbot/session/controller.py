"""会话控制器。

此模块驱动与群聊服务器的线性握手，并在会话激活后路由入站事件：

    DISCONNECTED -> NEGOTIATING -> AWAITING_PROFILE -> AWAITING_ROOMS -> JOINING -> ACTIVE

1. 传输连接后：宣告在线、启动保活、发送自身资料发现请求（``startup``）
2. 收到 ``startup`` 结果：读取昵称和@提及名，构造提及模式，发送房间发现请求（``rooms``）
3. 收到 ``rooms`` 结果：重建房间目录，加入配置的房间（或全部发现的房间）

所有出站请求都是发后即忘的，响应作为独立的入站事件到达并按关联ID匹配。
入站事件逐个处理完成后才处理下一个，因此状态转换和用户表的修改是全序的。
"""

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping
from xml.etree.ElementTree import Element

from loguru import logger

from mucbot.config.schema import BotConfig
from mucbot.heartbeat.service import KeepaliveService
from mucbot.plugins.base import HandlerCallback, HandlerEntry, HandlerKind
from mucbot.plugins.registry import HandlerRegistry
from mucbot.session.dispatcher import DispatchResult, Dispatcher
from mucbot.session.identity import IdentityTracker, User
from mucbot.session.messages import InboundMessage, OutboundMessage
from mucbot.stanzas import (
    ROOMS_ID,
    STARTUP_ID,
    USERPROFILE_ID,
    available_presence,
    bare_jid,
    child,
    child_text,
    children,
    error_text,
    groupchat_message,
    is_error,
    is_groupchat,
    is_result,
    join_presence,
    muc_user_x,
    rooms_query,
    stanza_kind,
    startup_query,
)
from mucbot.transport.base import BaseTransport
from mucbot.transport.events import TransportEvent
from mucbot.utils.helpers import truncate_string


class SessionState(str, Enum):
    """会话状态，严格按顺序前进；STALLED表示握手请求被服务器报错。"""

    DISCONNECTED = "disconnected"
    NEGOTIATING = "negotiating"
    AWAITING_PROFILE = "awaiting_profile"
    AWAITING_ROOMS = "awaiting_rooms"
    JOINING = "joining"
    ACTIVE = "active"
    STALLED = "stalled"


# 每个等待状态所期待的关联ID
_PENDING_IDS = {
    SessionState.AWAITING_PROFILE: STARTUP_ID,
    SessionState.AWAITING_ROOMS: ROOMS_ID,
}


@dataclass
class RoomInfo:
    """房间发现结果中的一个房间。"""

    jid: str  # 房间地址
    name: str  # 显示名
    id: str | None = None  # 服务器分配的数字ID


def mention_pattern_for(mention_name: str) -> re.Pattern:
    """``@\\b<mention_name>\\b``"""
    return re.compile(rf"@\b{re.escape(mention_name)}\b")


class Session:
    """
    一个机器人进程的群聊会话。

    会话持有握手状态、自身身份、房间目录、身份跟踪器和分发器。
    处理器注册表由调用者构造并传入；插件回调通过
    ``register_handler()``、``send_message()``、``rooms`` 和 ``users``
    与会话交互。
    """

    def __init__(
        self,
        config: BotConfig,
        transport: BaseTransport,
        registry: HandlerRegistry | None = None,
    ):
        """
        初始化会话。

        Args:
            config: 机器人配置
            transport: 传输实现
            registry: 可选的处理器注册表

        Raises:
            ConfigError: 缺少必需的配置项（jid、password）
        """
        config.validate_required()

        self.config = config
        self.transport = transport
        self.registry = registry or HandlerRegistry()
        self.dispatcher = Dispatcher(self.registry)
        self.identity = IdentityTracker(transport)
        self.keepalive = KeepaliveService(
            transport,
            interval_s=config.keepalive_interval_s,
            enabled=config.keepalive_enabled,
        )

        self.state = SessionState.DISCONNECTED
        self.jid = bare_jid(config.jid)  # 自身JID（不含资源）
        self.full_jid = config.full_jid  # 自身完整JID
        self.nick: str | None = None  # 自身显示昵称
        self.mention_name: str | None = None  # 自身@提及名
        self.mention_pattern: re.Pattern | None = None  # 提及检测模式
        self.stalled_on: str | None = None  # 被服务器报错的握手请求ID
        self._rooms: dict[str, RoomInfo] = {}
        self._running = False

    # ------------------------------------------------------------------
    # 公共接口
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """
        连接并处理入站事件，直到传输断开或会话被停止。

        没有自动重连：是否重启由外部决定。
        """
        self._running = True
        logger.info("Negotiating session...")
        await self.transport.connect()

        while self._running:
            event = await self.transport.next_event()
            await self.handle_event(event)

    async def stop(self) -> None:
        """停止会话并断开传输。"""
        self._running = False
        self.keepalive.stop()
        await self.transport.disconnect()

    async def handle_event(self, event: TransportEvent) -> DispatchResult | None:
        """
        处理一个入站事件直到完成。

        Args:
            event: 传输层事件

        Returns:
            如果事件是被分发的群聊消息，返回分发结果，否则返回None
        """
        if event.kind == "connected":
            await self._on_connected()
        elif event.kind == "disconnected":
            self._on_disconnected(event.error)
        elif event.kind == "error":
            logger.error(f"Transport error: {event.error}")
        elif event.stanza is not None:
            return await self._handle_stanza(event.stanza)
        return None

    def register_handler(
        self,
        kind: HandlerKind | str,
        pattern: str,
        flags: str | int,
        callback: HandlerCallback,
        owner: str | None = None,
    ) -> HandlerEntry:
        """
        注册一个消息或@提及处理器。

        Args:
            kind: "message" 或 "mention"
            pattern: 正则模式文本
            flags: re标志整数或修饰符字母（例如"i"）
            callback: 回调，签名为 ``(session, message, captures)``
            owner: 可选的所属插件标签

        Returns:
            新追加的处理器条目
        """
        return self.registry.register(kind, pattern, callback, flags, owner)

    def on_message(self, pattern: str, callback: HandlerCallback, flags: str | int = 0) -> HandlerEntry:
        return self.register_handler(HandlerKind.MESSAGE, pattern, flags, callback)

    def on_mention(self, pattern: str, callback: HandlerCallback, flags: str | int = 0) -> HandlerEntry:
        return self.register_handler(HandlerKind.MENTION, pattern, flags, callback)

    def send_message(self, room: str, body: str, reply_to: str | None = None) -> None:
        """
        向房间发送一条群聊消息。

        Args:
            room: 目标房间JID
            body: 消息内容
            reply_to: 可选的用户JID，设置时在正文前加上 ``@mentionName ``
        """
        self.send(OutboundMessage(room=room, body=body, reply_to=reply_to))

    def send(self, msg: OutboundMessage) -> None:
        body = msg.body
        if msg.reply_to:
            user = self.identity.get(msg.reply_to)
            if user is not None and user.mention_name:
                body = f"@{user.mention_name} {body}"
            else:
                logger.warning(f"No mention name known for {msg.reply_to}, sending without mention")
        self.transport.send(groupchat_message(msg.room, body, self.full_jid))

    @property
    def rooms(self) -> Mapping[str, RoomInfo]:
        """最近一次房间发现得到的房间目录（只读）。"""
        return MappingProxyType(self._rooms)

    @property
    def users(self) -> Mapping[str, User]:
        """已知用户（只读）。"""
        return MappingProxyType(self.identity.users)

    # ------------------------------------------------------------------
    # 握手
    # ------------------------------------------------------------------

    def _set_state(self, state: SessionState) -> None:
        logger.debug(f"Session state: {self.state.value} -> {state.value}")
        self.state = state

    async def _on_connected(self) -> None:
        self._set_state(SessionState.NEGOTIATING)
        self.stalled_on = None
        self.transport.send(available_presence())
        await self.keepalive.start()

        self.transport.send(startup_query())
        self._set_state(SessionState.AWAITING_PROFILE)

    def _on_disconnected(self, reason: str | None) -> None:
        logger.warning(f"Disconnected from server{': ' + reason if reason else ''}")
        self.keepalive.stop()
        self._set_state(SessionState.DISCONNECTED)
        self._running = False

    def _on_startup_result(self, stanza: Element) -> None:
        query = child(stanza, "query")
        nick = child_text(query, "name")
        if not nick:
            logger.error("Startup result carries no nick, cannot join rooms")
            self._stall(STARTUP_ID)
            return

        self.nick = nick
        self.mention_name = child_text(query, "mention_name") or None
        if self.mention_name:
            self.mention_pattern = mention_pattern_for(self.mention_name)
        else:
            logger.warning("Startup result carries no mention name, mentions will not be detected")
            self.mention_pattern = None

        self._set_state(SessionState.AWAITING_ROOMS)
        logger.info("Getting room list...")
        self.transport.send(rooms_query(self.config.conference_host))

    def _on_rooms_result(self, stanza: Element) -> None:
        rooms: dict[str, RoomInfo] = {}
        for item in children(child(stanza, "query"), "item"):
            jid = item.get("jid")
            if not jid:
                continue
            rooms[jid] = RoomInfo(
                jid=jid,
                name=item.get("name", ""),
                id=child_text(child(item, "x"), "id"),
            )
        self._rooms = rooms

        self._set_state(SessionState.JOINING)
        self._join_rooms()
        self._set_state(SessionState.ACTIVE)

    def _join_rooms(self) -> None:
        """加入配置的房间列表；未配置时加入所有发现的房间。"""
        logger.info("Joining rooms...")
        targets = self.config.join_rooms if self.config.join_rooms is not None else list(self._rooms)
        for room in targets:
            self.transport.send(join_presence(room, self.nick, self.full_jid))
        logger.info(f"Done! Joined {len(targets)} room(s)")

    def _stall(self, request_id: str) -> None:
        self.stalled_on = request_id
        self._set_state(SessionState.STALLED)
        logger.error(f"Handshake stalled waiting for '{request_id}', no retry will be attempted")

    # ------------------------------------------------------------------
    # 入站节
    # ------------------------------------------------------------------

    async def _handle_stanza(self, stanza: Element) -> DispatchResult | None:
        if is_result(stanza):
            self._handle_result(stanza)
        elif is_error(stanza):
            self._handle_error(stanza)
        elif is_groupchat(stanza):
            message = InboundMessage.from_stanza(stanza, self.identity)
            logger.debug(f"Message from {message.sender} in {message.room}: {truncate_string(message.body, 80)}")
            return await self.dispatcher.dispatch(self, message)
        elif stanza_kind(stanza) == "presence" and muc_user_x(stanza) is not None:
            self.identity.handle_presence(stanza)
        return None

    def _handle_result(self, stanza: Element) -> None:
        """按关联ID分派iq结果；不是当前期待的结果一律忽略。"""
        request_id = stanza.get("id")
        if request_id == USERPROFILE_ID:
            self.identity.handle_profile(stanza)
        elif request_id is not None and request_id == _PENDING_IDS.get(self.state):
            if request_id == STARTUP_ID:
                self._on_startup_result(stanza)
            else:
                self._on_rooms_result(stanza)
        else:
            logger.debug(f"Ignoring unexpected result id={request_id} in state {self.state.value}")

    def _handle_error(self, stanza: Element) -> None:
        request_id = stanza.get("id")
        logger.error(
            f"Server reported error on {stanza_kind(stanza)} "
            f"(id={request_id}, from={stanza.get('from')}): {error_text(stanza)}"
        )
        if request_id is not None and request_id == _PENDING_IDS.get(self.state):
            self._stall(request_id)
