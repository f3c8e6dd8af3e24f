"""身份跟踪器。

此模块维护已加入房间中的已知用户，并通过异步的用户资料查询
为每个用户补充@提及名。查询结果作为独立的入站事件到达，按JID匹配，
因此查找必须容忍用户不存在的情况。
"""

from dataclasses import dataclass
from xml.etree.ElementTree import Element

from loguru import logger

from mucbot.stanzas import (
    SELF_PRESENCE_CODE,
    bare_jid,
    child,
    child_text,
    jid_resource,
    muc_user_x,
    profile_query,
    status_codes,
)
from mucbot.transport.base import BaseTransport


@dataclass
class User:
    """
    房间中观察到的用户。

    首次观察到该JID的房间在线状态时创建，之后资料查询返回时原地更新。
    不会被显式删除。
    """

    jid: str  # 用户JID（唯一键）
    name: str  # 显示名（房间昵称）
    mention_name: str | None = None  # @提及名，资料查询返回后填入


class IdentityTracker:
    """
    基于房间在线状态和资料查询的用户缓存。

    每个参与者的在线状态都会立即触发一次 ``userprofile`` 查询，
    不去重也不限流：N个同时加入的用户会产生N个并发查询。
    """

    def __init__(self, transport: BaseTransport):
        self.transport = transport
        self.users: dict[str, User] = {}  # 按JID索引的用户

    def handle_presence(self, stanza: Element) -> User | None:
        """
        处理一个房间在线状态节。

        忽略自身在线状态（状态码110）和没有披露真实JID的条目。

        Args:
            stanza: 带 ``muc#user`` 扩展的presence节

        Returns:
            创建或更新的用户，忽略时返回None
        """
        x = muc_user_x(stanza)
        if x is None:
            return None
        if SELF_PRESENCE_CODE in status_codes(x):
            return None

        item = child(x, "item")
        jid = bare_jid(item.get("jid")) if item is not None else ""
        if not jid:
            logger.debug(f"Presence from {stanza.get('from')} carries no jid, ignoring")
            return None

        name = jid_resource(stanza.get("from"))
        user = self.users.get(jid)
        if user is None:
            user = User(jid=jid, name=name)
            self.users[jid] = user
        else:
            user.name = name

        self.transport.send(profile_query(jid))
        return user

    def handle_profile(self, stanza: Element) -> User | None:
        """
        处理一个用户资料查询结果。

        没有query负载，或者该JID已不在跟踪中（例如用户已离开）时，
        结果被静默丢弃。

        Args:
            stanza: 关联ID为 ``userprofile`` 的iq结果

        Returns:
            更新的用户，丢弃时返回None
        """
        query = child(stanza, "query")
        if query is None:
            return None

        jid = bare_jid(stanza.get("from"))
        user = self.users.get(jid)
        if user is None:
            logger.debug(f"Profile for untracked user {jid}, dropping")
            return None

        user.mention_name = child_text(query, "mention_name")
        return user

    def get(self, jid: str) -> User | None:
        return self.users.get(bare_jid(jid))

    def find_by_name(self, name: str) -> User | None:
        """按显示名查找已跟踪的用户。"""
        for user in self.users.values():
            if user.name == name:
                return user
        return None

    def __contains__(self, jid: str) -> bool:
        return bare_jid(jid) in self.users

    def __len__(self) -> int:
        return len(self.users)
