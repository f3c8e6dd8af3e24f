"""会话模块：握手状态机、身份跟踪和处理器分发。"""

from mucbot.session.controller import RoomInfo, Session, SessionState
from mucbot.session.dispatcher import DispatchResult, Dispatcher
from mucbot.session.identity import IdentityTracker, User
from mucbot.session.messages import InboundMessage, OutboundMessage

__all__ = [
    "DispatchResult",
    "Dispatcher",
    "IdentityTracker",
    "InboundMessage",
    "OutboundMessage",
    "RoomInfo",
    "Session",
    "SessionState",
    "User",
]
