"""传输层模块，定义会话引擎与聊天协议客户端之间的窄接口。

``XMPPTransport`` 依赖slixmpp，因此不在这里导入，需要时从
``mucbot.transport.xmpp`` 导入。
"""

from mucbot.transport.base import BaseTransport
from mucbot.transport.events import TransportEvent
from mucbot.transport.memory import MemoryTransport

__all__ = ["BaseTransport", "TransportEvent", "MemoryTransport"]
