"""使用slixmpp实现的XMPP传输。

此模块把slixmpp客户端适配为 ``BaseTransport``：
连接生命周期事件和所有原始的iq/message/presence节都被转换成
``TransportEvent`` 推入入站队列，由会话控制器按顺序处理。
"""

from typing import Any
from xml.etree.ElementTree import Element

from loguru import logger
from slixmpp import ClientXMPP
from slixmpp.xmlstream.handler import Callback
from slixmpp.xmlstream.matcher import MatchXPath

from mucbot.errors import TransportError
from mucbot.stanzas import stanza_kind
from mucbot.transport.base import BaseTransport
from mucbot.transport.events import TransportEvent

STANZA_KINDS = ("iq", "message", "presence")


class XMPPTransport(BaseTransport):
    """
    基于slixmpp的XMPP传输。

    认证、TLS和帧处理都交给slixmpp。保活由会话的KeepaliveService负责，
    因此关闭了slixmpp自带的空白保活。
    """

    name = "xmpp"

    def __init__(self, jid: str, password: str, host: str, port: int = 5222):
        super().__init__()
        self.jid = jid
        self.password = password
        self.host = host
        self.port = port
        self._client: ClientXMPP | None = None

    def _build_client(self) -> ClientXMPP:
        client = ClientXMPP(self.jid, self.password)
        client.whitespace_keepalive = False

        client.add_event_handler("session_start", self._on_session_start)
        client.add_event_handler("disconnected", self._on_disconnected)
        client.add_event_handler("connection_failed", self._on_failure)
        client.add_event_handler("failed_auth", self._on_failure)
        client.add_event_handler("stream_error", self._on_failure)

        # 把原始节原样转交给会话，不经过slixmpp的插件层
        for kind in STANZA_KINDS:
            client.register_handler(
                Callback(
                    f"mucbot {kind}",
                    MatchXPath(f"{{{client.default_ns}}}{kind}"),
                    self._on_stanza,
                )
            )
        return client

    async def connect(self) -> None:
        """
        开始连接XMPP服务器。

        连接完成（流协商和资源绑定结束）时会推送 ``connected`` 事件。
        """
        if self._client is None:
            self._client = self._build_client()
        logger.info(f"Connecting to {self.host}:{self.port} as {self.jid}...")
        self._client.connect(host=self.host, port=self.port)

    async def disconnect(self) -> None:
        if self._client is None:
            return
        try:
            await self._client.disconnect()
        except Exception as e:
            logger.warning(f"Error while disconnecting: {e}")
        finally:
            self._client = None

    def send(self, stanza: Element) -> None:
        if self._client is None or not self._connected:
            logger.warning(f"XMPP stream not open, dropping outbound {stanza_kind(stanza)}")
            return
        self._client.send_xml(stanza)

    def send_raw(self, data: str) -> None:
        if self._client is None or not self._connected:
            raise TransportError("XMPP stream not open")
        self._client.send_raw(data)

    def _on_session_start(self, event: Any) -> None:
        logger.info("XMPP session started")
        self.publish_nowait(TransportEvent.connected())

    def _on_disconnected(self, reason: Any) -> None:
        self.publish_nowait(TransportEvent.disconnected(str(reason) if reason else None))

    def _on_failure(self, error: Any) -> None:
        self.publish_nowait(TransportEvent.failure(str(error)))

    def _on_stanza(self, stanza: Any) -> None:
        self.publish_nowait(TransportEvent.of(stanza.xml))
