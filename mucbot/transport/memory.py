"""进程内传输实现。

不连接任何服务器：记录所有发出的节和原始写入，并允许调用者注入入站事件。
用于测试以及在没有服务器的情况下试运行插件。
"""

from xml.etree import ElementTree as ET

from loguru import logger

from mucbot.errors import TransportError
from mucbot.stanzas import stanza_kind
from mucbot.transport.base import BaseTransport
from mucbot.transport.events import TransportEvent


class MemoryTransport(BaseTransport):
    """
    记录出站流量的内存传输。

    - ``sent``: 所有通过 ``send()`` 发出的节，按发送顺序
    - ``raw``: 所有通过 ``send_raw()`` 写入的原始数据
    """

    name = "memory"

    def __init__(self):
        super().__init__()
        self.sent: list[ET.Element] = []
        self.raw: list[str] = []

    async def connect(self) -> None:
        await self.publish(TransportEvent.connected())

    async def disconnect(self) -> None:
        if self._connected:
            await self.publish(TransportEvent.disconnected())

    def send(self, stanza: ET.Element) -> None:
        if not self._connected:
            logger.warning(f"Not connected, dropping outbound {stanza_kind(stanza)}")
            return
        self.sent.append(stanza)

    def send_raw(self, data: str) -> None:
        if not self._connected:
            raise TransportError("no open stream")
        self.raw.append(data)

    async def feed(self, stanza: ET.Element | str) -> None:
        """
        注入一个入站节。

        Args:
            stanza: 节元素或XML字符串
        """
        if isinstance(stanza, str):
            stanza = ET.fromstring(stanza)
        await self.publish(TransportEvent.of(stanza))

    def sent_of(self, kind: str) -> list[ET.Element]:
        """返回指定种类（iq/message/presence）的已发送节。"""
        return [s for s in self.sent if stanza_kind(s) == kind]

    def clear(self) -> None:
        self.sent.clear()
        self.raw.clear()
