"""群聊服务器的基础传输接口。

此模块定义了会话引擎与聊天协议客户端之间的窄接口。
会话引擎只依赖这里的能力：连接、入站事件流、发送节、写入原始数据。
认证、加密和字节层的帧处理都由具体实现负责。
"""

import asyncio
from abc import ABC, abstractmethod
from xml.etree.ElementTree import Element

from mucbot.transport.events import TransportEvent


class BaseTransport(ABC):
    """
    传输实现的抽象基类。

    入站事件通过异步队列传递，实现类调用 ``publish()`` 推送事件，
    会话控制器调用 ``next_event()`` 逐个消费。

    出站发送是"发后即忘"的：没有确认，也没有背压信号。
    """

    name: str = "base"  # 传输名称

    def __init__(self):
        self.events: asyncio.Queue[TransportEvent] = asyncio.Queue()  # 入站事件队列
        self._connected = False  # 连接状态标志

    @abstractmethod
    async def connect(self) -> None:
        """
        开始建立会话。

        这是异步的：完成时通过 ``connected`` 事件通知，而不是通过返回值。
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """断开连接并释放资源。"""
        pass

    @abstractmethod
    def send(self, stanza: Element) -> None:
        """
        发送一个结构化的节。

        尽力而为：不返回确认，不因投递问题向调用者抛出异常。

        Args:
            stanza: 要发送的节
        """
        pass

    @abstractmethod
    def send_raw(self, data: str) -> None:
        """
        直接在原始流上写入数据（用于保活）。

        Args:
            data: 要写入的原始文本

        Raises:
            TransportError: 当前没有打开的流
        """
        pass

    async def publish(self, event: TransportEvent) -> None:
        """
        推送一个入站事件。

        Args:
            event: 入站事件
        """
        self.publish_nowait(event)

    def publish_nowait(self, event: TransportEvent) -> None:
        """在同步回调中推送入站事件（队列无界，不会阻塞）。"""
        if event.kind == "connected":
            self._connected = True
        elif event.kind == "disconnected":
            self._connected = False
        self.events.put_nowait(event)

    async def next_event(self) -> TransportEvent:
        """
        消费下一个入站事件（阻塞直到有事件可用）。

        Returns:
            下一个入站事件
        """
        return await self.events.get()

    @property
    def pending(self) -> int:
        """待处理的入站事件数量。"""
        return self.events.qsize()

    @property
    def is_connected(self) -> bool:
        return self._connected
