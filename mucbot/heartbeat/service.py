"""保活服务 - 定期在原始流上写入空白字符。

群聊服务器会关闭长时间没有流量的连接。保活服务按固定间隔
（默认60秒）直接在传输的原始通道上写入一个空格，不是结构化的请求，
没有关联ID，也不期待任何响应。
"""

import asyncio

from loguru import logger

from mucbot.stanzas import KEEPALIVE_PAYLOAD
from mucbot.transport.base import BaseTransport

# 默认间隔：60秒
DEFAULT_KEEPALIVE_INTERVAL_S = 60


class KeepaliveService:
    """
    独立运行的周期性保活任务。

    它只向传输写入原始数据，从不读取或修改会话状态，
    因此不会阻塞处理器分发或握手处理，也不会被它们阻塞。
    """

    def __init__(
        self,
        transport: BaseTransport,
        interval_s: float = DEFAULT_KEEPALIVE_INTERVAL_S,
        enabled: bool = True,
    ):
        self.transport = transport
        self.interval_s = interval_s
        self.enabled = enabled
        self._running = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """启动保活循环（已在运行时先停止再重启）。"""
        if not self.enabled:
            logger.info("Keepalive disabled")
            return

        self.stop()
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Keepalive started (every {self.interval_s}s)")

    def stop(self) -> None:
        """停止保活循环。"""
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    async def _run_loop(self) -> None:
        """保活主循环，写入失败只记录日志。"""
        while self._running:
            try:
                await asyncio.sleep(self.interval_s)
                if self._running:
                    self._tick()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Keepalive error: {e}")

    def _tick(self) -> None:
        """写入一次保活内容。"""
        self.transport.send_raw(KEEPALIVE_PAYLOAD)
        logger.trace("Keepalive sent")

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()
