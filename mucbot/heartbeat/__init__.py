"""保活服务模块，用于定期向服务器写入空白字符以保持连接。"""

from mucbot.heartbeat.service import KeepaliveService

__all__ = ["KeepaliveService"]
