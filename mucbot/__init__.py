"""
mucbot - 一个轻量级的群聊机器人会话引擎
"""

__version__ = "0.1.0"
__logo__ = "🤖"
