"""内置插件：回应 ``@<mention> ping``。"""

from mucbot.plugins.base import Plugin

plugin = Plugin("builtin")


@plugin.mention(r"\bping\b", "i")
def ping(session, message, captures):
    session.send_message(message.room, "pong", reply_to=message.sender)
