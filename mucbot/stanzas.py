"""XMPP节的构造与读取工具。

此模块定义了会话引擎收发的所有结构化消息（节）的形状：
- 出站：在线状态、自身资料发现、房间发现、加入房间、用户资料查询、群聊消息
- 入站：按本地名读取子元素（忽略命名空间），解析JID

节使用 ``xml.etree.ElementTree.Element`` 表示，与具体的XMPP客户端库无关。
"""

from xml.etree import ElementTree as ET

CLIENT_NS = "jabber:client"
STARTUP_NS = "http://hipchat.com/protocol/startup"
PROFILE_NS = "http://hipchat.com/protocol/profile"
DISCO_ITEMS_NS = "http://jabber.org/protocol/disco#items"
MUC_NS = "http://jabber.org/protocol/muc"
MUC_USER_NS = "http://jabber.org/protocol/muc#user"

# 请求/响应的关联ID
STARTUP_ID = "startup"
ROOMS_ID = "rooms"
USERPROFILE_ID = "userprofile"

SELF_PRESENCE_CODE = "110"  # MUC自身在线状态的状态码
KEEPALIVE_PAYLOAD = " "  # 保活时直接写入原始流的内容


def _tag(name: str, ns: str = CLIENT_NS) -> str:
    return f"{{{ns}}}{name}"


# ---------------------------------------------------------------------------
# 读取
# ---------------------------------------------------------------------------

def local_name(tag: str) -> str:
    """去掉ElementTree标签中的``{namespace}``前缀。"""
    return tag.rsplit("}", 1)[-1]


def namespace(el: ET.Element) -> str:
    """返回元素的命名空间，没有命名空间时返回空字符串。"""
    if el.tag.startswith("{"):
        return el.tag[1:].split("}", 1)[0]
    return el.get("xmlns", "")


def stanza_kind(el: ET.Element) -> str:
    """节的种类：iq、message或presence。"""
    return local_name(el.tag)


def children(el: ET.Element | None, name: str, ns: str | None = None) -> list[ET.Element]:
    """
    按本地名查找直接子元素。

    Args:
        el: 父元素，可以为None
        name: 子元素本地名
        ns: 可选的命名空间，指定时只返回该命名空间下的子元素

    Returns:
        匹配的子元素列表
    """
    if el is None:
        return []
    return [
        c for c in el
        if local_name(c.tag) == name and (ns is None or namespace(c) == ns)
    ]


def child(el: ET.Element | None, name: str, ns: str | None = None) -> ET.Element | None:
    """返回第一个匹配的直接子元素。"""
    found = children(el, name, ns)
    return found[0] if found else None


def child_text(el: ET.Element | None, name: str) -> str | None:
    """返回第一个匹配子元素的文本，不存在时返回None。"""
    c = child(el, name)
    if c is None:
        return None
    return c.text or ""


def bare_jid(jid: str | None) -> str:
    """``room@conf/Nick`` -> ``room@conf``"""
    return (jid or "").split("/", 1)[0]


def jid_resource(jid: str | None) -> str:
    """``room@conf/Nick`` -> ``Nick``"""
    parts = (jid or "").split("/", 1)
    return parts[1] if len(parts) == 2 else ""


def jid_domain(jid: str | None) -> str:
    """``bot@chat.example.com/bot`` -> ``chat.example.com``"""
    return bare_jid(jid).split("@", 1)[-1]


def is_error(el: ET.Element) -> bool:
    return el.get("type") == "error"


def is_result(el: ET.Element) -> bool:
    return stanza_kind(el) == "iq" and el.get("type") == "result"


def is_groupchat(el: ET.Element) -> bool:
    return stanza_kind(el) == "message" and el.get("type") == "groupchat"


def muc_user_x(el: ET.Element) -> ET.Element | None:
    """返回presence节中的``muc#user``扩展元素。"""
    return child(el, "x", MUC_USER_NS)


def status_codes(x: ET.Element | None) -> set[str]:
    return {s.get("code", "") for s in children(x, "status")}


def error_text(el: ET.Element) -> str:
    """提取错误节中的条件名与文本，用于日志。"""
    err = child(el, "error")
    if err is None:
        return "unknown error"
    parts = [local_name(c.tag) for c in err if local_name(c.tag) != "text"]
    text = child_text(err, "text")
    if text:
        parts.append(text)
    return ", ".join(parts) or (err.get("type") or "unknown error")


# ---------------------------------------------------------------------------
# 构造
# ---------------------------------------------------------------------------

def available_presence() -> ET.Element:
    """宣告在线：``<presence type="available"><show>chat</show></presence>``"""
    presence = ET.Element(_tag("presence"), {"type": "available"})
    ET.SubElement(presence, _tag("show")).text = "chat"
    return presence


def startup_query() -> ET.Element:
    """自身资料发现请求，关联ID为``startup``。"""
    iq = ET.Element(_tag("iq"), {"type": "get", "id": STARTUP_ID})
    ET.SubElement(
        iq, _tag("query", STARTUP_NS), {"send_auto_join_user_presences": "false"}
    )
    return iq


def rooms_query(conference_host: str) -> ET.Element:
    """房间目录发现请求，关联ID为``rooms``。"""
    iq = ET.Element(_tag("iq"), {"to": conference_host, "id": ROOMS_ID, "type": "get"})
    ET.SubElement(iq, _tag("query", DISCO_ITEMS_NS), {"include_archived": "false"})
    return iq


def join_presence(room: str, nick: str, from_jid: str) -> ET.Element:
    """加入房间：发往``<room>/<nick>``的MUC在线状态。"""
    presence = ET.Element(_tag("presence"), {"to": f"{room}/{nick}", "from": from_jid})
    ET.SubElement(presence, _tag("x", MUC_NS))
    return presence


def profile_query(jid: str) -> ET.Element:
    """用户资料查询，关联ID为``userprofile``。"""
    iq = ET.Element(_tag("iq"), {"type": "get", "to": jid, "id": USERPROFILE_ID})
    ET.SubElement(iq, _tag("query", PROFILE_NS))
    return iq


def groupchat_message(room: str, body: str, from_jid: str) -> ET.Element:
    message = ET.Element(_tag("message"), {"from": from_jid, "to": room, "type": "groupchat"})
    ET.SubElement(message, _tag("body")).text = body
    return message
