"""Shared test fixtures and helpers."""

from __future__ import annotations

from typing import Any

import pytest
from loguru import logger

from mucbot.config.schema import BotConfig
from mucbot.plugins.registry import HandlerRegistry
from mucbot.session.controller import Session
from mucbot.transport.memory import MemoryTransport

OWN_JID = "bot@chat.example.com"

STARTUP_RESULT = """
<iq xmlns="jabber:client" type="result" id="startup" from="chat.example.com">
  <query xmlns="http://hipchat.com/protocol/startup">
    <name>Bender Bot</name>
    <mention_name>bender</mention_name>
  </query>
</iq>
"""

ROOMS_RESULT = """
<iq xmlns="jabber:client" type="result" id="rooms" from="conf.hipchat.com">
  <query xmlns="http://jabber.org/protocol/disco#items">
    <item jid="a@conf" name="Alpha">
      <x xmlns="http://hipchat.com/protocol/muc#room"><id>1</id></x>
    </item>
    <item jid="b@conf" name="Beta">
      <x xmlns="http://hipchat.com/protocol/muc#room"><id>2</id></x>
    </item>
  </query>
</iq>
"""


def presence(room: str, nick: str, jid: str | None = None, *codes: str) -> str:
    item = f'<item jid="{jid}" role="participant"/>' if jid else '<item role="participant"/>'
    status = "".join(f'<status code="{c}"/>' for c in codes)
    return (
        f'<presence xmlns="jabber:client" from="{room}/{nick}">'
        f'<x xmlns="http://jabber.org/protocol/muc#user">{item}{status}</x>'
        f"</presence>"
    )


def profile_result(jid: str, mention_name: str | None = None) -> str:
    if mention_name is None:
        return f'<iq xmlns="jabber:client" type="result" id="userprofile" from="{jid}"/>'
    return (
        f'<iq xmlns="jabber:client" type="result" id="userprofile" from="{jid}">'
        f'<query xmlns="http://hipchat.com/protocol/profile">'
        f"<mention_name>{mention_name}</mention_name></query></iq>"
    )


def groupchat(room: str, nick: str, body: str | None, sender_jid: str | None = None) -> str:
    x = ""
    if sender_jid:
        x = f'<x xmlns="http://jabber.org/protocol/muc#user"><item jid="{sender_jid}"/></x>'
    body_el = f"<body>{body}</body>" if body is not None else ""
    return (
        f'<message xmlns="jabber:client" type="groupchat" from="{room}/{nick}">'
        f"{body_el}{x}</message>"
    )


def iq_error(request_id: str, condition: str = "item-not-found") -> str:
    return (
        f'<iq xmlns="jabber:client" type="error" id="{request_id}" from="chat.example.com">'
        f'<error type="cancel"><{condition} xmlns="urn:ietf:params:xml:ns:xmpp-stanzas"/></error>'
        f"</iq>"
    )


async def pump(session: Session, transport: MemoryTransport) -> list[Any]:
    """Process every queued transport event, in order."""
    results = []
    while transport.pending:
        results.append(await session.handle_event(await transport.next_event()))
    return results


async def activate(session: Session, transport: MemoryTransport, rooms: str = ROOMS_RESULT) -> None:
    """Drive the session through the full handshake."""
    await transport.connect()
    await transport.feed(STARTUP_RESULT)
    await transport.feed(rooms)
    await pump(session, transport)


@pytest.fixture
def config() -> BotConfig:
    return BotConfig(jid=OWN_JID, password="secret", keepalive_enabled=False)


@pytest.fixture
def transport() -> MemoryTransport:
    return MemoryTransport()


@pytest.fixture
def registry() -> HandlerRegistry:
    return HandlerRegistry()


@pytest.fixture
def session(config: BotConfig, transport: MemoryTransport, registry: HandlerRegistry) -> Session:
    return Session(config, transport, registry)


@pytest.fixture
async def active_session(session: Session, transport: MemoryTransport) -> Session:
    await activate(session, transport)
    transport.clear()
    return session


@pytest.fixture
def logs() -> Any:
    """Capture loguru records as ``(level, message, has_exception)`` tuples."""
    records: list[tuple[str, str, bool]] = []

    def sink(message: Any) -> None:
        record = message.record
        records.append((record["level"].name, record["message"], record["exception"] is not None))

    handler_id = logger.add(sink, level="DEBUG")
    yield records
    logger.remove(handler_id)
