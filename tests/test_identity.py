"""Tests for the identity tracker and replies that mention users."""

from __future__ import annotations

from xml.etree import ElementTree as ET

from mucbot.session.controller import Session
from mucbot.session.identity import IdentityTracker
from mucbot.stanzas import PROFILE_NS, child, child_text
from mucbot.transport.memory import MemoryTransport
from tests.conftest import groupchat, presence, profile_result, pump


class TestPresence:
    async def test_participant_presence_creates_user_and_requests_profile(
        self, active_session: Session, transport: MemoryTransport
    ) -> None:
        await transport.feed(presence("a@conf", "Philip J. Fry", "fry@example.com"))
        await pump(active_session, transport)

        user = active_session.users["fry@example.com"]
        assert user.name == "Philip J. Fry"
        assert user.mention_name is None

        (iq,) = transport.sent
        assert iq.get("id") == "userprofile"
        assert iq.get("to") == "fry@example.com"
        assert child(iq, "query", PROFILE_NS) is not None

    async def test_self_presence_ignored(self, active_session: Session, transport: MemoryTransport) -> None:
        await transport.feed(presence("a@conf", "Bender Bot", "bot@chat.example.com", "110"))
        await pump(active_session, transport)
        assert len(active_session.users) == 0
        assert transport.sent == []

    async def test_burst_is_not_deduplicated(self, active_session: Session, transport: MemoryTransport) -> None:
        for room in ("a@conf", "b@conf"):
            await transport.feed(presence(room, "Fry", "fry@example.com"))
        await transport.feed(presence("a@conf", "Leela", "leela@example.com"))
        await pump(active_session, transport)

        assert [iq.get("to") for iq in transport.sent] == [
            "fry@example.com",
            "fry@example.com",
            "leela@example.com",
        ]
        assert len(active_session.users) == 2

    async def test_later_presence_updates_name(self, transport: MemoryTransport) -> None:
        await transport.connect()
        tracker = IdentityTracker(transport)
        tracker.handle_presence(ET.fromstring(presence("a@conf", "Fry", "fry@example.com")))
        tracker.handle_presence(ET.fromstring(presence("a@conf", "Fry Jr", "fry@example.com/laptop")))

        assert len(tracker) == 1
        assert tracker.get("fry@example.com").name == "Fry Jr"
        assert tracker.find_by_name("Fry Jr") is tracker.get("fry@example.com")

    async def test_presence_without_jid_ignored(self, transport: MemoryTransport) -> None:
        await transport.connect()
        tracker = IdentityTracker(transport)
        assert tracker.handle_presence(ET.fromstring(presence("a@conf", "Anon"))) is None
        assert transport.sent == []


class TestProfile:
    async def test_profile_result_sets_mention_name(
        self, active_session: Session, transport: MemoryTransport
    ) -> None:
        await transport.feed(presence("a@conf", "Fry", "fry@example.com"))
        await transport.feed(profile_result("fry@example.com", "fry"))
        await pump(active_session, transport)
        assert active_session.users["fry@example.com"].mention_name == "fry"

    async def test_profile_for_untracked_user_is_silently_dropped(
        self, active_session: Session, transport: MemoryTransport, logs
    ) -> None:
        await transport.feed(profile_result("ghost@example.com", "ghost"))
        await pump(active_session, transport)

        assert "ghost@example.com" not in active_session.identity
        assert len(active_session.users) == 0
        assert not [r for r in logs if r[0] in ("WARNING", "ERROR")]

    async def test_profile_without_query_ignored(
        self, active_session: Session, transport: MemoryTransport
    ) -> None:
        await transport.feed(presence("a@conf", "Fry", "fry@example.com"))
        await transport.feed(profile_result("fry@example.com"))
        await pump(active_session, transport)
        assert active_session.users["fry@example.com"].mention_name is None

    async def test_profile_results_accepted_in_any_state(
        self, session: Session, transport: MemoryTransport
    ) -> None:
        await transport.connect()
        await transport.feed(presence("a@conf", "Fry", "fry@example.com"))
        await transport.feed(profile_result("fry@example.com", "fry"))
        await pump(session, transport)
        assert session.users["fry@example.com"].mention_name == "fry"


class TestReplies:
    async def test_reply_prefixes_mention_name(
        self, active_session: Session, transport: MemoryTransport
    ) -> None:
        await transport.feed(presence("a@conf", "Fry", "fry@example.com"))
        await transport.feed(profile_result("fry@example.com", "fry"))
        await pump(active_session, transport)
        transport.clear()

        active_session.send_message("a@conf", "hello", reply_to="fry@example.com")
        (message,) = transport.sent_of("message")
        assert message.get("to") == "a@conf"
        assert message.get("type") == "groupchat"
        assert child_text(message, "body") == "@fry hello"

    async def test_reply_to_unknown_user_sends_plain_body(
        self, active_session: Session, transport: MemoryTransport, logs
    ) -> None:
        active_session.send_message("a@conf", "hello", reply_to="nobody@example.com")
        (message,) = transport.sent_of("message")
        assert child_text(message, "body") == "hello"
        assert any(level == "WARNING" and "nobody@example.com" in msg for level, msg, _ in logs)

    async def test_handler_replies_to_sender(
        self, active_session: Session, transport: MemoryTransport
    ) -> None:
        await transport.feed(presence("a@conf", "Fry", "fry@example.com"))
        await transport.feed(profile_result("fry@example.com", "fry"))
        await pump(active_session, transport)
        transport.clear()

        def echo(session, message, captures):
            session.send_message(message.room, captures[0], reply_to=message.sender)

        active_session.on_message(r"^echo (.+)$", echo)
        await transport.feed(groupchat("a@conf", "Fry", "echo good news"))
        await pump(active_session, transport)

        (message,) = transport.sent_of("message")
        assert child_text(message, "body") == "@fry good news"
