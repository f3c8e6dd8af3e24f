"""Tests for configuration schema and loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from mucbot.config.loader import camel_to_snake, load_config, save_config, snake_to_camel
from mucbot.config.schema import BotConfig
from mucbot.errors import ConfigError


class TestBotConfig:
    def test_defaults(self) -> None:
        cfg = BotConfig(jid="bot@chat.example.com", password="x")
        assert cfg.port == 5222
        assert cfg.resource == "bot"
        assert cfg.conference_host == "conf.hipchat.com"
        assert cfg.join_rooms is None
        assert cfg.keepalive_interval_s == 60
        assert cfg.full_jid == "bot@chat.example.com/bot"
        assert cfg.server_host == "chat.example.com"

    def test_explicit_host_wins(self) -> None:
        cfg = BotConfig(jid="bot@chat.example.com", password="x", host="xmpp.internal")
        assert cfg.server_host == "xmpp.internal"

    def test_server_host_ignores_resource(self) -> None:
        cfg = BotConfig(jid="bot@chat.example.com/desk", password="x")
        assert cfg.server_host == "chat.example.com"

    @pytest.mark.parametrize("kwargs, missing", [({}, "jid"), ({"jid": "a@b"}, "password")])
    def test_validate_required(self, kwargs: dict, missing: str) -> None:
        with pytest.raises(ConfigError, match=f"Missing required option: {missing}"):
            BotConfig(**kwargs).validate_required()

    def test_keepalive_interval_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            BotConfig(keepalive_interval_s=0)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MUCBOT_PORT", "5223")
        monkeypatch.setenv("MUCBOT_JID", "env@chat.example.com")
        cfg = BotConfig()
        assert cfg.port == 5223
        assert cfg.jid == "env@chat.example.com"


class TestLoader:
    def test_load_camel_case_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "jid": "bot@chat.example.com",
            "password": "secret",
            "joinRooms": ["a@conf"],
            "keepaliveIntervalS": 30,
            "conferenceHost": "conf.example.com",
        }))
        cfg = load_config(path)
        assert cfg.join_rooms == ["a@conf"]
        assert cfg.keepalive_interval_s == 30
        assert cfg.conference_host == "conf.example.com"

    def test_invalid_file_falls_back_to_defaults(self, tmp_path: Path, logs) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json")
        cfg = load_config(path)
        assert cfg.port == 5222
        assert any(level == "WARNING" for level, _, _ in logs)

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "nope.json").join_rooms is None

    def test_save_writes_camel_case(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.json"
        save_config(BotConfig(jid="a@b", password="p", join_rooms=["r@conf"]), path)

        data = json.loads(path.read_text())
        assert data["joinRooms"] == ["r@conf"]
        assert "keepaliveIntervalS" in data
        assert load_config(path).join_rooms == ["r@conf"]

    @pytest.mark.parametrize("snake, camel", [
        ("join_rooms", "joinRooms"),
        ("keepalive_interval_s", "keepaliveIntervalS"),
        ("port", "port"),
    ])
    def test_key_conversion(self, snake: str, camel: str) -> None:
        assert snake_to_camel(snake) == camel
        assert camel_to_snake(camel) == snake

    def test_env_overrides_onboarded_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = save_config(BotConfig(), tmp_path / "config.json")
        monkeypatch.setenv("MUCBOT_JID", "env@chat.example.com")
        monkeypatch.setenv("MUCBOT_PASSWORD", "from-env")

        cfg = load_config(path)
        cfg.validate_required()
        assert cfg.jid == "env@chat.example.com"
        assert cfg.password == "from-env"
        assert cfg.port == 5222

    def test_file_values_kept_without_env(self, tmp_path: Path) -> None:
        path = save_config(BotConfig(jid="file@chat.example.com", password="p"), tmp_path / "config.json")
        assert load_config(path).jid == "file@chat.example.com"
