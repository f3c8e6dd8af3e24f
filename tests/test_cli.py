"""Tests for the command line interface."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from mucbot.cli.commands import app

runner = CliRunner()


def test_onboard_writes_default_config(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    result = runner.invoke(app, ["onboard", "--config", str(path)])
    assert result.exit_code == 0
    data = json.loads(path.read_text())
    assert data["port"] == 5222
    assert data["conferenceHost"] == "conf.hipchat.com"

    again = runner.invoke(app, ["onboard", "--config", str(path)])
    assert "already exists" in again.output


def test_status_masks_password(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"jid": "bot@chat.example.com", "password": "hunter2"}))

    result = runner.invoke(app, ["status", "--config", str(path)])
    assert result.exit_code == 0
    assert "bot@chat.example.com/bot" in result.output
    assert "hunter2" not in result.output
    assert "hu*****" in result.output
    assert "all discovered" in result.output


def test_run_without_credentials_exits_with_config_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"jid": "bot@chat.example.com"}))

    result = runner.invoke(app, ["run", "--config", str(path)])
    assert result.exit_code == 1
    assert "Missing required option: password" in result.output
