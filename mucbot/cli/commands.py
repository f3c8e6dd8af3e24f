"""mucbot的命令行接口。

命令：
- onboard: 写入默认配置文件
- run: 连接服务器并运行机器人，直到连接断开
- status: 显示解析后的配置
"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger

from mucbot import __logo__, __version__
from mucbot.config.loader import get_config_path, load_config, save_config
from mucbot.config.schema import BotConfig
from mucbot.errors import ConfigError
from mucbot.plugins.loader import load_plugins
from mucbot.plugins.registry import HandlerRegistry
from mucbot.utils.helpers import mask_secret

app = typer.Typer(
    name="mucbot",
    help=f"{__logo__} mucbot - group-chat bot session engine",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{__logo__} mucbot v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
) -> None:
    """mucbot - group-chat bot session engine."""


def _setup_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


@app.command()
def onboard(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Write a default configuration file."""
    path = config or get_config_path()
    if path.exists():
        typer.echo(f"Config already exists at {path}")
        raise typer.Exit()

    written = save_config(BotConfig(), path)
    typer.echo(f"{__logo__} Created config at {written}")
    typer.echo("Next: set jid and password, then run `mucbot run`")


@app.command()
def run(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    plugin: Optional[List[str]] = typer.Option(None, "--plugin", "-p", help="Plugin module to load"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Connect to the chat server and run the bot until disconnected."""
    from mucbot.session.controller import Session
    from mucbot.transport.xmpp import XMPPTransport

    cfg = load_config(config)
    try:
        cfg.validate_required()
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    _setup_logging("DEBUG" if verbose else cfg.log_level)

    logger.info("Loading plugins...")
    registry = HandlerRegistry()
    for p in load_plugins([*cfg.plugins, *(plugin or [])]):
        registry.add_plugin(p)

    transport = XMPPTransport(cfg.full_jid, cfg.password, cfg.server_host, cfg.port)
    session = Session(cfg, transport, registry)

    async def _run() -> None:
        try:
            await session.start()
        finally:
            await session.stop()

    logger.info("Starting mucbot...")
    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        logger.info("Shutting down...")


@app.command()
def status(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Show the resolved configuration."""
    path = config or get_config_path()
    cfg = load_config(path)

    typer.echo(f"{__logo__} mucbot status\n")
    typer.echo(f"Config: {path} {'✓' if path.exists() else '✗'}")
    typer.echo(f"JID: {cfg.full_jid or '(not set)'}")
    typer.echo(f"Password: {mask_secret(cfg.password) or '(not set)'}")
    typer.echo(f"Server: {cfg.server_host}:{cfg.port}")
    typer.echo(f"Conference: {cfg.conference_host}")
    rooms = "all discovered" if cfg.join_rooms is None else ", ".join(cfg.join_rooms) or "(none)"
    typer.echo(f"Rooms: {rooms}")
    typer.echo(f"Keepalive: {'every ' + str(cfg.keepalive_interval_s) + 's' if cfg.keepalive_enabled else 'disabled'}")
    typer.echo(f"Plugins: {', '.join(cfg.plugins) or '(none)'}")
