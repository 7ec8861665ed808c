"""CLI entry point for the Gmail MCP server."""

import asyncio
import logging
import os
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console

from gmail_mcp.config import ServerConfig
from gmail_mcp.mail.credentials import AppPasswordCredentialProvider, CachedCredentialProvider
from gmail_mcp.mail.smtp_sender import SmtpMailSender
from gmail_mcp.mail.tools import build_registry
from gmail_mcp.protocol.dispatcher import Dispatcher
from gmail_mcp.protocol.errors import FatalStartupError
from gmail_mcp.protocol.server import run_stdio

logger = logging.getLogger(__name__)
# stdout carries the protocol; everything human-facing goes to stderr.
err_console = Console(stderr=True)


def build_dispatcher(config: ServerConfig) -> Dispatcher:
    """Wire the collaborators for ``config`` into a ready dispatcher."""
    credentials = CachedCredentialProvider(
        AppPasswordCredentialProvider(config.username, config.app_password)
    )
    sender = SmtpMailSender(
        config.smtp_host,
        config.smtp_port,
        start_tls=config.smtp_start_tls,
        timeout=config.smtp_timeout,
    )
    return Dispatcher(build_registry(credentials, sender, config.sender))


@click.command()
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Load configuration from this file instead of ./.env.",
)
@click.option("--log-level", default=None, help="Logging level (default: $LOG_LEVEL or INFO).")
def cli(env_file: Path | None, log_level: str | None) -> None:
    """Serve the send_email tool over JSON-RPC on stdin/stdout."""
    load_dotenv(dotenv_path=env_file)
    logging.basicConfig(
        level=(log_level or os.environ.get("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    try:
        config = ServerConfig.from_env()
    except FatalStartupError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    logger.info("Starting Gmail MCP server for %s", config.username)
    try:
        asyncio.run(run_stdio(build_dispatcher(config)))
    except KeyboardInterrupt:
        logger.info("Interrupted — goodbye")
