"""Allows ``python -m gmail_mcp``."""

from gmail_mcp.cli.main import cli

cli()
