"""Shared pytest fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from gmail_mcp.mail.tools import build_registry
from gmail_mcp.mail.types import Credential
from gmail_mcp.protocol.dispatcher import Dispatcher
from gmail_mcp.protocol.registry import ToolRegistry

SENDER = "me@gmail.com"


@pytest.fixture
def credentials() -> MagicMock:
    """CredentialProvider stub that always hands out the same credential."""
    provider = MagicMock()
    provider.acquire = AsyncMock(return_value=Credential(username=SENDER, secret="app-password"))
    return provider


@pytest.fixture
def sender() -> MagicMock:
    """MailSender stub that always succeeds."""
    s = MagicMock()
    s.send = AsyncMock(return_value="2.0.0 OK  1700000000 abc123 - gsmtp")
    return s


@pytest.fixture
def registry(credentials: MagicMock, sender: MagicMock) -> ToolRegistry:
    return build_registry(credentials, sender, SENDER)


@pytest.fixture
def dispatcher(registry: ToolRegistry) -> Dispatcher:
    return Dispatcher(registry)
