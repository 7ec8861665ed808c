"""Credential providers for the mail transport.

The tool only ever sees the ``CredentialProvider`` protocol: ``acquire()`` may
block or fail, but callers do not need to know how the secret is obtained.
"""

import logging
from enum import Enum
from typing import Protocol, runtime_checkable

from gmail_mcp.mail.types import Credential
from gmail_mcp.protocol.errors import AuthError

logger = logging.getLogger(__name__)


@runtime_checkable
class CredentialProvider(Protocol):
    """Yields a credential the MailSender can use, or raises AuthError."""

    async def acquire(self) -> Credential: ...


@runtime_checkable
class InvalidatingCredentialProvider(CredentialProvider, Protocol):
    """A provider that can drop a credential the mail server rejected."""

    def invalidate(self) -> None: ...


class AppPasswordCredentialProvider:
    """Google account address plus an app password, taken from configuration."""

    def __init__(self, username: str, app_password: str) -> None:
        self._username = username
        self._app_password = app_password

    async def acquire(self) -> Credential:
        if not self._username or not self._app_password:
            raise AuthError("No SMTP username or app password configured")
        return Credential(username=self._username, secret=self._app_password)


class CacheState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACQUIRED = "acquired"
    INVALIDATED = "invalidated"


class CachedCredentialProvider:
    """Process-wide credential cache around another provider.

    The inner provider runs on first use and again only after ``invalidate()``
    (e.g. when the server rejected the credential).  Requests are handled one
    at a time, so the cache needs no lock.
    """

    def __init__(self, inner: CredentialProvider) -> None:
        self._inner = inner
        self._credential: Credential | None = None
        self._state = CacheState.UNINITIALIZED

    @property
    def state(self) -> CacheState:
        return self._state

    async def acquire(self) -> Credential:
        if self._credential is not None:
            return self._credential
        logger.info("Acquiring mail credential (%s)", self._state.value)
        try:
            credential = await self._inner.acquire()
        except AuthError:
            raise
        except Exception as exc:
            logger.error("Credential acquisition failed: %s", exc, exc_info=True)
            raise AuthError("Could not acquire a mail credential") from exc
        self._credential = credential
        self._state = CacheState.ACQUIRED
        return credential

    def invalidate(self) -> None:
        """Drop the cached credential so the next acquire() fetches a new one."""
        if self._credential is not None:
            logger.info("Mail credential invalidated")
        self._credential = None
        self._state = CacheState.INVALIDATED
