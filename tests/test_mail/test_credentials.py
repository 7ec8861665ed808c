"""Tests for credential providers and the process-wide credential cache."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from gmail_mcp.mail.credentials import (
    AppPasswordCredentialProvider,
    CachedCredentialProvider,
    CacheState,
    CredentialProvider,
    InvalidatingCredentialProvider,
)
from gmail_mcp.mail.types import Credential
from gmail_mcp.protocol.errors import AuthError


def make_inner(*results: object) -> MagicMock:
    inner = MagicMock()
    inner.acquire = AsyncMock(side_effect=list(results))
    return inner


CRED_A = Credential(username="me@gmail.com", secret="first")
CRED_B = Credential(username="me@gmail.com", secret="second")


class TestProtocolConformance:
    def test_providers_satisfy_protocol(self) -> None:
        app = AppPasswordCredentialProvider("me@gmail.com", "pw")
        assert isinstance(app, CredentialProvider)
        assert isinstance(CachedCredentialProvider(app), CredentialProvider)

    def test_only_cache_supports_invalidation(self) -> None:
        app = AppPasswordCredentialProvider("me@gmail.com", "pw")
        assert isinstance(CachedCredentialProvider(app), InvalidatingCredentialProvider)
        assert not isinstance(app, InvalidatingCredentialProvider)


class TestCredential:
    def test_repr_hides_secret(self) -> None:
        assert "first" not in repr(CRED_A)
        assert "me@gmail.com" in repr(CRED_A)


class TestAppPasswordCredentialProvider:
    async def test_returns_configured_credential(self) -> None:
        cred = await AppPasswordCredentialProvider("me@gmail.com", "pw").acquire()
        assert cred == Credential(username="me@gmail.com", secret="pw")

    @pytest.mark.parametrize(("user", "password"), [("", "pw"), ("me@gmail.com", "")])
    async def test_missing_values_raise_auth_error(self, user: str, password: str) -> None:
        with pytest.raises(AuthError):
            await AppPasswordCredentialProvider(user, password).acquire()


class TestCachedCredentialProvider:
    async def test_starts_uninitialized_and_acquires_lazily(self) -> None:
        inner = make_inner(CRED_A)
        cache = CachedCredentialProvider(inner)
        assert cache.state is CacheState.UNINITIALIZED
        inner.acquire.assert_not_awaited()
        assert await cache.acquire() == CRED_A
        assert cache.state is CacheState.ACQUIRED

    async def test_reuses_cached_credential(self) -> None:
        inner = make_inner(CRED_A)
        cache = CachedCredentialProvider(inner)
        for _ in range(3):
            assert await cache.acquire() == CRED_A
        assert inner.acquire.await_count == 1

    async def test_invalidate_triggers_reacquire(self) -> None:
        inner = make_inner(CRED_A, CRED_B)
        cache = CachedCredentialProvider(inner)
        await cache.acquire()
        cache.invalidate()
        assert cache.state is CacheState.INVALIDATED
        assert await cache.acquire() == CRED_B
        assert inner.acquire.await_count == 2

    async def test_auth_error_passes_through_and_is_not_cached(self) -> None:
        inner = make_inner(AuthError("denied"), CRED_A)
        cache = CachedCredentialProvider(inner)
        with pytest.raises(AuthError, match="denied"):
            await cache.acquire()
        assert cache.state is CacheState.UNINITIALIZED
        assert await cache.acquire() == CRED_A

    async def test_unexpected_failure_becomes_auth_error(self) -> None:
        cache = CachedCredentialProvider(make_inner(OSError("token file unreadable")))
        with pytest.raises(AuthError) as exc_info:
            await cache.acquire()
        assert "token file" not in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, OSError)
