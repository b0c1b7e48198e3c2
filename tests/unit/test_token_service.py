"""Tests for TokenService."""

import time

import jwt as pyjwt
import pytest

from blogdesk.core.config import settings
from blogdesk.core.exceptions import InvalidTokenError, TokenExpiredError
from blogdesk.services.token_service import TokenService


def _encode(payload: dict) -> str:
    return pyjwt.encode(
        payload,
        settings.auth.secret_key.get_secret_value(),
        algorithm=settings.auth.algorithm,
    )


class TestCreateSessionToken:
    """Tests for marker creation."""

    def test_tab_marker(self, token_service: TokenService) -> None:
        token, ttl = token_service.create_session_token("admin", "tab")
        payload = token_service.decode_token(token)
        assert payload.sub == "admin"
        assert payload.marker == "active"
        assert payload.scope == "tab"
        assert ttl == settings.auth.tab_session_seconds

    def test_persistent_marker_lives_longer(self, token_service: TokenService) -> None:
        _, tab_ttl = token_service.create_session_token("admin", "tab")
        token, ttl = token_service.create_session_token("admin", "persistent")
        assert ttl == settings.auth.remember_seconds
        assert ttl > tab_ttl
        assert token_service.decode_token(token).scope == "persistent"

    def test_each_marker_has_its_own_jti(self, token_service: TokenService) -> None:
        first, _ = token_service.create_session_token("admin", "tab")
        second, _ = token_service.create_session_token("admin", "tab")
        assert token_service.decode_token(first).jti != token_service.decode_token(second).jti


class TestDecodeToken:
    def test_invalid_token_raises(self, token_service: TokenService) -> None:
        with pytest.raises(InvalidTokenError):
            token_service.decode_token("not.a.valid.token")

    def test_expired_token_raises(self, token_service: TokenService) -> None:
        token = _encode(
            {
                "sub": "admin",
                "marker": "active",
                "scope": "tab",
                "jti": "j",
                "exp": int(time.time()) - 10,
            }
        )
        with pytest.raises(TokenExpiredError):
            token_service.decode_token(token)

    def test_missing_claims_raise(self, token_service: TokenService) -> None:
        token = _encode({"sub": "admin", "exp": int(time.time()) + 60})
        with pytest.raises(InvalidTokenError):
            token_service.decode_token(token)


class TestIsActiveMarker:
    async def test_fresh_marker_is_active(self, token_service: TokenService) -> None:
        token, _ = token_service.create_session_token("admin", "tab")
        assert await token_service.is_active_marker(token) is True

    async def test_wrong_sentinel_is_inactive(self, token_service: TokenService) -> None:
        token = _encode(
            {
                "sub": "admin",
                "marker": "inactive",
                "scope": "tab",
                "jti": "j",
                "exp": int(time.time()) + 60,
            }
        )
        assert await token_service.is_active_marker(token) is False

    async def test_garbage_is_inactive(self, token_service: TokenService) -> None:
        assert await token_service.is_active_marker("active") is False

    async def test_blacklisted_marker_is_inactive(
        self, token_service: TokenService
    ) -> None:
        token, _ = token_service.create_session_token("admin", "tab")
        payload = token_service.decode_token(token)
        await token_service.blacklist_token(payload.jti, payload.exp)
        assert await token_service.is_active_marker(token) is False


class TestBlacklist:
    """Tests for marker blacklisting."""

    async def test_blacklist_and_check(self, token_service: TokenService) -> None:
        await token_service.blacklist_token("jti-123", int(time.time()) + 3600)
        assert await token_service.is_blacklisted("jti-123") is True

    async def test_not_blacklisted(self, token_service: TokenService) -> None:
        assert await token_service.is_blacklisted("unknown-jti") is False

    async def test_without_redis_nothing_is_blacklisted(self) -> None:
        ts = TokenService(None)
        await ts.blacklist_token("jti-1", int(time.time()) + 3600)
        assert await ts.is_blacklisted("jti-1") is False
