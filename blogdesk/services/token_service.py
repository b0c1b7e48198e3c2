"""Session marker signing, validation, and revocation."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Literal

import jwt
import redis.asyncio as redis
import structlog

from blogdesk.core.config import settings
from blogdesk.core.exceptions import InvalidTokenError, TokenExpiredError
from blogdesk.core.session_flag import SESSION_SENTINEL
from blogdesk.schemas.auth_schema import TokenPayload

logger = structlog.get_logger()

BLACKLIST_PREFIX = "session_blacklist:"

MarkerScope = Literal["tab", "persistent"]


class TokenService:
    """Issue and check signed session markers, with a Redis-backed blacklist.

    The blacklist is best effort: without Redis a revoked marker stays valid
    until it expires, but the cookie is still cleared on logout.
    """

    def __init__(self, redis_client: redis.Redis | None) -> None:  # type: ignore[type-arg]
        self._redis = redis_client
        self._secret = settings.auth.secret_key.get_secret_value()
        self._algorithm = settings.auth.algorithm

    def create_session_token(
        self, username: str, scope: MarkerScope
    ) -> tuple[str, int]:
        """Create a signed marker; returns the token and its TTL in seconds."""
        ttl = (
            settings.auth.remember_seconds
            if scope == "persistent"
            else settings.auth.tab_session_seconds
        )
        now = datetime.now(UTC)
        payload = {
            "sub": username,
            "marker": SESSION_SENTINEL,
            "scope": scope,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + timedelta(seconds=ttl),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm), ttl

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate a marker."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError from e

        try:
            return TokenPayload(
                sub=payload["sub"],
                marker=payload["marker"],
                scope=payload["scope"],
                jti=payload["jti"],
                exp=payload["exp"],
            )
        except (KeyError, ValueError) as e:
            raise InvalidTokenError from e

    async def is_active_marker(self, value: str) -> bool:
        """Whether a marker value is valid, carries the sentinel, and is not revoked."""
        try:
            payload = self.decode_token(value)
        except (InvalidTokenError, TokenExpiredError):
            return False
        if payload.marker != SESSION_SENTINEL:
            return False
        return not await self.is_blacklisted(payload.jti)

    # --- Blacklist ---

    async def blacklist_token(self, jti: str, exp: int) -> None:
        """Add a marker to the blacklist until it expires."""
        if self._redis is None:
            logger.warning("Redis unavailable, session not blacklisted", jti=jti)
            return
        ttl = exp - int(datetime.now(UTC).timestamp())
        if ttl > 0:
            await self._redis.setex(f"{BLACKLIST_PREFIX}{jti}", ttl, "1")

    async def is_blacklisted(self, jti: str) -> bool:
        """Check if a marker is blacklisted."""
        if self._redis is None:
            return False
        try:
            result = await self._redis.get(f"{BLACKLIST_PREFIX}{jti}")
        except redis.RedisError:
            logger.exception("Blacklist lookup failed", jti=jti)
            return False
        return result is not None
