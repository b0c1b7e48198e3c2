"""Admin login and logout."""

import secrets

import redis.asyncio as redis
import structlog

from blogdesk.core.config import settings
from blogdesk.core.exceptions import (
    AdminNotConfiguredError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
)
from blogdesk.schemas.auth_schema import LoginRequest, LoginResponse, MessageResponse
from blogdesk.services.token_service import MarkerScope, TokenService

logger = structlog.get_logger()


class AuthService:
    """Checks the single admin account and issues or revokes session markers."""

    def __init__(self, token_service: TokenService) -> None:
        self._token_service = token_service

    def login(self, request: LoginRequest) -> LoginResponse:
        """Exact match against the configured admin credentials.

        Both values are always compared so a wrong username and a wrong
        password take the same path and produce the same error.
        """
        branding = settings.branding
        if not branding.is_admin_configured:
            raise AdminNotConfiguredError

        username_ok = secrets.compare_digest(
            request.username.encode(), branding.admin_username.encode()
        )
        password_ok = secrets.compare_digest(
            request.password.encode(),
            branding.admin_password.get_secret_value().encode(),
        )
        if not (username_ok and password_ok):
            logger.warning("Admin login failed")
            raise InvalidCredentialsError

        scope: MarkerScope = "persistent" if request.remember_me else "tab"
        token, ttl = self._token_service.create_session_token(request.username, scope)
        logger.info("Admin logged in", scope=scope)
        return LoginResponse(session_token=token, scope=scope, expires_in=ttl)

    async def logout(self, markers: list[str]) -> MessageResponse:
        """Revoke every marker the client presented, in either scope."""
        for marker in markers:
            try:
                payload = self._token_service.decode_token(marker)
            except (InvalidTokenError, TokenExpiredError):
                continue
            try:
                await self._token_service.blacklist_token(payload.jti, payload.exp)
            except redis.RedisError:
                logger.exception("Session revoke failed", jti=payload.jti)
        logger.info("Admin logged out", markers=len(markers))
        return MessageResponse(message="Successfully logged out")
