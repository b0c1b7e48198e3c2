"""Authentication request/response schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Admin login request."""

    username: str = Field(min_length=1, max_length=100, description="Admin username")
    password: str = Field(min_length=1, max_length=256, description="Admin password")
    remember_me: bool = Field(
        default=False,
        description="Keep the session in a persistent cookie instead of the tab",
    )


class LoginResponse(BaseModel):
    """Issued session marker."""

    model_config = ConfigDict(frozen=True)

    session_token: str
    scope: Literal["tab", "persistent"]
    expires_in: int = Field(description="Marker TTL in seconds")


class AuthStatusResponse(BaseModel):
    """Derived session flag for the calling client."""

    model_config = ConfigDict(frozen=True)

    is_authenticated: bool
    client_id: str
    site_name: str


class MessageResponse(BaseModel):
    """Simple message response."""

    model_config = ConfigDict(frozen=True)

    message: str


class TokenPayload(BaseModel):
    """Decoded session marker."""

    model_config = ConfigDict(frozen=True)

    sub: str
    marker: str
    scope: Literal["tab", "persistent"]
    jti: str
    exp: int
