"""Application environment configuration."""

from typing import Literal

from pydantic import BaseModel


class AppConfig(BaseModel, frozen=True):
    """Application environment settings."""

    name: str
    env: Literal["development", "staging", "production"]
    debug: bool
    cors_origins: tuple[str, ...] = ()

    @property
    def is_development(self) -> bool:
        return self.env == "development"

    @property
    def allowed_origins(self) -> list[str]:
        """Configured CORS origins; any origin in development when none are set."""
        if self.cors_origins:
            return list(self.cors_origins)
        return ["*"] if self.is_development else []
