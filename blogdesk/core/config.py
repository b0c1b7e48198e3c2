"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from blogdesk.core.settings import (
    AppConfig,
    AuthConfig,
    BrandingConfig,
    DatabaseConfig,
    LLMConfig,
    RedisConfig,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.llm.has_anthropic).
    Everything except the session signing secret is optional: a missing
    database, provider key or admin password disables the matching feature
    instead of failing startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = Field(
        default="blogdesk",
        description="Application name",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )
    cors_origins: str = Field(
        default="",
        description="Comma-separated origins allowed by CORS",
    )

    # Branding / admin account
    site_name: str = Field(
        default="My Blog",
        description="Site name shown by clients",
    )
    admin_username: str = Field(
        default="admin",
        description="Admin login name",
    )
    admin_password: SecretStr = Field(
        default=SecretStr(""),
        description="Admin password; login is disabled while empty",
    )

    # Completion providers
    openrouter_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenRouter API key",
    )
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenAI-compatible endpoint for the OpenRouter provider",
    )
    anthropic_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Anthropic API key",
    )

    # Session marker
    session_secret_key: SecretStr = Field(
        description="Secret used to sign the admin session marker",
    )
    session_algorithm: str = Field(
        default="HS256",
        description="Session marker signing algorithm",
    )
    session_tab_hours: int = Field(
        default=12,
        ge=1,
        le=72,
        description="Lifetime of a tab-scoped session marker in hours",
    )
    session_remember_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Lifetime of a remembered session marker in days",
    )

    # Database
    database_url: SecretStr = Field(
        default=SecretStr(""),
        description="Database URL (postgresql://...); empty disables the remote store",
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    guest_key_prefix: str = Field(
        default="guest",
        description="Key namespace for guest chat history",
    )

    # --- Domain properties ---

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            env=self.app_env,
            debug=self.debug,
            cors_origins=tuple(
                origin.strip()
                for origin in self.cors_origins.split(",")
                if origin.strip()
            ),
        )

    @cached_property
    def branding(self) -> BrandingConfig:
        """Site branding and admin credentials."""
        return BrandingConfig(
            site_name=self.site_name,
            admin_username=self.admin_username,
            admin_password=self.admin_password,
        )

    @cached_property
    def llm(self) -> LLMConfig:
        """Completion provider configuration."""
        return LLMConfig(
            openrouter_api_key=self.openrouter_api_key,
            openrouter_base_url=self.openrouter_base_url,
            anthropic_api_key=self.anthropic_api_key,
        )

    @cached_property
    def auth(self) -> AuthConfig:
        """Session marker configuration."""
        return AuthConfig(
            secret_key=self.session_secret_key,
            algorithm=self.session_algorithm,
            tab_session_hours=self.session_tab_hours,
            remember_days=self.session_remember_days,
        )

    @cached_property
    def database(self) -> DatabaseConfig:
        """Database connection configuration."""
        return DatabaseConfig(url=self.database_url)

    @cached_property
    def redis(self) -> RedisConfig:
        """Redis connection configuration."""
        return RedisConfig(url=self.redis_url, guest_prefix=self.guest_key_prefix)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development


# Global settings instance
settings = Settings()
