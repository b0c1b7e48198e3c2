"""Domain-specific configuration models."""

from blogdesk.core.settings.app_config import AppConfig
from blogdesk.core.settings.auth_config import AuthConfig
from blogdesk.core.settings.branding_config import BrandingConfig
from blogdesk.core.settings.database_config import DatabaseConfig
from blogdesk.core.settings.llm_config import LLMConfig
from blogdesk.core.settings.redis_config import RedisConfig

__all__ = [
    "AppConfig",
    "AuthConfig",
    "BrandingConfig",
    "DatabaseConfig",
    "LLMConfig",
    "RedisConfig",
]
