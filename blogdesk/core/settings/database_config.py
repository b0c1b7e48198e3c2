"""Database connection configuration."""

from pydantic import BaseModel, SecretStr

_ASYNC_DRIVER_PREFIXES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
}


class DatabaseConfig(BaseModel, frozen=True):
    """Database connection settings."""

    url: SecretStr

    @property
    def is_configured(self) -> bool:
        return bool(self.url.get_secret_value().strip())

    @property
    def async_url(self) -> str:
        """DB URL rewritten to the asyncpg driver for plain Postgres URLs."""
        base = self.url.get_secret_value().strip()
        for prefix, replacement in _ASYNC_DRIVER_PREFIXES.items():
            if base.startswith(prefix):
                return replacement + base[len(prefix) :]
        return base
