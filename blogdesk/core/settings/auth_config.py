"""Session marker configuration."""

from pydantic import BaseModel, SecretStr


class AuthConfig(BaseModel, frozen=True):
    """Signing and lifetime settings for the admin session marker."""

    secret_key: SecretStr
    algorithm: str
    tab_session_hours: int
    remember_days: int

    @property
    def tab_session_seconds(self) -> int:
        return self.tab_session_hours * 3600

    @property
    def remember_seconds(self) -> int:
        return self.remember_days * 86400
