"""Site branding and admin credential configuration."""

from pydantic import BaseModel, SecretStr


class BrandingConfig(BaseModel, frozen=True):
    """Site name and the single admin account."""

    site_name: str
    admin_username: str
    admin_password: SecretStr

    @property
    def is_admin_configured(self) -> bool:
        """Admin login is only possible once a password is set."""
        return bool(self.admin_password.get_secret_value())
