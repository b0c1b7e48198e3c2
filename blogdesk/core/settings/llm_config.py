"""LLM provider configuration."""

from pydantic import BaseModel, SecretStr


class LLMConfig(BaseModel, frozen=True):
    """Credentials and endpoints for the completion providers."""

    openrouter_api_key: SecretStr
    openrouter_base_url: str
    anthropic_api_key: SecretStr

    @property
    def has_openrouter(self) -> bool:
        return bool(self.openrouter_api_key.get_secret_value())

    @property
    def has_anthropic(self) -> bool:
        return bool(self.anthropic_api_key.get_secret_value())
