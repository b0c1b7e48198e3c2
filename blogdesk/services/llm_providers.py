"""Completion providers: one LangChain chat model factory per backend."""

from abc import ABC, abstractmethod

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from blogdesk.core.settings import LLMConfig
from blogdesk.services.model_catalogue import ProviderName


class CompletionProvider(ABC):
    """A backend able to build a chat model for one of its model names."""

    name: ProviderName

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the provider's credential is present."""

    @abstractmethod
    def build_model(
        self, model_name: str, temperature: float, streaming: bool
    ) -> BaseChatModel:
        """Build a chat model bound to this provider's credential."""


class OpenRouterProvider(CompletionProvider):
    """OpenAI-compatible endpoint served by OpenRouter."""

    name: ProviderName = "openrouter"

    def __init__(self, config: LLMConfig) -> None:
        self._config = config

    @property
    def is_configured(self) -> bool:
        return self._config.has_openrouter

    def build_model(
        self, model_name: str, temperature: float, streaming: bool
    ) -> BaseChatModel:
        return ChatOpenAI(
            model=model_name,
            api_key=self._config.openrouter_api_key,
            base_url=self._config.openrouter_base_url,
            temperature=temperature,
            streaming=streaming,
        )


class AnthropicProvider(CompletionProvider):
    name: ProviderName = "anthropic"

    def __init__(self, config: LLMConfig) -> None:
        self._config = config

    @property
    def is_configured(self) -> bool:
        return self._config.has_anthropic

    def build_model(
        self, model_name: str, temperature: float, streaming: bool
    ) -> BaseChatModel:
        return ChatAnthropic(  # type: ignore[call-arg]
            model_name=model_name,
            api_key=self._config.anthropic_api_key,
            temperature=temperature,
            streaming=streaming,
        )


def build_providers(config: LLMConfig) -> dict[ProviderName, CompletionProvider]:
    """Every wired provider, keyed by the name the catalogue uses."""
    providers: list[CompletionProvider] = [
        OpenRouterProvider(config),
        AnthropicProvider(config),
    ]
    return {provider.name: provider for provider in providers}
