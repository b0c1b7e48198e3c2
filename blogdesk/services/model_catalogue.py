"""Catalogue of selectable completion models."""

from dataclasses import dataclass
from typing import Literal

ProviderName = Literal["openrouter", "anthropic"]


@dataclass(frozen=True)
class ModelSpec:
    """One selectable model, namespaced by its provider."""

    key: str
    provider: ProviderName
    model_name: str
    name: str
    short_name: str
    is_free: bool


MODEL_CATALOGUE: dict[str, ModelSpec] = {
    spec.key: spec
    for spec in (
        ModelSpec(
            key="openrouter-v3",
            provider="openrouter",
            model_name="deepseek/deepseek-chat-v3-0324:free",
            name="DeepSeek V3 (Free)",
            short_name="V3 Free",
            is_free=True,
        ),
        ModelSpec(
            key="openrouter-r1",
            provider="openrouter",
            model_name="deepseek/deepseek-r1:free",
            name="DeepSeek R1 (Free)",
            short_name="R1 Free",
            is_free=True,
        ),
        ModelSpec(
            key="openrouter-gpt-4o-mini",
            provider="openrouter",
            model_name="openai/gpt-4o-mini",
            name="GPT-4o mini",
            short_name="4o mini",
            is_free=False,
        ),
        ModelSpec(
            key="anthropic-sonnet",
            provider="anthropic",
            model_name="claude-sonnet-4-20250514",
            name="Claude Sonnet 4",
            short_name="Sonnet",
            is_free=False,
        ),
        ModelSpec(
            key="anthropic-haiku",
            provider="anthropic",
            model_name="claude-3-5-haiku-latest",
            name="Claude Haiku 3.5",
            short_name="Haiku",
            is_free=False,
        ),
    )
}

PREFERRED_FREE_MODEL = "openrouter-v3"
DEFAULT_GENERAL_MODEL = "openrouter-v3"
DEFAULT_SVG_MODEL = "anthropic-sonnet"
