"""Configuration loading from environment variables and CLI flags."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Provider(str, Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


DEFAULTS = {
    Provider.ANTHROPIC: "claude-sonnet-4-6",
    Provider.OPENAI: "gpt-4o",
}

ENV_KEYS = {
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
    Provider.OPENAI: "OPENAI_API_KEY",
}

PROVIDER_ENV = "VISION_TOOL_PROVIDER"
MODEL_ENV = "VISION_TOOL_MODEL"

DEFAULT_PROVIDER = Provider.ANTHROPIC
DEFAULT_MAX_TOKENS = 2048


@dataclass
class Config:
    provider: Provider
    model: str
    api_key: str
    max_tokens: int = DEFAULT_MAX_TOKENS

    @classmethod
    def from_env(
        cls,
        provider: Optional[Provider] = None,
        model_override: Optional[str] = None,
        api_key_override: Optional[str] = None,
    ) -> "Config":
        """Resolve settings: explicit argument, then environment, then default."""
        provider = provider or _provider_from_env()
        model = model_override or os.environ.get(MODEL_ENV) or DEFAULTS[provider]
        api_key = api_key_override or os.environ.get(ENV_KEYS[provider], "")
        if not api_key:
            raise RuntimeError(
                f"No API key for {provider.value}. "
                f"Set {ENV_KEYS[provider]} in your environment or .env file."
            )
        return cls(provider=provider, model=model, api_key=api_key)


def _provider_from_env() -> Provider:
    name = os.environ.get(PROVIDER_ENV, "").strip().lower()
    if not name:
        return DEFAULT_PROVIDER
    try:
        return Provider(name)
    except ValueError:
        choices = ", ".join(p.value for p in Provider)
        raise RuntimeError(
            f"Unknown provider {name!r} in {PROVIDER_ENV}. Choose one of: {choices}."
        ) from None
