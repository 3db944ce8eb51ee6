"""
Provider factory for creating LLM provider instances.

Handles provider selection based on configuration and available API keys.
"""

import logging
from enum import Enum

from .base import LLMProvider
from .anthropic import AnthropicProvider
from .openai import OpenAIProvider
from .google import GoogleProvider

logger = logging.getLogger(__name__)


class ProviderType(Enum):
    """Available LLM provider types."""
    GOOGLE = "google"
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


def create_provider(
    provider_type: ProviderType | str,
    api_key: str,
    default_model: str | None = None,
) -> LLMProvider:
    """
    Create an LLM provider instance.

    Raises:
        ValueError: If provider_type is unknown
    """
    if isinstance(provider_type, str):
        try:
            provider_type = ProviderType(provider_type.lower())
        except ValueError:
            raise ValueError(
                f"Unknown provider: {provider_type}. "
                f"Available: {[p.value for p in ProviderType]}"
            )

    if provider_type == ProviderType.GOOGLE:
        return GoogleProvider(api_key=api_key, default_model=default_model or "gemini-2.5-flash")
    elif provider_type == ProviderType.ANTHROPIC:
        return AnthropicProvider(api_key=api_key, default_model=default_model or "claude-haiku-4-5")
    elif provider_type == ProviderType.OPENAI:
        return OpenAIProvider(api_key=api_key, default_model=default_model or "gpt-4o-mini")
    else:
        raise ValueError(f"Unknown provider type: {provider_type}")


def get_provider_from_env(
    google_key: str | None = None,
    anthropic_key: str | None = None,
    openai_key: str | None = None,
    preferred_provider: str | None = None,
    default_model: str | None = None,
) -> LLMProvider | None:
    """
    Create a provider from available keys.

    A preferred provider with a key wins; otherwise the first configured key
    in the order Google > Anthropic > OpenAI. Returns None if no key is set.
    """
    providers = {
        ProviderType.GOOGLE: google_key,
        ProviderType.ANTHROPIC: anthropic_key,
        ProviderType.OPENAI: openai_key,
    }

    if preferred_provider:
        try:
            pref_type = ProviderType(preferred_provider.lower())
        except ValueError:
            logger.warning(f"Unknown LLM_PROVIDER '{preferred_provider}', using first configured key")
        else:
            if providers.get(pref_type):
                return create_provider(pref_type, providers[pref_type], default_model=default_model)
            logger.warning(f"LLM_PROVIDER '{preferred_provider}' has no API key, using first configured key")

    for provider_type, api_key in providers.items():
        if api_key:
            return create_provider(provider_type, api_key, default_model=default_model)

    return None
