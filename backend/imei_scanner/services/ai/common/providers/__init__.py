"""Provider factory — returns the configured vision provider instance."""

from __future__ import annotations

import logging

from imei_scanner.core.config import get_settings

from .base import BaseProvider, MissingCredentialError, ProviderError, ProviderResult
from .mock import MockProvider

logger = logging.getLogger(__name__)

__all__ = [
    "get_provider",
    "BaseProvider",
    "MissingCredentialError",
    "MockProvider",
    "ProviderError",
    "ProviderResult",
]


def get_provider(provider_name: str) -> BaseProvider:
    """Return a provider instance for *provider_name*.

    Unlike text scopes, a scanner must never answer with invented IMEIs, so
    there is no silent mock fallback: a provider outside the allowlist, an
    unknown name or a missing API key raises ``ProviderError``.  This is
    called per scan, so a missing key fails the first scan instead of
    startup.
    """
    settings = get_settings()
    name = provider_name.lower().strip()

    if name not in settings.ai_allowed_providers:
        logger.warning("Provider %r not in allowlist", name)
        raise ProviderError(f"AI provider {name!r} is not allowed")

    if name == "mock":
        return MockProvider()

    if name == "gemini":
        if not settings.gemini_api_key:
            logger.warning("GEMINI_API_KEY not set")
            raise MissingCredentialError("GEMINI_API_KEY is not configured")
        from .gemini import GeminiProvider

        return GeminiProvider(api_key=settings.gemini_api_key)

    if name == "claude":
        if not settings.anthropic_api_key:
            logger.warning("ANTHROPIC_API_KEY not set")
            raise MissingCredentialError("ANTHROPIC_API_KEY is not configured")
        from .claude import ClaudeProvider

        return ClaudeProvider(api_key=settings.anthropic_api_key)

    if name == "openai":
        if not settings.openai_api_key:
            logger.warning("OPENAI_API_KEY not set")
            raise MissingCredentialError("OPENAI_API_KEY is not configured")
        from .openai import OpenAIProvider

        return OpenAIProvider(api_key=settings.openai_api_key)

    logger.warning("Unknown provider %r", name)
    raise ProviderError(f"Unknown AI provider {name!r}")
