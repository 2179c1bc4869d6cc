"""Vision provider resolution: request override, then env, then Gemini."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from imei_scanner.core.config import get_settings

from .providers import BaseProvider, get_provider

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "gemini"


@dataclass(frozen=True)
class ResolvedConfig:
    provider: BaseProvider
    model: str
    temperature: float
    max_tokens: int
    timeout_seconds: Optional[float]


def _pick_model(provider_name: str, requested: str, allowed: dict[str, list[str]]) -> str:
    """Keep *requested* if the provider's allowlist permits it, else its first entry."""
    models = allowed.get(provider_name, [])
    if not models:
        return requested
    if requested and requested not in models:
        logger.warning("Model %r not allowed for %r, using %r", requested, provider_name, models[0])
    return requested if requested in models else models[0]


def resolve(
    *,
    override_provider: str | None = None,
    override_model: str | None = None,
) -> ResolvedConfig:
    """Pick the provider and model for a scan.

    Per-request overrides only count when ``ENABLE_AI_OVERRIDES`` is on;
    otherwise ``AI_VISION_PROVIDER`` / ``AI_VISION_MODEL`` apply.  Raises
    ``ProviderError`` when the provider cannot be built.
    """
    settings = get_settings()
    use_overrides = settings.enable_ai_overrides

    provider_name = (override_provider or "").lower().strip() if use_overrides else ""
    provider_name = provider_name or settings.ai_vision_provider.lower().strip() or DEFAULT_PROVIDER

    model = (override_model or "").strip() if use_overrides else ""
    model = _pick_model(provider_name, model or settings.ai_vision_model.strip(), settings.ai_allowed_models)

    return ResolvedConfig(
        provider=get_provider(provider_name),
        model=model,
        temperature=settings.ai_temperature,
        max_tokens=settings.ai_max_tokens,
        timeout_seconds=settings.ai_vision_timeout_seconds,
    )
