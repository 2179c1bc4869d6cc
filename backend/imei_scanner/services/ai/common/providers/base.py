"""Abstract base for all vision providers."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Optional

from imei_scanner.core.image_processing import EncodedImage


class ProviderError(Exception):
    """The inference call failed; the message is passed through to the caller."""


class MissingCredentialError(ProviderError):
    """The provider's API key is not configured."""


@dataclass(frozen=True)
class ProviderResult:
    """Immutable result returned by every provider."""

    raw_text: str
    model: str
    provider: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0


class BaseProvider(abc.ABC):
    """Contract that every vision provider must implement.

    One call, one outbound request.  Implementations raise ``ProviderError``
    (or let ``httpx.HTTPError`` propagate) and never retry.
    """

    name: str = "base"

    @abc.abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        image: EncodedImage,
        model: str = "",
        temperature: float = 0.2,
        max_tokens: int = 2048,
        timeout_seconds: Optional[float] = None,
    ) -> ProviderResult:
        """Send *prompt* with *image* and return a ``ProviderResult``."""


def error_message(resp) -> str:
    """Best-effort error text from a failed provider response."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return f"{resp.status_code} {err['message']}"
        if isinstance(err, str) and err:
            return f"{resp.status_code} {err}"
    text = (resp.text or "").strip()
    return f"{resp.status_code} {text[:300]}" if text else f"HTTP {resp.status_code}"
