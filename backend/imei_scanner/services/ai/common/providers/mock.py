"""Mock provider — deterministic responses for tests and local runs."""

from __future__ import annotations

import time
from typing import Optional

from imei_scanner.core.image_processing import EncodedImage

from .base import BaseProvider, ProviderResult

MOCK_RESPONSE_TEXT = (
    "```json\n"
    '{"description": "Two device boxes side by side", "deviceCount": 2, "devices": ['
    '{"position": "left", "imei": "351756051523999"}, '
    '{"position": "right", "imei": "490154203237518"}]}\n'
    "```"
)


class MockProvider(BaseProvider):
    name = "mock"

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
        t0 = time.monotonic()
        text = MOCK_RESPONSE_TEXT
        elapsed = (time.monotonic() - t0) * 1000
        return ProviderResult(
            raw_text=text,
            model=model or "mock-vision-v1",
            provider=self.name,
            prompt_tokens=len(prompt.split()),
            completion_tokens=len(text.split()),
            latency_ms=round(elapsed, 2),
        )
