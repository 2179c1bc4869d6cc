"""AI audit: one structured log record per inference call.

Scans are not persisted, so the record goes to the ``imei_scanner.ai.audit``
logger instead of a table.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any

from imei_scanner.core.config import get_settings

from .providers.base import ProviderResult

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("imei_scanner.ai.audit")

# Scope-dependent audit actions. Falls back to "AI_RUN" for unknown scopes.
SCOPE_ACTIONS: dict[str, str] = {
    "vision": "AI_VISION_SCAN",
}


def build_ai_run_record(
    *,
    scope: str,
    provider_result: ProviderResult,
    prompt_text: str,
    outcome: str,
    extra_meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the audit record for one AI run.

    Prompt and response are hashed; raw text is only included when
    ``AI_DEBUG_STORE_RAW=true`` since responses carry device identifiers.
    """
    settings = get_settings()

    record: dict[str, Any] = {
        "action": SCOPE_ACTIONS.get(scope, "AI_RUN"),
        "scope": scope,
        "outcome": outcome,
        "provider": provider_result.provider,
        "model": provider_result.model,
        "prompt_tokens": provider_result.prompt_tokens,
        "completion_tokens": provider_result.completion_tokens,
        "latency_ms": provider_result.latency_ms,
        "prompt_hash": hashlib.sha256(prompt_text.encode()).hexdigest(),
        "response_hash": hashlib.sha256(provider_result.raw_text.encode()).hexdigest(),
    }

    if settings.ai_debug_store_raw:
        record["prompt_raw"] = prompt_text
        record["response_raw"] = provider_result.raw_text

    if extra_meta:
        record.update(extra_meta)

    return record


def log_ai_run(**kwargs: Any) -> dict[str, Any]:
    """Emit the audit record for one AI run and return it."""
    record = build_ai_run_record(**kwargs)
    audit_logger.info(
        "%s provider=%s model=%s outcome=%s latency_ms=%.2f",
        record["action"],
        record["provider"],
        record["model"],
        record["outcome"],
        record["latency_ms"],
        extra={"ai_run": record},
    )
    return record
