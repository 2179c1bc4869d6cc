"""Device box scan service: image in, ``AnalysisOutcome`` out.

Pipeline per call, strictly linear:
  encode -> prompt -> provider call -> extract JSON -> validate.

- Encoding or provider failure -> ``ScanHardError`` (no retry).
- Unparseable payload -> ``ScanSoftError`` with a user-facing message.
- Model-declared unusable image -> ``ScanSuccess`` with ``soft_error`` set,
  count forced to 0 and devices cleared.

Nothing is cached or kept between calls.
"""

from __future__ import annotations

import enum
import logging
import time

import httpx

from imei_scanner.core.image_processing import EncodingError, ScanRequest, encode_request

from ..common import router as ai_router
from ..common.audit import log_ai_run
from ..common.json_tools import extract_json_candidate
from ..common.providers.base import ProviderError, ProviderResult
from .contracts import AnalysisOutcome, ScanHardError, ScanSoftError, ScanSuccess
from .parsing import SoftParseError, parse_scan_result
from .prompt import SCAN_PROMPT_VERSION, build_scan_prompt

logger = logging.getLogger(__name__)


class ScanState(str, enum.Enum):
    IDLE = "idle"
    ENCODING = "encoding"
    AWAITING_INFERENCE = "awaiting_inference"
    VALIDATING = "validating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _enter(state: ScanState) -> ScanState:
    logger.debug("Scan state -> %s", state.value)
    return state


def _inference_failed(
    config: ai_router.ResolvedConfig | None,
    prompt: str,
    message: str,
    t0: float,
) -> ScanHardError:
    """Audit a failed provider call and build its hard error."""
    _enter(ScanState.FAILED)
    total_ms = round((time.monotonic() - t0) * 1000, 2)
    # No response exists; audit with a stand-in result.
    stand_in = ProviderResult(
        raw_text="",
        model=config.model if config else "",
        provider=config.provider.name if config else "unresolved",
        latency_ms=total_ms,
    )
    log_ai_run(
        scope="vision",
        provider_result=stand_in,
        prompt_text=prompt,
        outcome="hard_error",
        extra_meta={"prompt_version": SCAN_PROMPT_VERSION, "error": message, "total_ms": total_ms},
    )
    return ScanHardError(stage="inference", message=message)


def count_mismatch_warning(device_count: int, listed: int) -> str:
    return f"Model reported {device_count} device(s) but listed {listed}"


async def scan_image(
    request: ScanRequest,
    *,
    override_provider: str | None = None,
    override_model: str | None = None,
) -> AnalysisOutcome:
    """Run one scan of *request* and classify the outcome.

    Always returns; no exception from encoding, the provider or parsing
    escapes to the caller.
    """
    _enter(ScanState.IDLE)

    # --- Encoding ---
    _enter(ScanState.ENCODING)
    try:
        image = encode_request(request)
    except EncodingError as exc:
        _enter(ScanState.FAILED)
        logger.info("Scan rejected before inference: %s", exc)
        return ScanHardError(stage="encoding", message=str(exc))

    prompt = build_scan_prompt()

    # --- Inference ---
    _enter(ScanState.AWAITING_INFERENCE)
    t0 = time.monotonic()
    config: ai_router.ResolvedConfig | None = None
    try:
        config = ai_router.resolve(
            override_provider=override_provider,
            override_model=override_model,
        )
        provider_result: ProviderResult = await config.provider.generate(
            prompt,
            image=image,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout_seconds=config.timeout_seconds,
        )
    except (ProviderError, httpx.HTTPError) as exc:
        message = str(exc) or type(exc).__name__
        logger.warning("Vision inference failed: %s", message)
        return _inference_failed(config, prompt, message, t0)
    except Exception as exc:
        logger.exception("Unexpected vision provider failure")
        return _inference_failed(config, prompt, str(exc) or type(exc).__name__, t0)

    logger.debug("Raw vision response: %s", provider_result.raw_text)

    # --- Validation ---
    _enter(ScanState.VALIDATING)
    candidate = extract_json_candidate(provider_result.raw_text)
    parsed = parse_scan_result(candidate)
    total_ms = round((time.monotonic() - t0) * 1000, 2)

    if isinstance(parsed, SoftParseError):
        _enter(ScanState.FAILED)
        log_ai_run(
            scope="vision",
            provider_result=provider_result,
            prompt_text=prompt,
            outcome="soft_error",
            extra_meta={"prompt_version": SCAN_PROMPT_VERSION, "reason": parsed.reason, "total_ms": total_ms},
        )
        return ScanSoftError(reason=parsed.reason)

    result = parsed
    warnings: tuple[str, ...] = ()
    if result.soft_error:
        logger.info("Model declared image unusable: %s", result.soft_error)
        result = result.without_devices()
    elif result.count_mismatch():
        warning = count_mismatch_warning(result.device_count, len(result.devices))
        logger.warning("Scan count mismatch: %s", warning)
        warnings = (warning,)

    _enter(ScanState.SUCCEEDED)
    log_ai_run(
        scope="vision",
        provider_result=provider_result,
        prompt_text=prompt,
        outcome="soft_content_error" if result.soft_error else "success",
        extra_meta={
            "prompt_version": SCAN_PROMPT_VERSION,
            "device_count": result.device_count,
            "devices_listed": len(result.devices),
            "total_ms": total_ms,
        },
    )
    return ScanSuccess(result=result, warnings=warnings)
