"""Turn an extracted JSON candidate into a ``ScanResult``."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from .contracts import ScanResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SoftParseError:
    """The candidate was not a JSON object matching ``ScanResult``."""

    reason: str


def parse_scan_result(candidate: str) -> ScanResult | SoftParseError:
    """Parse *candidate* into a ``ScanResult``.

    Malformed JSON, a non-object top level and schema violations all come
    back as ``SoftParseError``; no parse exception leaves this function.
    The soft-error invariant is not applied here.
    """
    try:
        payload = json.loads(candidate)
    except (json.JSONDecodeError, TypeError, ValueError) as exc:
        logger.warning("Scan response is not valid JSON: %s", exc)
        return SoftParseError(reason=f"invalid JSON: {exc}")

    if not isinstance(payload, dict):
        logger.warning("Scan response JSON is %s, expected object", type(payload).__name__)
        return SoftParseError(reason=f"expected JSON object, got {type(payload).__name__}")

    try:
        return ScanResult.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        logger.warning("Scan response does not match schema: %s", ", ".join(fields))
        return SoftParseError(reason=f"schema mismatch: {', '.join(fields)}")
