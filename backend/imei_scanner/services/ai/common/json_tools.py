"""Locate a JSON object embedded in free-form LLM output.

The model is asked for bare JSON but may wrap it in a Markdown fence or add
commentary around it.  Extraction runs an ordered list of strategies; the
first one that finds something wins.  Nothing here parses or judges the
candidate, that is left to the caller.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ExtractionStrategy = Callable[[str], Optional[str]]

_FENCED_OBJECT_RE = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", re.IGNORECASE)
_BRACE_SPAN_RE = re.compile(r"\{[\s\S]*\}")


def fenced_block(text: str) -> str | None:
    """Object inside a ```` ``` ```` fence, optionally tagged ``json``."""
    match = _FENCED_OBJECT_RE.search(text)
    return match.group(1) if match else None


def brace_span(text: str) -> str | None:
    """Greedy span from the first ``{`` to the last ``}``."""
    match = _BRACE_SPAN_RE.search(text)
    return match.group(0) if match else None


def raw_text(text: str) -> str:
    return text


EXTRACTION_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    fenced_block,
    brace_span,
    raw_text,
)


def extract_json_candidate(
    text: str,
    strategies: tuple[ExtractionStrategy, ...] = EXTRACTION_STRATEGIES,
) -> str:
    """Return the best JSON candidate found in *text*.

    Always returns a string; if no strategy matches, *text* itself.
    """
    text = text or ""
    for strategy in strategies:
        candidate = strategy(text)
        if candidate is not None:
            logger.debug("JSON candidate found by %s", strategy.__name__)
            return candidate
    return text
