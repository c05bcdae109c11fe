"""
Tolerant parsing of model replies.

Gemini is asked for strict JSON but regularly wraps it in prose or a
markdown code fence.  :func:`parse_structured` tries progressively looser
strategies and falls back to an empty dict instead of raising.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

FENCE = "```"


def _load_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def _whole_text(text: str) -> Optional[Dict[str, Any]]:
    return _load_object(text)


def _fenced_block(text: str) -> Optional[Dict[str, Any]]:
    start = text.find(FENCE)
    if start == -1:
        return None
    start += len(FENCE)
    end = text.find(FENCE, start)
    if end == -1:
        return None
    body = text[start:end].strip()
    # Drop a language tag such as ```json
    if body and not body.startswith(("{", "[")):
        first_line, _, rest = body.partition("\n")
        if first_line.strip().isalnum():
            body = rest.strip()
    return _load_object(body)


def _outer_braces(text: str) -> Optional[Dict[str, Any]]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return _load_object(text[start : end + 1])


STRATEGIES: List[Callable[[str], Optional[Dict[str, Any]]]] = [
    _whole_text,
    _fenced_block,
    _outer_braces,
]


def as_float(value: Any) -> Optional[float]:
    """Coerce a model-supplied number, returning ``None`` if unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if number != number else number  # NaN


def parse_structured(text: Optional[str]) -> Dict[str, Any]:
    """Parse a model reply into a dictionary.

    Args:
        text: The raw reply.  ``None`` is treated as empty.

    Returns:
        The first JSON object recovered by the strategies in
        :data:`STRATEGIES`, or ``{}`` if none succeeds.
    """
    cleaned = (text or "").strip()
    for strategy in STRATEGIES:
        result = strategy(cleaned)
        if result is not None:
            return result
    logger.warning(
        "Failed to parse JSON from response (first 200 chars): %s", cleaned[:200]
    )
    return {}
