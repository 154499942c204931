"""
Structured-decode-with-fallback primitive.

Every reasoning-collaborator call requests JSON-only output, but models
still wrap answers in Markdown fences or add stray prose. All call sites
decode through this module so fence stripping and fallback behave the
same everywhere.
"""

import json
import re
from typing import Any, Optional

import structlog

from isitgood.domain.shared.errors import StructuredDecodeError

logger = structlog.get_logger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json|JSON)?\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any.

    Args:
        text: Raw collaborator output

    Returns:
        Text with leading ```json / ``` and trailing ``` removed

    Example:
        >>> strip_code_fences('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned)
        cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def decode_structured_or_raise(text: Optional[str]) -> dict[str, Any]:
    """Decode collaborator output into a JSON object.

    Args:
        text: Raw collaborator output

    Returns:
        Parsed JSON object

    Raises:
        StructuredDecodeError: If text is empty, not JSON, or not an object
    """
    if not text or not text.strip():
        raise StructuredDecodeError("Empty collaborator response")

    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        # Models occasionally prepend prose; fall back to the outermost object
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise StructuredDecodeError(f"Invalid JSON response: {cleaned[:200]}")
        try:
            data = json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError as e:
            raise StructuredDecodeError(f"Invalid JSON response: {cleaned[:200]}") from e

    if not isinstance(data, dict):
        raise StructuredDecodeError(f"Expected JSON object, got {type(data).__name__}")
    return data


def decode_structured(
    text: Optional[str], default: Optional[dict[str, Any]] = None
) -> Optional[dict[str, Any]]:
    """Decode collaborator output, returning ``default`` on any failure.

    Args:
        text: Raw collaborator output
        default: Value returned when decoding fails

    Returns:
        Parsed JSON object or ``default``

    Example:
        >>> decode_structured("not json", default={"type": "product"})
        {'type': 'product'}
    """
    try:
        return decode_structured_or_raise(text)
    except StructuredDecodeError as e:
        logger.warning("Structured decode failed, using fallback", error=str(e))
        return default
