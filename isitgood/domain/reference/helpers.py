"""
Reference data helpers: NOVA descriptions, additive formatting and
barcode detection in free text.
"""

import re
from typing import Iterable, List, Optional

NOVA_DESCRIPTIONS = {
    1: "Unprocessed or minimally processed",
    2: "Processed culinary ingredients",
    3: "Processed foods",
    4: "Ultra-processed foods",
}

# EAN-13 first, then UPC-A, then EAN-8
_BARCODE_PATTERNS = (
    re.compile(r"\b(\d{13})\b"),
    re.compile(r"\b(\d{12})\b"),
    re.compile(r"\b(\d{8})\b"),
)


def nova_description(group: Optional[int]) -> str:
    """Describe a NOVA processing group.

    Example:
        >>> nova_description(4)
        'Ultra-processed foods'
        >>> nova_description(None)
        'Processing level unknown'
    """
    if group is None:
        return "Processing level unknown"
    return NOVA_DESCRIPTIONS.get(group, "Processing level unknown")


def format_additives(tags: Iterable[str]) -> List[str]:
    """Turn taxonomy tags like "en:e330" into "E330"."""
    return [re.sub(r"^[a-z]{2}:", "", tag).upper() for tag in tags if tag]


def extract_barcode_from_text(text: str) -> Optional[str]:
    """Find a barcode-looking digit run in text.

    Example:
        >>> extract_barcode_from_text("Nutella 3017620422003 750g")
        '3017620422003'
    """
    for pattern in _BARCODE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None
