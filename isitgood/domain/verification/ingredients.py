"""
Ingredient string normalization and the validity test.

Every candidate ingredient string, wherever it was found, must pass
is_valid_ingredient_list before it is accepted from a scraped page.
"""

import re
from typing import Optional

COMMON_INGREDIENT_TOKENS = (
    "water",
    "aqua",
    "glycerin",
    "acid",
    "extract",
    "oil",
    "butter",
    "sodium",
    "potassium",
    "vitamin",
    "alcohol",
    "fragrance",
)

MIN_COMMAS = 3
MIN_LENGTH = 30
MAX_LENGTH = 5000
DIRECT_EVIDENCE_MIN_CHARS = 30


def clean_ingredient_string(value: str) -> str:
    """Normalize whitespace and comma spacing; drop trailing periods.

    Never merges or splits ingredients: the comma count is unchanged.

    Example:
        >>> clean_ingredient_string("Water ,Glycerin,\\n  Aloe.")
        'Water, Glycerin, Aloe'
    """
    cleaned = re.sub(r"\s+", " ", value)
    cleaned = re.sub(r"\s*,\s*", ", ", cleaned)
    cleaned = cleaned.strip()
    cleaned = re.sub(r"\.+$", "", cleaned)
    return cleaned.strip()


def is_valid_ingredient_list(value: Optional[str]) -> bool:
    """Check that a string looks like a real ingredient list.

    Requires at least 3 commas, 30-5000 characters and at least one
    common ingredient token. Navigation text and boilerplate that merely
    contain commas fail the vocabulary check.

    Example:
        >>> is_valid_ingredient_list("Water, Glycerin, Shea Butter, Tocopherol")
        True
        >>> is_valid_ingredient_list("Home, Shop, About, Contact, Blog, Cart")
        False
    """
    if not value:
        return False
    if value.count(",") < MIN_COMMAS:
        return False
    if not MIN_LENGTH <= len(value) <= MAX_LENGTH:
        return False
    lowered = value.lower()
    return any(token in lowered for token in COMMON_INGREDIENT_TOKENS)


def has_direct_evidence(value: Optional[str]) -> bool:
    """Ingredient text carried by the input itself: 30+ chars with a comma."""
    return bool(value) and len(value) >= DIRECT_EVIDENCE_MIN_CHARS and "," in value


def split_ingredients(value: str) -> list[str]:
    """Split a label-ordered list into trimmed ingredient names.

    Commas inside parentheses or between digits do not split, so
    "Water (Aqua, Eau), 1,2-Hexanediol" yields two ingredients.
    """
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for index, char in enumerate(value):
        if char in "([":
            depth += 1
        elif char in ")]" and depth:
            depth -= 1
        between_digits = (
            0 < index < len(value) - 1 and value[index - 1].isdigit() and value[index + 1].isdigit()
        )
        if char == "," and depth == 0 and not between_digits:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return [p.strip().rstrip(".").strip() for p in parts if p.strip().rstrip(".").strip()]
