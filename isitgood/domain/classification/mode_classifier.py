"""
Mode classifier for text input.

Decides whether free text describes one product or a menu/multi-item
selection. Pure and deterministic: a fixed cascade of signals where the
first confident signal wins, with a weighted combination as the last
resort.
"""

import re
from typing import List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

logger = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════
# SIGNAL VOCABULARY
# ═══════════════════════════════════════════════════════════

PRICE_PATTERN = re.compile(r"\$\d{1,3}(?:[.,]\d{2})?|\d{1,3}[.,]\d{2}")

# Uppercase markers only; lowercase "v"/"ve" occur in ordinary prose
DIETARY_MARKER_PATTERN = re.compile(r"\(?\b(?:GF|DF|VG|VE|NF|SF|V)\b\)?")

ITEM_PRICE_LINE_PATTERN = re.compile(r"^.+\$?\d{1,3}\.\d{2}\s*$", re.MULTILINE)

SECTION_HEADERS = (
    "appetizer",
    "appetizers",
    "starter",
    "starters",
    "entrée",
    "entrees",
    "main",
    "mains",
    "main course",
    "dessert",
    "desserts",
    "sweet",
    "sweets",
    "drinks",
    "beverages",
    "cocktails",
    "wines",
    "sides",
    "side dishes",
    "salads",
    "soups",
    "bowls",
    "all-day",
    "brunch",
    "lunch",
    "dinner",
    "breakfast",
    "specialty",
    "specials",
    "chef's choice",
    "smoothies",
    "juices",
    "coffee",
    "espresso",
    "all-day eats",
    "specialty drink",
    "coffee creations",
)

FOOD_ITEM_KEYWORDS = (
    "bowl",
    "salad",
    "sandwich",
    "burger",
    "wrap",
    "taco",
    "smoothie",
    "juice",
    "latte",
    "cappuccino",
    "espresso",
    "croissant",
    "toast",
    "oatmeal",
    "yogurt",
    "acai",
    "chicken",
    "beef",
    "salmon",
    "tuna",
    "shrimp",
    "avocado",
    "quinoa",
    "kale",
)

PRODUCT_NAME_LINE = re.compile(
    r"^[A-Z][a-zA-Z0-9\s\-'&]+(?:\s+(?:by|from|–|-)\s+[A-Z][a-zA-Z0-9\s]+)?$"
)
FOOD_LINE = re.compile(
    r"(?:bowl|salad|sandwich|burger|wrap|smoothie|juice|coffee|latte|protein|powder|bar|shake)",
    re.IGNORECASE,
)
CLAIM_LINE = re.compile(
    r"(?:organic|natural|grass-fed|plant-based|vegan|gluten-free)", re.IGNORECASE
)
BARE_PRICE_LINE = re.compile(r"^\$?\d+(?:\.\d{2})?$")
COMMA_LIST = re.compile(r"(?:[A-Z][a-z]+(?:\s+[A-Z]?[a-z]+)*(?:\s*,\s*)){2,}")

MAX_DETECTED_ITEMS = 20


# ═══════════════════════════════════════════════════════════
# MODELS
# ═══════════════════════════════════════════════════════════


class ModeDetection(BaseModel):
    """Classifier verdict."""

    model_config = ConfigDict(frozen=True)

    is_menu_or_selection: bool
    confidence: float = Field(..., ge=0.0, le=1.0)
    reason: str
    detected_items: Optional[List[str]] = None


class MultipleItems(BaseModel):
    """Distinct item names found in text."""

    model_config = ConfigDict(frozen=True)

    count: int
    items: List[str]


# ═══════════════════════════════════════════════════════════
# CLASSIFIER
# ═══════════════════════════════════════════════════════════


def detect_multiple_items(text: str) -> MultipleItems:
    """Find distinct product/item names in text.

    Line-based first: short lines that look like a title-cased product
    name, or mention a food format or a clean claim. When fewer than
    three lines qualify, comma-separated capitalised runs are added.

    Args:
        text: Raw input text

    Returns:
        Unique item count and up to 20 item names in first-seen order

    Example:
        >>> found = detect_multiple_items("Green Bowl\\nKale Salad\\nOat Latte")
        >>> found.count
        3
    """
    items: List[str] = []
    lines = [line for line in re.split(r"[\n\r]+", text) if len(line.strip()) > 3]

    for line in lines:
        trimmed = line.strip()
        if len(trimmed) > 80:
            continue
        if BARE_PRICE_LINE.match(trimmed):
            continue
        if (
            PRODUCT_NAME_LINE.match(trimmed)
            or FOOD_LINE.search(trimmed)
            or CLAIM_LINE.search(trimmed)
        ):
            items.append(trimmed)

    if len(items) < 3:
        for match in COMMA_LIST.finditer(text):
            parts = [part.strip() for part in match.group(0).split(",")]
            items.extend(part for part in parts if len(part) > 2)

    unique = list(dict.fromkeys(items))
    return MultipleItems(count=len(unique), items=unique[:MAX_DETECTED_ITEMS])


class ModeClassifier:
    """Rule-based product vs menu/selection classifier.

    Example:
        >>> classifier = ModeClassifier()
        >>> result = classifier.classify("Cetaphil Gentle Skin Cleanser")
        >>> result.is_menu_or_selection
        False
    """

    LONG_TEXT_CHARS = 300
    LONG_TEXT_LINES = 5
    COMBINED_THRESHOLD = 6.0

    def classify(self, text: str) -> ModeDetection:
        """Run the signal cascade over text.

        Args:
            text: Raw input text

        Returns:
            ModeDetection; detected_items is set only by the
            distinct-item signal
        """
        text_lower = text.lower()
        line_count = text.count("\n") + 1

        if len(text) > self.LONG_TEXT_CHARS and line_count >= self.LONG_TEXT_LINES:
            return self._menu(
                0.85,
                f"Long text ({len(text)} chars, {line_count} lines), "
                "treating as menu/selection",
            )

        prices = PRICE_PATTERN.findall(text)
        if len(prices) >= 3:
            return self._menu(
                0.95, f"Found {len(prices)} price patterns, likely a menu or product list"
            )

        dietary = DIETARY_MARKER_PATTERN.findall(text)
        if len(dietary) >= 2:
            return self._menu(0.9, f"Found {len(dietary)} dietary markers, likely a menu")

        sections = sum(1 for header in SECTION_HEADERS if header in text_lower)
        if sections >= 2:
            return self._menu(0.85, f"Found {sections} menu section headers")

        food_keywords = sum(text_lower.count(keyword) for keyword in FOOD_ITEM_KEYWORDS)
        if food_keywords >= 5:
            return self._menu(
                0.8, f"Found {food_keywords} food item keywords, likely a menu"
            )

        multiple = detect_multiple_items(text)
        if multiple.count >= 3:
            return self._menu(
                0.8,
                f"Found {multiple.count} distinct items, treating as selection",
                detected_items=multiple.items,
            )

        item_price_lines = ITEM_PRICE_LINE_PATTERN.findall(text)
        if len(item_price_lines) >= 3:
            return self._menu(0.9, f"Found {len(item_price_lines)} item+price lines")

        combined = (
            len(prices) * 2 + len(dietary) * 3 + sections * 2 + food_keywords * 0.5
        )
        if combined >= self.COMBINED_THRESHOLD:
            return self._menu(
                0.75, f"Combined signals suggest menu/selection (score: {combined:g})"
            )

        logger.debug("No menu/selection signals", length=len(text), combined=combined)
        return ModeDetection(
            is_menu_or_selection=False,
            confidence=0.0,
            reason="No menu or multi-item patterns detected",
        )

    @staticmethod
    def _menu(
        confidence: float, reason: str, detected_items: Optional[List[str]] = None
    ) -> ModeDetection:
        logger.info("Menu/selection detected", confidence=confidence, reason=reason)
        return ModeDetection(
            is_menu_or_selection=True,
            confidence=confidence,
            reason=reason,
            detected_items=detected_items,
        )
