"""
Mode classification for image input.

Images are classified by the reasoning collaborator with a three-way
menu / product / selection prompt. Anything unparseable falls back to
"product".
"""

from enum import Enum
from typing import Any, List

import structlog
from pydantic import BaseModel, ConfigDict, Field

from isitgood.domain.reasoning.ports import (
    GenerationConfig,
    ImagePayload,
    IReasoningProvider,
)
from isitgood.domain.shared.structured_decode import decode_structured

logger = structlog.get_logger(__name__)


IMAGE_TYPE_PROMPT = """Look at this image and determine what it shows.

Is this:
A) A MENU - showing multiple food/drink items with names and prices (restaurant menu, cafe menu, food ordering screen, etc.)
B) A PRODUCT - a single packaged product (food package, beauty product, supplement, etc.)
C) A SELECTION - multiple products shown together (store shelf, product comparison, online search results, etc.)

Key indicators of a MENU:
- Multiple food item names listed
- Prices shown ($13.95, etc.)
- Restaurant/cafe branding
- Categories like "Appetizers", "Bowls", "Drinks"
- Dietary markers (GF, DF, V)

Key indicators of a PRODUCT:
- Single packaged item
- Brand name and product name
- Barcode visible
- Nutrition facts or ingredient list

Respond with ONLY valid JSON:
{
  "type": "menu" | "product" | "selection",
  "confidence": 0.0-1.0,
  "reason": "brief explanation",
  "items": ["list of item names if menu/selection, empty if product"]
}"""

MENU_TRANSCRIPTION_PROMPT = """Extract all the menu items/products shown in this image.

For each item, include:
- Item name
- Price (if visible)
- Description (if visible)
- Dietary markers (GF, DF, V, etc.)

Format as a simple text list, one item per line."""


class ImageKind(str, Enum):
    """What an image shows."""

    MENU = "menu"
    PRODUCT = "product"
    SELECTION = "selection"


class ImageTypeDetection(BaseModel):
    """Collaborator's image classification."""

    model_config = ConfigDict(frozen=True)

    kind: ImageKind = ImageKind.PRODUCT
    confidence: float = Field(0.5, ge=0.0, le=1.0)
    reason: str = ""
    items: List[str] = Field(default_factory=list)

    @property
    def is_menu_or_selection(self) -> bool:
        return self.kind in (ImageKind.MENU, ImageKind.SELECTION)


PARSE_FALLBACK = ImageTypeDetection(
    kind=ImageKind.PRODUCT, confidence=0.5, reason="Parse error"
)


def parse_image_type(data: dict[str, Any]) -> ImageTypeDetection:
    """Map decoded collaborator JSON onto ImageTypeDetection.

    Unknown types and out-of-range confidences fall back to the
    product default.
    """
    try:
        kind = ImageKind(str(data.get("type", "")).strip().lower())
        confidence = float(data.get("confidence", 0.5))
    except (ValueError, TypeError):
        return PARSE_FALLBACK

    items = data.get("items") or []
    return ImageTypeDetection(
        kind=kind,
        confidence=max(0.0, min(1.0, confidence)),
        reason=str(data.get("reason", "")),
        items=[str(item) for item in items if str(item).strip()] if isinstance(items, list) else [],
    )


class ImageModeClassifier:
    """Delegates image classification and menu transcription.

    Example:
        >>> classifier = ImageModeClassifier(reasoning)
        >>> detection = await classifier.classify(image)
        >>> if detection.is_menu_or_selection:
        ...     text = await classifier.transcribe_menu(image)
    """

    def __init__(self, reasoning: IReasoningProvider) -> None:
        self._reasoning = reasoning

    async def classify(self, image: ImagePayload) -> ImageTypeDetection:
        """Ask the collaborator what the image shows.

        Raises:
            ReasoningError: If the collaborator call itself fails
        """
        response = await self._reasoning.generate(
            IMAGE_TYPE_PROMPT,
            image=image,
            config=GenerationConfig(temperature=0.1, max_output_tokens=512),
        )
        data = decode_structured(response)
        if data is None:
            return PARSE_FALLBACK

        detection = parse_image_type(data)
        logger.info(
            "Image classified",
            kind=detection.kind.value,
            confidence=detection.confidence,
            items=len(detection.items),
        )
        return detection

    async def transcribe_menu(self, image: ImagePayload) -> str:
        """Transcribe the items shown in a menu/selection image as plain text."""
        return await self._reasoning.generate(
            MENU_TRANSCRIPTION_PROMPT,
            image=image,
            config=GenerationConfig(temperature=0.1, json_output=False),
        )
