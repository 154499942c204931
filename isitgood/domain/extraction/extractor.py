"""
Evidence extractor.

Turns raw input into a CandidateItem. Text is handled with fixed
keyword heuristics; images are read by the reasoning collaborator.
Extraction never blocks the pipeline: any failure degrades to the
"Unknown Product" default.
"""

from typing import Any, List, Optional

import structlog

from isitgood.domain.analysis.models import ProductCategory
from isitgood.domain.extraction.models import (
    INGREDIENT_LIST_PLACEHOLDER_NAME,
    UNKNOWN_PRODUCT_NAME,
    CandidateItem,
)
from isitgood.domain.extraction.prompts import IMAGE_EXTRACTION_PROMPT
from isitgood.domain.reasoning.ports import (
    GenerationConfig,
    ImagePayload,
    IReasoningProvider,
)
from isitgood.domain.reference.helpers import extract_barcode_from_text
from isitgood.domain.shared.structured_decode import decode_structured

logger = structlog.get_logger(__name__)


BODY_KEYWORDS = (
    "shampoo",
    "conditioner",
    "lotion",
    "moisturizer",
    "serum",
    "cleanser",
    "sunscreen",
    "spf",
    "cream",
    "skincare",
    "haircare",
    "body wash",
    "deodorant",
    "perfume",
    "mascara",
    "lipstick",
    "foundation",
    "concealer",
    "makeup",
    "cosmetic",
    "facial",
    "toner",
    "retinol",
    "hyaluronic",
    "niacinamide",
    "cetaphil",
    "cerave",
    "neutrogena",
    "olay",
)

MENU_KEYWORDS = (
    "menu",
    "restaurant",
    "cafe",
    "dish",
    "entrée",
    "appetizer",
    "dessert",
    "served with",
    "chef",
    "special",
    "daily",
    "grilled",
    "sautéed",
    "braised",
)

# (claim label, substrings that evidence it)
TEXT_CLAIMS = (
    ("Organic", ("organic",)),
    ("No Sugar", ("no sugar",)),
    ("No Additives", ("no additives",)),
    ("No Fillers", ("no fillers",)),
    ("Non-GMO", ("non-gmo",)),
    ("Vegan", ("vegan",)),
    ("Gluten-Free", ("gluten-free", "gluten free")),
)

INGREDIENT_LIST_MIN_CHARS = 50


def detect_category_from_text(text: str) -> ProductCategory:
    """Guess a category: body vocabulary beats menu vocabulary beats food.

    Example:
        >>> detect_category_from_text("CeraVe Hydrating Cleanser")
        <ProductCategory.BODY: 'body'>
    """
    text_lower = text.lower()
    if any(keyword in text_lower for keyword in BODY_KEYWORDS):
        return ProductCategory.BODY
    if any(keyword in text_lower for keyword in MENU_KEYWORDS):
        return ProductCategory.MENU
    return ProductCategory.FOOD


def detect_claims(text: str) -> List[str]:
    """Find marketing claims by direct substring checks."""
    text_lower = text.lower()
    return [
        label
        for label, needles in TEXT_CLAIMS
        if any(needle in text_lower for needle in needles)
    ]


def looks_like_ingredient_list(text: str) -> bool:
    """Long, comma-bearing text is treated as a pasted ingredient list."""
    return "," in text and len(text) > INGREDIENT_LIST_MIN_CHARS


class EvidenceExtractor:
    """Builds CandidateItems from text or images.

    Example:
        >>> extractor = EvidenceExtractor(reasoning)
        >>> item = extractor.extract_from_text("Meria Chai Organic Masala")
        >>> item.claims
        ['Organic']
    """

    def __init__(self, reasoning: Optional[IReasoningProvider] = None) -> None:
        self._reasoning = reasoning

    def extract_from_text(self, text: str) -> CandidateItem:
        """Extract a candidate from free text. Pure; never fails."""
        stripped = text.strip()
        if not stripped:
            return CandidateItem(name=UNKNOWN_PRODUCT_NAME)

        if looks_like_ingredient_list(stripped):
            name = INGREDIENT_LIST_PLACEHOLDER_NAME
            ingredients: Optional[str] = stripped
        else:
            name = stripped
            ingredients = None

        item = CandidateItem(
            name=name,
            barcode=extract_barcode_from_text(stripped),
            category=detect_category_from_text(stripped),
            ingredients=ingredients,
            claims=detect_claims(stripped),
        )
        logger.info(
            "Extracted candidate from text",
            category=item.category.value,
            has_ingredients=item.ingredients is not None,
            claims=item.claims,
        )
        return item

    async def extract_from_image(self, image: ImagePayload) -> CandidateItem:
        """Extract a candidate from an image via the reasoning collaborator.

        Any collaborator or parse failure degrades to the
        "Unknown Product" food default.
        """
        if self._reasoning is None:
            logger.warning("No reasoning collaborator configured for image extraction")
            return CandidateItem(name=UNKNOWN_PRODUCT_NAME)

        try:
            response = await self._reasoning.generate(
                IMAGE_EXTRACTION_PROMPT,
                image=image,
                config=GenerationConfig(temperature=0.1, max_output_tokens=1024),
            )
        except Exception as e:
            logger.warning("Image extraction call failed", error=str(e))
            return CandidateItem(name=UNKNOWN_PRODUCT_NAME)

        data = decode_structured(response)
        if data is None:
            return CandidateItem(name=UNKNOWN_PRODUCT_NAME)

        item = self._candidate_from_extraction(data)
        logger.info(
            "Extracted candidate from image",
            name=item.name,
            brand=item.brand,
            category=item.category.value,
            claims=len(item.claims),
        )
        return item

    @staticmethod
    def _candidate_from_extraction(data: dict[str, Any]) -> CandidateItem:
        name = data.get("name")
        claims = data.get("cleanClaims")
        barcode = data.get("barcode")
        ingredients = data.get("ingredients")
        brand = data.get("brand")
        return CandidateItem(
            name=str(name).strip() if name and str(name).strip() else UNKNOWN_PRODUCT_NAME,
            brand=str(brand).strip() if brand else None,
            barcode=str(barcode).strip() if barcode else None,
            category=ProductCategory.coerce(data.get("category")),
            ingredients=str(ingredients).strip() if ingredients else None,
            claims=[str(c).strip() for c in claims if str(c).strip()]
            if isinstance(claims, list)
            else [],
        )
