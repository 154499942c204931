"""
Reference product database models.

Open Food Facts and Open Beauty Facts share one record shape; the
food-only fields stay empty for beauty records.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReferenceDatabase(str, Enum):
    """Structured product databases, valued by display name."""

    OPEN_FOOD_FACTS = "Open Food Facts"
    OPEN_BEAUTY_FACTS = "Open Beauty Facts"


class NutriscoreGrade(str, Enum):
    """Nutri-Score grade classification."""

    A = "a"  # Best
    B = "b"
    C = "c"
    D = "d"
    E = "e"  # Worst
    UNKNOWN = "unknown"


class LookupSource(str, Enum):
    """How a record was found."""

    BARCODE = "barcode"
    SEARCH = "search"


class ReferenceProduct(BaseModel):
    """Canonical product record from a reference database.

    Example:
        >>> product = ReferenceProduct(
        ...     code="3017620422003",
        ...     product_name="Nutella",
        ...     brands="Ferrero",
        ...     ingredients_text="Sugar, palm oil, hazelnuts",
        ...     nova_group=4,
        ... )
        >>> product.preferred_ingredients
        'Sugar, palm oil, hazelnuts'
    """

    model_config = ConfigDict(frozen=True)

    code: str = ""
    product_name: str = "Unknown"
    brands: str = ""
    ingredients_text: str = ""
    ingredients_text_en: str = ""
    allergens_tags: List[str] = Field(default_factory=list)
    image_url: str = ""
    categories: str = ""
    labels: str = ""

    # Food only
    additives_tags: List[str] = Field(default_factory=list)
    nutriscore_grade: Optional[NutriscoreGrade] = None
    nova_group: Optional[int] = Field(None, ge=1, le=4)

    @property
    def preferred_ingredients(self) -> str:
        """English ingredient text when present, otherwise the original."""
        return self.ingredients_text_en or self.ingredients_text


class LookupResult(BaseModel):
    """Found / NotFound outcome of a reference lookup."""

    model_config = ConfigDict(frozen=True)

    found: bool
    database: ReferenceDatabase
    product: Optional[ReferenceProduct] = None
    source: Optional[LookupSource] = None

    @classmethod
    def not_found(cls, database: ReferenceDatabase) -> "LookupResult":
        return cls(found=False, database=database)

    def is_found(self) -> bool:
        return self.found and self.product is not None
