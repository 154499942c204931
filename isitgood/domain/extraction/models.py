"""
Evidence extraction models.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from isitgood.domain.analysis.models import ProductCategory


UNKNOWN_PRODUCT_NAME = "Unknown Product"
INGREDIENT_LIST_PLACEHOLDER_NAME = "Product"


class CandidateItem(BaseModel):
    """Normalized candidate record built fresh for each analysis call.

    Example:
        >>> item = CandidateItem(name="Daily Moisturizer", brand="Cetaphil")
        >>> item.category
        <ProductCategory.FOOD: 'food'>
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    brand: Optional[str] = None
    barcode: Optional[str] = None
    category: ProductCategory = ProductCategory.FOOD
    ingredients: Optional[str] = None
    claims: List[str] = Field(default_factory=list)

    @field_validator("brand", "barcode", "ingredients", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        """Collaborators send "", "null" or "N/A" for absent values."""
        if isinstance(v, str) and v.strip().lower() in ("", "null", "none", "n/a", "unknown"):
            return None
        return v

    @property
    def search_query(self) -> str:
        """Name query for reference lookup: "brand name" when brand is known."""
        return f"{self.brand} {self.name}" if self.brand else self.name
