"""
Analysis result domain models.

ScanResult is the scored (or explicitly unscored) outcome of product
mode. MenuSelectionResult is the ranking outcome of menu/selection mode
and has no score field at all.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from isitgood.domain.shared.value_objects import ResultId


class Verdict(str, Enum):
    """Clean verdict bracket."""

    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    MEH = "MEH"  # Also the neutral "unverified" state
    POOR = "POOR"
    BAD = "BAD"  # Hard red flag, never scored


class ProductCategory(str, Enum):
    """Category of a single analyzed item."""

    FOOD = "food"
    MENU = "menu"
    BODY = "body"

    @classmethod
    def coerce(cls, value: Any) -> ProductCategory:
        """Coerce free text into a category, defaulting to food.

        Example:
            >>> ProductCategory.coerce("BODY")
            <ProductCategory.BODY: 'body'>
            >>> ProductCategory.coerce("beverage")
            <ProductCategory.FOOD: 'food'>
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.FOOD


class AnalysisMode(str, Enum):
    """Top-level routing mode."""

    PRODUCT = "product"
    MENU_SELECTION = "menu_selection"


class UrlSourceTier(str, Enum):
    """Trust tier of a resolved product URL."""

    OFFICIAL = "official"
    RETAILER = "retailer"
    MARKETPLACE = "marketplace"

    @property
    def label(self) -> str:
        """Human label shown next to the link."""
        return _TIER_LABELS[self]


_TIER_LABELS = {
    UrlSourceTier.OFFICIAL: "Official Site",
    UrlSourceTier.RETAILER: "Trusted Retailer",
    UrlSourceTier.MARKETPLACE: "Verified Listing",
}


DEFAULT_HEADLINES = {
    Verdict.EXCELLENT: "PERFECTION.",
    Verdict.GOOD: "BEAUTIFULLY CLEAN.",
    Verdict.MEH: "COULD BE BETTER.",
    Verdict.POOR: "NOT IDEAL.",
    Verdict.BAD: "Not Recommended",
}

UNVERIFIED_HEADLINE = "Ingredients Not Verified"
UNVERIFIED_SUMMARY_PREFIX = "We found this product but couldn't verify the ingredients. "
ERROR_HEADLINE = "ANALYSIS ERROR"
ERROR_SUMMARY = "We encountered an error analyzing this product. Please try again."


def verdict_for_score(score: Optional[int]) -> Verdict:
    """Map a clean score onto its verdict bracket.

    Args:
        score: 0-100 score, or None for a red-flagged product

    Returns:
        90-100 EXCELLENT, 70-89 GOOD, 50-69 MEH, 0-49 POOR, None BAD

    Example:
        >>> verdict_for_score(90)
        <Verdict.EXCELLENT: 'EXCELLENT'>
        >>> verdict_for_score(89)
        <Verdict.GOOD: 'GOOD'>
    """
    if score is None:
        return Verdict.BAD
    if score >= 90:
        return Verdict.EXCELLENT
    if score >= 70:
        return Verdict.GOOD
    if score >= 50:
        return Verdict.MEH
    return Verdict.POOR


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════
# PRODUCT MODE
# ═══════════════════════════════════════════════════════════


class IngredientNote(BaseModel):
    """A red flag or watch-out: ingredient name plus explanation."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""


class Alternative(BaseModel):
    """A cleaner alternative product suggestion."""

    model_config = ConfigDict(frozen=True)

    name: str
    brand: Optional[str] = None
    reason: str = ""
    product_url: Optional[str] = None


class DIYRecipe(BaseModel):
    """Homemade alternative."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    ingredients: List[str] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)


class GreenwashAlert(BaseModel):
    """Marketing claims contradicted by the ingredient list."""

    model_config = ConfigDict(frozen=True)

    suggested: bool = False
    reason: str = ""


class ScanResult(BaseModel):
    """Product-mode analysis result.

    Invariants enforced on construction:
    - score is None exactly when verdict is BAD or ingredients are unverified
    - a non-null score carries exactly its bracket verdict
    - unverified results carry no red flags and no watch-outs

    Derive updated results with :meth:`derive`, which re-validates.

    Example:
        >>> result = ScanResult(
        ...     category=ProductCategory.FOOD,
        ...     product_name="Chai",
        ...     verdict=Verdict.EXCELLENT,
        ...     score=100,
        ...     headline="PERFECTION.",
        ...     ingredients_verified=True,
        ...     ingredient_source="scanned image",
        ... )
        >>> assert result.score == 100
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: ResultId.generate().value)
    category: ProductCategory
    product_name: str
    brand: Optional[str] = None
    verdict: Verdict
    score: Optional[int] = Field(None, ge=0, le=100)
    headline: str
    summary: str = ""
    red_flags: List[IngredientNote] = Field(default_factory=list)
    watch_outs: List[IngredientNote] = Field(default_factory=list)
    good_stuff: List[str] = Field(default_factory=list)
    greenwash_alert: Optional[GreenwashAlert] = None
    alternatives: List[Alternative] = Field(default_factory=list)
    diy_recipes: List[DIYRecipe] = Field(default_factory=list)
    product_url: Optional[str] = None
    product_url_source: Optional[UrlSourceTier] = None
    search_url: Optional[str] = None
    verified_online: bool = False
    ingredients_verified: bool = False
    ingredient_source: Optional[str] = None
    ingredients_from_scan: bool = False
    claims_only: bool = False
    ingredients: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def check_score_invariants(self) -> ScanResult:
        """Reject results whose score, verdict and evidence disagree."""
        unscored = self.verdict == Verdict.BAD or not self.ingredients_verified
        if unscored and self.score is not None:
            raise ValueError("score must be null for BAD or unverified results")
        if not unscored and self.score is None:
            raise ValueError("verified non-BAD results must carry a score")
        if self.score is not None and verdict_for_score(self.score) != self.verdict:
            raise ValueError(
                f"verdict {self.verdict.value} does not match score {self.score}"
            )
        if not self.ingredients_verified and (self.red_flags or self.watch_outs):
            raise ValueError("unverified results cannot assert red flags or watch-outs")
        if self.ingredients_verified and not self.ingredient_source:
            raise ValueError("verified results must name their ingredient source")
        return self

    @property
    def product_url_label(self) -> Optional[str]:
        return self.product_url_source.label if self.product_url_source else None

    def derive(self, **changes: Any) -> ScanResult:
        """Build a new, re-validated result from this one plus changes."""
        data = self.model_dump()
        data.update(changes)
        return ScanResult.model_validate(data)


# ═══════════════════════════════════════════════════════════
# MENU / SELECTION MODE
# ═══════════════════════════════════════════════════════════


MENU_DISCLAIMER = (
    "Always double-check with staff or managers about oils, dressings, allergens, "
    "and preparation details. Restaurants and suppliers can change ingredients."
)


class CleanestOption(BaseModel):
    """Top pick in a selection."""

    model_config = ConfigDict(frozen=True)

    name: str
    why_it_stands_out: str = ""
    notes: Optional[str] = None


class AlsoGoodOption(BaseModel):
    """Solid alternative in a selection."""

    model_config = ConfigDict(frozen=True)

    name: str
    notes: Optional[str] = None


class CautionItem(BaseModel):
    """Item to go easy on; reason is required."""

    model_config = ConfigDict(frozen=True)

    name: str
    reason: str


class MenuSelectionResult(BaseModel):
    """Menu/selection ranking result. Carries no score by construction."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: ResultId.generate().value)
    title: str
    cleanest_options: List[CleanestOption] = Field(default_factory=list)
    also_good_options: List[AlsoGoodOption] = Field(default_factory=list)
    caution_items: List[CautionItem] = Field(default_factory=list)
    general_advice: str = ""
    disclaimer: str = MENU_DISCLAIMER
    item_count: int = Field(0, ge=0)
    created_at: datetime = Field(default_factory=_utcnow)


class SmartAnalysisResult(BaseModel):
    """Router output: which mode ran, and its result."""

    model_config = ConfigDict(frozen=True)

    mode: AnalysisMode
    result: Union[ScanResult, MenuSelectionResult]
