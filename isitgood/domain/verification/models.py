"""
Ingredient verification models.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from isitgood.domain.analysis.models import UrlSourceTier


SCANNED_IMAGE_SOURCE = "scanned image"


class SearchHit(BaseModel):
    """One ranked web-search result."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    link: str = ""
    snippet: str = ""
    display_link: str = ""


class ProductUrl(BaseModel):
    """A resolved product page with its trust tier."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    source: UrlSourceTier
    confidence: float = Field(..., ge=0.0, le=1.0)


class ProductSearchResult(BaseModel):
    """URL resolution output.

    product_url is set only when confident; search_url is always set.
    """

    model_config = ConfigDict(frozen=True)

    product_url: Optional[ProductUrl] = None
    search_url: str


class PageContent(BaseModel):
    """Outcome of fetching and reading a product page. Never an exception."""

    model_config = ConfigDict(frozen=True)

    success: bool
    ingredients: Optional[str] = None
    source: Optional[str] = None
    claims: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    error: Optional[str] = None


class DeepSearchResult(BaseModel):
    """Outcome of the multi-query deep search escalation."""

    model_config = ConfigDict(frozen=True)

    success: bool
    ingredients: Optional[str] = None
    source: Optional[str] = None
    product_url: Optional[str] = None
    searches_performed: int = 0
    urls_checked: int = 0


class VerificationState(BaseModel):
    """Whether ingredients are verified, and from where.

    Example:
        >>> state = VerificationState(
        ...     verified=True,
        ...     source="scanned image",
        ...     from_scan=True,
        ...     ingredients="Water, Glycerin, Aloe",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    verified: bool = False
    source: Optional[str] = None
    from_scan: bool = False
    ingredients: Optional[str] = None

    @model_validator(mode="after")
    def source_required_when_verified(self) -> "VerificationState":
        if self.verified and not self.source:
            raise ValueError("verified state must name its source")
        return self


class VerificationOutcome(BaseModel):
    """Pipeline output: the state plus evidence gathered along the way."""

    model_config = ConfigDict(frozen=True)

    state: VerificationState
    claims: List[str] = Field(default_factory=list)
    additional_info: str = ""
    page: Optional[PageContent] = None
