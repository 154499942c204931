"""
Trust catalog.

Brand-to-domain whitelist, trusted marketplaces, blocked domains and
the first-party brand line whose claims may stand in for ingredients.
Injected into URL resolution, deep search and verification so the
lists can be swapped in tests and deployments.
"""

import re
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field


def normalize(value: str) -> str:
    """Lowercase and drop everything but letters and digits.

    Example:
        >>> normalize("Café Meria!")
        'cafmeria'
    """
    return re.sub(r"[^a-z0-9]", "", value.lower())


def contains_normalized(haystack: str, needle: str) -> bool:
    return normalize(needle) in normalize(haystack)


def brand_in_domain(domain: str, brand: str) -> bool:
    """Brand appears in the domain; brands under 3 characters never match."""
    normalized_brand = normalize(brand)
    if len(normalized_brand) < 3:
        return False
    return normalized_brand in normalize(domain)


def extract_domain(url: str) -> str:
    """Hostname without a leading "www.", or "unknown" when unparseable.

    Example:
        >>> extract_domain("https://www.ulta.com/p/serum-123")
        'ulta.com'
    """
    try:
        host = urlparse(url).hostname
    except ValueError:
        return "unknown"
    if not host:
        return "unknown"
    return host[4:] if host.startswith("www.") else host


def shopify_slugify(name: str) -> str:
    """Shopify-style handle.

    Example:
        >>> shopify_slugify("Masala  Chai -- Organic!")
        'masala-chai-organic'
    """
    slug = name.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


class BrandMapping(BaseModel):
    """A first-party brand and its official domain."""

    model_config = ConfigDict(frozen=True)

    patterns: List[str]
    domain: str
    product_url_template: Optional[str] = None  # uses a {slug} placeholder


class FirstPartyBrand(BaseModel):
    """Brand line trusted on its own claims when ingredients are missing."""

    model_config = ConfigDict(frozen=True)

    label: str
    brand_fragments: List[str] = Field(default_factory=list)
    name_fragments: List[str] = Field(default_factory=list)
    min_claims: int = 3

    def matches(self, name: str, brand: Optional[str]) -> bool:
        """Name fragments only count for an item that carries a brand."""
        brand_lower = (brand or "").strip().lower()
        if not brand_lower:
            return False
        name_lower = name.lower()
        return any(f in brand_lower for f in self.brand_fragments) or any(
            f in name_lower for f in self.name_fragments
        )

    @property
    def source_label(self) -> str:
        return f"{self.label} (trusted)"


DEFAULT_BRAND_MAPPINGS = [
    BrandMapping(
        patterns=["meria chai", "meriachai"],
        domain="meriachai.com",
        product_url_template="https://meriachai.com/products/{slug}",
    ),
    BrandMapping(patterns=["café meria", "cafe meria", "cafemeria"], domain="cafemeria.com"),
    BrandMapping(
        patterns=[
            "meria botanical",
            "meria skin",
            "meria cream",
            "meria body",
            "botanical skin cream",
        ],
        domain="meria.us",
    ),
]

DEFAULT_TRUSTED_MARKETPLACES = [
    # Major retailers
    "amazon.com",
    "walmart.com",
    "target.com",
    "costco.com",
    "wholefoods.com",
    "wholefoodsmarket.com",
    # Health & beauty
    "sephora.com",
    "ulta.com",
    "dermstore.com",
    "cultbeauty.com",
    # Natural / organic
    "thrivemarket.com",
    "vitacost.com",
    "iherb.com",
    "naturalgrocers.com",
    # Marketplaces
    "etsy.com",
    "ebay.com",
    # Grocery delivery
    "instacart.com",
    "freshdirect.com",
]

DEFAULT_BLOCKED_DOMAINS = [
    "pinterest.com",
    "facebook.com",
    "twitter.com",
    "instagram.com",
    "youtube.com",
    "reddit.com",
    "tiktok.com",
    "linkedin.com",
    "quora.com",
    "wikipedia.org",
    "yelp.com",
    "tripadvisor.com",
]

DEFAULT_FIRST_PARTY_BRAND = FirstPartyBrand(
    label="Meria brand",
    brand_fragments=["meria"],
    name_fragments=["meria chai", "café meria", "cafe meria"],
)


class TrustCatalog(BaseModel):
    """Injectable trust configuration.

    Example:
        >>> catalog = TrustCatalog()
        >>> catalog.is_trusted_marketplace("www.sephora.com")
        True
        >>> catalog.is_blocked("pinterest.com")
        True
    """

    model_config = ConfigDict(frozen=True)

    brand_mappings: List[BrandMapping] = Field(
        default_factory=lambda: list(DEFAULT_BRAND_MAPPINGS)
    )
    trusted_marketplaces: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TRUSTED_MARKETPLACES)
    )
    blocked_domains: List[str] = Field(default_factory=lambda: list(DEFAULT_BLOCKED_DOMAINS))
    first_party_brands: List[FirstPartyBrand] = Field(
        default_factory=lambda: [DEFAULT_FIRST_PARTY_BRAND]
    )

    def match_brand(self, name: str, brand: Optional[str]) -> Optional[tuple[BrandMapping, str]]:
        """Find the whitelist mapping whose pattern occurs in "brand name".

        Returns:
            (mapping, matched pattern) or None
        """
        search_text = f"{brand or ''} {name}".lower()
        for mapping in self.brand_mappings:
            for pattern in mapping.patterns:
                if pattern in search_text:
                    return mapping, pattern
        return None

    def is_trusted_marketplace(self, domain: str) -> bool:
        domain_lower = domain.lower()
        return any(m in domain_lower for m in self.trusted_marketplaces)

    def is_blocked(self, domain: str) -> bool:
        domain_lower = domain.lower()
        return any(b in domain_lower for b in self.blocked_domains)

    def first_party_brand(self, name: str, brand: Optional[str]) -> Optional[FirstPartyBrand]:
        for first_party in self.first_party_brands:
            if first_party.matches(name, brand):
                return first_party
        return None
