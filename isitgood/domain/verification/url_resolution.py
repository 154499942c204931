"""
Product URL resolution.

Finds a product page we trust enough to read ingredients from. A wrong
link is worse than no link, so anything short of a confident match
returns no product URL; a plain web-search URL is always returned as a
non-authoritative fallback.
"""

import re
from typing import List, Optional
from urllib.parse import quote_plus

import structlog

from isitgood.domain.analysis.models import UrlSourceTier
from isitgood.domain.verification.catalog import (
    BrandMapping,
    TrustCatalog,
    brand_in_domain,
    contains_normalized,
    shopify_slugify,
)
from isitgood.domain.verification.models import ProductSearchResult, ProductUrl, SearchHit
from isitgood.domain.verification.ports import IWebSearchClient

logger = structlog.get_logger(__name__)

PRODUCT_PAGE_PATH = re.compile(r"/(?:product|products|p|shop|item|buy)s?/")
SEARCH_RESULTS = 10


def build_search_url(name: str, brand: Optional[str] = None) -> str:
    """Plain web-search URL for the UI fallback link.

    Example:
        >>> build_search_url("Daily Lotion", "Aveeno")
        'https://www.google.com/search?q=Aveeno+Daily+Lotion'
    """
    query = f"{brand} {name}" if brand else name
    return f"https://www.google.com/search?q={quote_plus(query)}"


def is_product_page(url: str) -> bool:
    return bool(PRODUCT_PAGE_PATH.search(url.lower()))


class UrlResolver:
    """Resolves (name, brand) to a trusted product page.

    Priority, each step short-circuiting:
    1. Brand whitelist (0.9-1.0)
    2. No brand: give up
    3. Search, strict pass: official product page (0.98), marketplace
       product page with brand or name in the title (0.95)
    4. Search, relaxed pass: any official page (0.95), marketplace
       page with brand and name in the title (0.9)

    Example:
        >>> resolver = UrlResolver(search_client, TrustCatalog())
        >>> result = await resolver.resolve("Hydrating Cleanser", "CeraVe")
        >>> result.product_url.source
        <UrlSourceTier.OFFICIAL: 'official'>
    """

    def __init__(
        self,
        search_client: Optional[IWebSearchClient],
        catalog: Optional[TrustCatalog] = None,
    ) -> None:
        self._search = search_client
        self._catalog = catalog or TrustCatalog()

    async def resolve(self, name: str, brand: Optional[str] = None) -> ProductSearchResult:
        """Resolve a product URL. Never raises."""
        search_url = build_search_url(name, brand)

        whitelisted = self.check_brand_whitelist(name, brand)
        if whitelisted:
            logger.info("Resolved URL from brand whitelist", url=whitelisted.url)
            return ProductSearchResult(product_url=whitelisted, search_url=search_url)

        if not brand or len(brand.strip()) < 2:
            logger.info("No brand anchor, skipping URL search", name=name)
            return ProductSearchResult(search_url=search_url)

        if self._search is None:
            return ProductSearchResult(search_url=search_url)

        query = f"{brand} {name} product page buy"
        try:
            hits = await self._search.search(query, num=SEARCH_RESULTS)
        except Exception as e:
            logger.warning("Product URL search failed", query=query, error=str(e))
            return ProductSearchResult(search_url=search_url)

        match = self.pick_confident_match(hits, name, brand)
        if match:
            logger.info(
                "Resolved URL from search",
                url=match.url,
                source=match.source.value,
                confidence=match.confidence,
            )
        else:
            logger.info("No confident URL match", brand=brand, name=name)
        return ProductSearchResult(product_url=match, search_url=search_url)

    def check_brand_whitelist(self, name: str, brand: Optional[str]) -> Optional[ProductUrl]:
        """Build an official URL for whitelisted first-party brands."""
        matched = self._catalog.match_brand(name, brand)
        if matched is None:
            return None
        mapping, _pattern = matched

        if mapping.product_url_template:
            return self._whitelist_product_page(mapping, name, brand)

        return ProductUrl(
            url=f"https://{mapping.domain}",
            title=f"Official {brand or 'Brand'} Website",
            source=UrlSourceTier.OFFICIAL,
            confidence=1.0,
        )

    @staticmethod
    def _whitelist_product_page(
        mapping: BrandMapping, name: str, brand: Optional[str]
    ) -> ProductUrl:
        template = mapping.product_url_template or ""
        title = f"{brand or 'Brand'} - {name}"

        # Drop the brand words so "Meria Chai Masala" becomes "masala"
        clean_name = name.lower()
        for pattern in mapping.patterns:
            clean_name = clean_name.replace(pattern, "", 1).strip()

        if len(clean_name) > 2:
            slug, confidence = shopify_slugify(clean_name), 0.95
        else:
            slug, confidence = shopify_slugify(name), 0.9

        return ProductUrl(
            url=template.replace("{slug}", slug),
            title=title,
            source=UrlSourceTier.OFFICIAL,
            confidence=confidence,
        )

    def pick_confident_match(
        self, hits: List[SearchHit], name: str, brand: str
    ) -> Optional[ProductUrl]:
        """Two passes over search results; blocked domains never count."""
        allowed = [hit for hit in hits if hit.link and not self._catalog.is_blocked(hit.display_link)]

        for hit in allowed:
            product_page = is_product_page(hit.link)
            if brand_in_domain(hit.display_link, brand) and product_page:
                return self._url(hit, UrlSourceTier.OFFICIAL, 0.98)
            if self._catalog.is_trusted_marketplace(hit.display_link) and product_page:
                if contains_normalized(hit.title, brand) or contains_normalized(hit.title, name):
                    return self._url(hit, UrlSourceTier.RETAILER, 0.95)

        for hit in allowed:
            if brand_in_domain(hit.display_link, brand):
                return self._url(hit, UrlSourceTier.OFFICIAL, 0.95)
            if self._catalog.is_trusted_marketplace(hit.display_link):
                if contains_normalized(hit.title, brand) and contains_normalized(hit.title, name):
                    return self._url(hit, UrlSourceTier.MARKETPLACE, 0.9)

        return None

    @staticmethod
    def _url(hit: SearchHit, source: UrlSourceTier, confidence: float) -> ProductUrl:
        return ProductUrl(url=hit.link, title=hit.title, source=source, confidence=confidence)
