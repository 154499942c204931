"""
Deep ingredient search.

The slow, user-triggered escalation used after the quick pipeline
fails. Query variants run sequentially with a delay between them, and
every new candidate URL is read until one yields a valid ingredient
list. Progress is reported through an explicit callback.
"""

import asyncio
import re
from typing import Callable, List, Optional, Set
from urllib.parse import quote

import structlog

from isitgood.domain.verification.catalog import (
    TrustCatalog,
    brand_in_domain,
    extract_domain,
    normalize,
)
from isitgood.domain.verification.models import DeepSearchResult
from isitgood.domain.verification.page_extraction import ProductPageReader
from isitgood.domain.verification.ports import IWebSearchClient

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[str], None]

DEEP_SEARCH_RESULTS = 5
DEFAULT_DELAY_SECONDS = 0.3
CANDIDATE_PAGE_PATH = re.compile(r"/(?:product|products|p|shop|item|buy|dp)s?/")


def build_queries(name: str, brand: Optional[str]) -> List[str]:
    """Query variants, most specific first.

    Example:
        >>> build_queries("Hydra Serum", None)[:2]
        ['Hydra Serum ingredients list', 'Hydra Serum INCI ingredients']
    """
    prefix = f"{brand} {name}" if brand else name
    queries = [
        f"{prefix} ingredients list",
        f"{brand} {name} INCI" if brand else f"{name} INCI ingredients",
        f'"{brand}" "{name}" ingredients' if brand else f'"{name}" ingredients',
        f"{prefix} ingredients site:ulta.com",
        f"{prefix} ingredients site:sephora.com",
        f"{prefix} ingredients site:amazon.com",
    ]
    if brand:
        queries.append(f"{name} ingredients site:{normalize(brand)}.com")
    return queries


def retailer_search_urls(name: str, brand: str) -> List[str]:
    """Direct retailer search pages checked when every query failed."""
    term = quote(f"{brand} {name}")
    return [
        f"https://www.ulta.com/search/{term}",
        f"https://www.sephora.com/search?keyword={term}",
    ]


class DeepIngredientSearch:
    """Multi-query, multi-URL ingredient search.

    Example:
        >>> deep = DeepIngredientSearch(search_client, page_reader)
        >>> result = await deep.run("Hydra Serum", "Glow Co", on_progress=print)
        Searching: "Glow Co Hydra Serum ingredients list..."
        Checking ulta.com...
        >>> result.success, result.searches_performed
        (True, 1)
    """

    def __init__(
        self,
        search_client: Optional[IWebSearchClient],
        page_reader: ProductPageReader,
        catalog: Optional[TrustCatalog] = None,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
    ) -> None:
        self._search = search_client
        self._page_reader = page_reader
        self._catalog = catalog or TrustCatalog()
        self._delay_seconds = delay_seconds

    async def run(
        self,
        name: str,
        brand: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> DeepSearchResult:
        """
        Search until one page yields valid ingredients.

        Args:
            name: Product name
            brand: Brand, if known
            on_progress: Receives human-readable status strings

        Returns:
            DeepSearchResult with counts for transparency
        """
        report = on_progress or (lambda _message: None)
        searches_performed = 0
        urls_checked = 0
        seen: Set[str] = set()

        if self._search is not None:
            for index, query in enumerate(build_queries(name, brand)):
                if index > 0 and self._delay_seconds > 0:
                    await asyncio.sleep(self._delay_seconds)

                report(f'Searching: "{query[:40]}..."')
                searches_performed += 1
                try:
                    hits = await self._search.search(query, num=DEEP_SEARCH_RESULTS)
                except Exception as e:
                    logger.warning("Deep search query failed", query=query, error=str(e))
                    continue

                for hit in hits:
                    if not hit.link or hit.link in seen:
                        continue
                    seen.add(hit.link)
                    domain = hit.display_link or extract_domain(hit.link)
                    if self._catalog.is_blocked(domain):
                        continue
                    if not self._worth_reading(hit.link, domain, brand):
                        continue

                    report(f"Checking {domain}...")
                    urls_checked += 1
                    page = await self._page_reader.read(hit.link)
                    if page.success and page.ingredients:
                        logger.info(
                            "Deep search found ingredients",
                            source=page.source,
                            searches=searches_performed,
                            urls=urls_checked,
                        )
                        return DeepSearchResult(
                            success=True,
                            ingredients=page.ingredients,
                            source=page.source,
                            product_url=hit.link,
                            searches_performed=searches_performed,
                            urls_checked=urls_checked,
                        )

        if brand:
            report("Checking major retailers directly...")
            for url in retailer_search_urls(name, brand):
                if url in seen:
                    continue
                seen.add(url)
                urls_checked += 1
                page = await self._page_reader.read(url)
                if page.success and page.ingredients:
                    return DeepSearchResult(
                        success=True,
                        ingredients=page.ingredients,
                        source=page.source,
                        product_url=url,
                        searches_performed=searches_performed,
                        urls_checked=urls_checked,
                    )

        logger.info(
            "Deep search exhausted",
            name=name,
            searches=searches_performed,
            urls=urls_checked,
        )
        return DeepSearchResult(
            success=False,
            searches_performed=searches_performed,
            urls_checked=urls_checked,
        )

    def _worth_reading(self, url: str, domain: str, brand: Optional[str]) -> bool:
        if CANDIDATE_PAGE_PATH.search(url.lower()):
            return True
        if self._catalog.is_trusted_marketplace(domain):
            return True
        return bool(brand) and brand_in_domain(domain, brand or "")
