"""
Ports for web search and page fetch.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import List, Protocol, runtime_checkable

from isitgood.domain.verification.models import SearchHit


@runtime_checkable
class IWebSearchClient(Protocol):
    """
    Port for a ranked web search API.
    """

    async def search(self, query: str, num: int = 10) -> List[SearchHit]:
        """
        Run a query.

        Args:
            query: Query string
            num: Max results

        Returns:
            Ranked results, possibly empty

        Raises:
            ExternalServiceError: On API, network or quota failure
        """
        ...


@runtime_checkable
class IPageFetcher(Protocol):
    """
    Port for raw page fetch.
    """

    async def fetch(self, url: str) -> str:
        """
        Fetch a URL's HTML.

        Args:
            url: Page URL

        Returns:
            Raw HTML

        Raises:
            PageFetchError: On HTTP status >= 400 or transport failure
        """
        ...
