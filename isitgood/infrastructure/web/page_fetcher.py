"""
Product page fetcher.

Plain aiohttp GET, optionally routed through a fetch intermediary whose
URL template carries a ``{url}`` placeholder.
"""

import asyncio
from typing import Optional
from urllib.parse import quote

import aiohttp
import structlog

from isitgood.domain.shared.errors import PageFetchError

logger = structlog.get_logger(__name__)


class PageFetcher:
    """Fetches raw HTML, implementing IPageFetcher.

    Example:
        >>> async with PageFetcher(proxy_template="https://proxy.example/?url={url}") as f:
        ...     html = await f.fetch("https://www.ulta.com/p/serum-123")
    """

    USER_AGENT = "Mozilla/5.0 (compatible; IsItGood/1.0)"
    ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

    def __init__(
        self,
        timeout_seconds: float = 10,
        proxy_template: Optional[str] = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.proxy_template = proxy_template
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "PageFetcher":
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(
            headers={"User-Agent": self.USER_AGENT, "Accept": self.ACCEPT}
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        if self._session:
            await self._session.close()

    def request_url(self, url: str) -> str:
        """Target URL, wrapped in the intermediary template when configured.

        Example:
            >>> PageFetcher(proxy_template="https://p.example/?u={url}").request_url("https://a.com/x")
            'https://p.example/?u=https%3A%2F%2Fa.com%2Fx'
        """
        if not self.proxy_template:
            return url
        return self.proxy_template.replace("{url}", quote(url, safe=""))

    async def fetch(self, url: str) -> str:
        """
        Fetch a page's HTML.

        Raises:
            PageFetchError: "HTTP <status>" on status >= 400, or the
                transport error message
        """
        if not self._session:
            raise PageFetchError("Client not initialized, use async with")

        try:
            async with self._session.get(
                self.request_url(url),
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                if response.status >= 400:
                    logger.info("Page fetch rejected", url=url, status=response.status)
                    raise PageFetchError(f"HTTP {response.status}", status=response.status)
                return await response.text()
        except asyncio.TimeoutError as e:
            raise PageFetchError(f"Timeout after {self.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise PageFetchError(str(e) or type(e).__name__) from e
