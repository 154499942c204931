"""Google Custom Search client - Implements IWebSearchClient port.

Key Features:
- Custom Search JSON API (key + engine id)
- Circuit breaker (5 failures → 60s timeout)
- Retry logic (exponential backoff) on transport errors
- Typed errors: quota → RateLimitError, 5xx / open circuit → ServiceUnavailableError
"""
# mypy: warn-unused-ignores=False

import os
from typing import Any, Dict, List, Optional

import httpx
import structlog
from circuitbreaker import CircuitBreakerError, circuit
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from isitgood.domain.shared.errors import (
    ConfigurationError,
    ExternalServiceError,
    RateLimitError,
    ServiceUnavailableError,
    TimeoutError,
)
from isitgood.domain.verification.models import SearchHit

logger = structlog.get_logger(__name__)

MAX_RESULTS_PER_QUERY = 10


class GoogleSearchClient:
    """
    Google Custom Search client implementing IWebSearchClient port.

    Example:
        >>> async with GoogleSearchClient() as client:
        ...     hits = await client.search("CeraVe cleanser ingredients", num=5)
        ...     print(hits[0].display_link)
    """

    BASE_URL = "https://www.googleapis.com/customsearch/v1"
    TIMEOUT_S = 10.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        engine_id: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        """
        Initialize search client.

        Args:
            api_key: API key (reads GOOGLE_SEARCH_API_KEY if None)
            engine_id: Programmable search engine id (reads GOOGLE_SEARCH_ENGINE_ID if None)
            timeout_seconds: Request timeout

        Raises:
            ConfigurationError: If key or engine id is missing
        """
        self.api_key = api_key or os.getenv("GOOGLE_SEARCH_API_KEY")
        self.engine_id = engine_id or os.getenv("GOOGLE_SEARCH_ENGINE_ID")
        if not self.api_key or not self.engine_id:
            raise ConfigurationError(
                "GOOGLE_SEARCH_API_KEY and GOOGLE_SEARCH_ENGINE_ID must be set "
                "in .env file or passed as parameters."
            )
        self.timeout_seconds = timeout_seconds or self.TIMEOUT_S
        self._session: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "GoogleSearchClient":
        """Async context manager entry."""
        self._session = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        if self._session:
            await self._session.aclose()

    async def search(self, query: str, num: int = 10) -> List[SearchHit]:
        """
        Run a search query.

        Args:
            query: Query string
            num: Max results (the API caps this at 10)

        Returns:
            Ranked hits, possibly empty

        Raises:
            RateLimitError: Quota exhausted
            TimeoutError: Every attempt timed out
            ServiceUnavailableError: 5xx or circuit open
            ExternalServiceError: Any other API or network failure
        """
        if not self._session:
            raise ExternalServiceError("Client not initialized. Use async context manager.")

        try:
            data = await self._fetch(query, max(1, min(num, MAX_RESULTS_PER_QUERY)))
        except CircuitBreakerError as e:
            raise ServiceUnavailableError(f"Search circuit open: {e}") from e
        except httpx.TimeoutException as e:
            raise TimeoutError(f"Search API timeout: {query}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Search API network error: {e}") from e

        hits = [self._to_hit(item) for item in data.get("items") or [] if isinstance(item, dict)]
        logger.info("Search complete", query=query, results=len(hits))
        return hits

    @circuit(  # type: ignore[misc]
        failure_threshold=5, recovery_timeout=60, name="google_custom_search"
    )
    @retry(  # type: ignore[misc]
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _fetch(self, query: str, num: int) -> Dict[str, Any]:
        assert self._session is not None

        params: Dict[str, Any] = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": query,
            "num": num,
        }
        response = await self._session.get(self.BASE_URL, params=params)

        if response.status_code == 429:
            logger.warning("Search quota exhausted", query=query)
            raise RateLimitError("Custom Search quota exhausted")
        if response.status_code >= 500:
            logger.warning("Search server error", status=response.status_code, query=query)
            raise ServiceUnavailableError(f"Search API server error {response.status_code}")
        if response.status_code != 200:
            logger.warning("Search API error", status=response.status_code, query=query)
            raise ExternalServiceError(f"Search API error {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.warning("Search API returned invalid JSON", query=query)
            raise ExternalServiceError(f"Search API returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ExternalServiceError("Search API returned a non-object payload")
        return data

    @staticmethod
    def _to_hit(item: Dict[str, Any]) -> SearchHit:
        return SearchHit(
            title=str(item.get("title") or ""),
            link=str(item.get("link") or ""),
            snippet=str(item.get("snippet") or ""),
            display_link=str(item.get("displayLink") or ""),
        )
