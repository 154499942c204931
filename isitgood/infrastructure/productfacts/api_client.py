"""
Open Food Facts / Open Beauty Facts API client.

Both databases run the same server software, so one client class
serves both; subclasses only pin the base URL and database name.
Lookups never raise: every failure is reported as not found.
"""

import asyncio
from typing import Any, Optional

import aiohttp
import structlog

from isitgood.domain.reference.mapper import ProductFactsMapper
from isitgood.domain.reference.models import (
    LookupResult,
    LookupSource,
    ReferenceDatabase,
)
from isitgood.domain.shared.errors import ExternalServiceError, TimeoutError
from isitgood.domain.shared.value_objects import Barcode

logger = structlog.get_logger(__name__)


class ProductFactsClient:
    """Product-facts API client."""

    BASE_URL = "https://world.openfoodfacts.org"
    DATABASE = ReferenceDatabase.OPEN_FOOD_FACTS
    INCLUDE_FOOD_FIELDS = True
    USER_AGENT = "IsItGood/1.0"
    SEARCH_PAGE_SIZE = 5

    def __init__(
        self,
        timeout_seconds: int = 10,
        max_retries: int = 2,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialize API client.

        Args:
            timeout_seconds: Request timeout
            max_retries: Max attempts per request
            base_url: Override for the database host
        """
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.database = self.DATABASE
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "ProductFactsClient":
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(headers={"User-Agent": self.USER_AGENT})
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        if self._session:
            await self._session.close()

    async def lookup_by_barcode(self, code: str) -> LookupResult:
        """Look up a product by exact barcode.

        Args:
            code: Product barcode

        Returns:
            Found result, or not found on miss / invalid code / any failure

        Example:
            >>> async with OpenFoodFactsClient() as client:
            ...     result = await client.lookup_by_barcode("3017620422003")
            ...     assert result.product.product_name == "Nutella"
        """
        barcode = Barcode.try_parse(code)
        if barcode is None:
            logger.info("Skipping lookup for invalid barcode", code=code)
            return LookupResult.not_found(self.database)

        url = f"{self.base_url}/api/v0/product/{barcode.value}.json"
        try:
            data = await self._get_json(url)
        except ExternalServiceError as e:
            logger.warning(
                "Barcode lookup failed",
                database=self.database.value,
                barcode=barcode.value,
                error=str(e),
            )
            return LookupResult.not_found(self.database)

        product_data = data.get("product")
        if data.get("status") != 1 or not isinstance(product_data, dict):
            logger.info("Barcode not found", database=self.database.value, barcode=barcode.value)
            return LookupResult.not_found(self.database)

        product = ProductFactsMapper.parse_product(
            product_data, include_food_fields=self.INCLUDE_FOOD_FIELDS
        )
        logger.info(
            "Product found by barcode",
            database=self.database.value,
            barcode=barcode.value,
            name=product.product_name,
        )
        return LookupResult(
            found=True, database=self.database, product=product, source=LookupSource.BARCODE
        )

    async def search_by_name(self, query: str) -> LookupResult:
        """Simple name search.

        Args:
            query: Search terms, usually "brand name"

        Returns:
            First result with ingredient text (else first result), or
            not found on no results / any failure
        """
        if not query.strip():
            return LookupResult.not_found(self.database)

        url = f"{self.base_url}/cgi/search.pl"
        params: dict[str, str | int] = {
            "search_terms": query,
            "search_simple": 1,
            "action": "process",
            "json": 1,
            "page_size": self.SEARCH_PAGE_SIZE,
        }
        try:
            data = await self._get_json(url, params=params)
        except ExternalServiceError as e:
            logger.warning(
                "Name search failed", database=self.database.value, query=query, error=str(e)
            )
            return LookupResult.not_found(self.database)

        products = [p for p in data.get("products") or [] if isinstance(p, dict)]
        if not products:
            logger.info("No search results", database=self.database.value, query=query)
            return LookupResult.not_found(self.database)

        best = next((p for p in products if ProductFactsMapper.has_ingredients(p)), products[0])
        product = ProductFactsMapper.parse_product(
            best, fallback_name=query, include_food_fields=self.INCLUDE_FOOD_FIELDS
        )
        logger.info(
            "Product found by name",
            database=self.database.value,
            query=query,
            name=product.product_name,
            has_ingredients=bool(product.preferred_ingredients),
        )
        return LookupResult(
            found=True, database=self.database, product=product, source=LookupSource.SEARCH
        )

    async def _get_json(
        self, url: str, params: Optional[dict[str, str | int]] = None
    ) -> dict[str, Any]:
        """GET a JSON object with retry on timeouts and transport errors.

        Raises:
            TimeoutError: If every attempt times out
            ExternalServiceError: On HTTP error, transport error or bad JSON
        """
        if not self._session:
            msg = "Client not initialized, use async with"
            raise ExternalServiceError(msg)

        for attempt in range(self.max_retries):
            try:
                async with self._session.get(
                    url,
                    params=params,
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                ) as response:
                    if response.status >= 400:
                        msg = f"{self.database.value} API error: {response.status}"
                        raise ExternalServiceError(msg)

                    data = await response.json(content_type=None)
                    if not isinstance(data, dict):
                        msg = f"{self.database.value} returned a non-object payload"
                        raise ExternalServiceError(msg)
                    return data

            except asyncio.TimeoutError as e:
                if attempt == self.max_retries - 1:
                    msg = f"{self.database.value} API timeout"
                    raise TimeoutError(msg) from e

                wait = 2**attempt
                logger.warning(f"Timeout, retrying in {wait}s", attempt=attempt + 1)
                await asyncio.sleep(wait)

            except (aiohttp.ClientError, ValueError) as e:
                if attempt == self.max_retries - 1:
                    msg = f"{self.database.value} API client error: {e}"
                    raise ExternalServiceError(msg) from e

                wait = 2**attempt
                await asyncio.sleep(wait)

        msg = f"{self.database.value} API unreachable"
        raise ExternalServiceError(msg)


class OpenFoodFactsClient(ProductFactsClient):
    """Food-oriented reference database."""

    BASE_URL = "https://world.openfoodfacts.org"
    DATABASE = ReferenceDatabase.OPEN_FOOD_FACTS
    INCLUDE_FOOD_FIELDS = True


class OpenBeautyFactsClient(ProductFactsClient):
    """Body/beauty-oriented reference database."""

    BASE_URL = "https://world.openbeautyfacts.org"
    DATABASE = ReferenceDatabase.OPEN_BEAUTY_FACTS
    INCLUDE_FOOD_FIELDS = False
