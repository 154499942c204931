"""
Unit tests for the product-facts API clients.

Real-world test case:
Product: Nutella, Barcode: 3017620422003
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from isitgood.domain.reference.models import (
    LookupSource,
    NutriscoreGrade,
    ReferenceDatabase,
)
from isitgood.infrastructure.productfacts.api_client import (
    OpenBeautyFactsClient,
    OpenFoodFactsClient,
)


def _response(payload: object, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload)
    return response


class TestOpenFoodFactsClient:
    """Test Open Food Facts client."""

    @pytest.fixture
    def mock_nutella_response(self) -> MagicMock:
        """Mock barcode response with real Nutella product data."""
        return _response(
            {
                "status": 1,
                "product": {
                    "code": "3017620422003",
                    "product_name": "Nutella",
                    "brands": "Ferrero",
                    "nutriscore_grade": "e",
                    "nova_group": 4,
                    "ingredients_text": "Sugar, palm oil, hazelnuts (13%), skimmed milk powder (8.7%), "
                    "fat-reduced cocoa (7.4%), emulsifier: lecithins (soya), vanillin.",
                    "allergens_tags": ["en:milk", "en:nuts", "en:soybeans"],
                    "additives_tags": ["en:e322"],
                },
            }
        )

    @pytest.fixture
    def mock_search_response(self) -> MagicMock:
        """Mock search response where only the second product lists ingredients."""
        return _response(
            {
                "products": [
                    {"code": "111", "product_name": "Nutella B-ready", "brands": "Ferrero"},
                    {
                        "code": "3017620422003",
                        "product_name": "Nutella",
                        "brands": "Ferrero",
                        "ingredients_text_en": "Sugar, palm oil, hazelnuts",
                    },
                ]
            }
        )

    async def test_lookup_by_barcode_success(self, mock_nutella_response: MagicMock) -> None:
        """Test successful barcode lookup with Nutella."""
        async with OpenFoodFactsClient() as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = mock_nutella_response

                result = await client.lookup_by_barcode("3017620422003")

        assert result.found is True
        assert result.database == ReferenceDatabase.OPEN_FOOD_FACTS
        assert result.source == LookupSource.BARCODE
        assert result.product is not None
        assert result.product.product_name == "Nutella"
        assert result.product.brands == "Ferrero"
        assert result.product.nutriscore_grade == NutriscoreGrade.E
        assert result.product.nova_group == 4
        assert result.product.additives_tags == ["en:e322"]
        assert "hazelnuts" in result.product.preferred_ingredients

        url = mock_get.call_args[0][0]
        assert url.endswith("/api/v0/product/3017620422003.json")

    async def test_lookup_by_barcode_status_zero(self) -> None:
        """Test a payload with status 0 is not found."""
        async with OpenFoodFactsClient() as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = _response(
                    {"status": 0, "status_verbose": "product not found"}
                )

                result = await client.lookup_by_barcode("9999999999999")

        assert result.found is False
        assert result.product is None

    async def test_lookup_by_barcode_http_error(self) -> None:
        """Test an HTTP error is reported as not found."""
        async with OpenFoodFactsClient() as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = _response({}, status=500)

                result = await client.lookup_by_barcode("3017620422003")

        assert result.found is False

    async def test_invalid_barcode_skips_request(self) -> None:
        """Test an invalid barcode never reaches the network."""
        async with OpenFoodFactsClient() as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                result = await client.lookup_by_barcode("not-a-code")

        assert result.found is False
        mock_get.assert_not_called()

    async def test_timeout_is_not_found(self) -> None:
        """Test a timeout on the only attempt is reported as not found."""
        async with OpenFoodFactsClient(max_retries=1) as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.side_effect = asyncio.TimeoutError()

                result = await client.lookup_by_barcode("3017620422003")

        assert result.found is False

    async def test_non_object_payload_is_not_found(self) -> None:
        """Test a JSON list payload is rejected."""
        async with OpenFoodFactsClient() as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = _response([1, 2, 3])

                result = await client.lookup_by_barcode("3017620422003")

        assert result.found is False

    async def test_search_prefers_product_with_ingredients(
        self, mock_search_response: MagicMock
    ) -> None:
        """Test the first result carrying ingredient text wins."""
        async with OpenFoodFactsClient() as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = mock_search_response

                result = await client.search_by_name("Ferrero Nutella")

        assert result.found is True
        assert result.source == LookupSource.SEARCH
        assert result.product is not None
        assert result.product.code == "3017620422003"
        assert result.product.ingredients_text == "Sugar, palm oil, hazelnuts"

        params = mock_get.call_args[1]["params"]
        assert params["search_terms"] == "Ferrero Nutella"
        assert params["json"] == 1

    async def test_search_falls_back_to_first_result(self) -> None:
        """Test the first product is used when none lists ingredients."""
        async with OpenFoodFactsClient() as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = _response(
                    {"products": [{"code": "222", "brands": "Acme"}, {"code": "333"}]}
                )

                result = await client.search_by_name("Acme Spread")

        assert result.found is True
        assert result.product is not None
        assert result.product.code == "222"
        assert result.product.product_name == "Acme Spread"

    async def test_search_no_results(self) -> None:
        """Test an empty product list is not found."""
        async with OpenFoodFactsClient() as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = _response({"products": []})

                result = await client.search_by_name("zzzz")

        assert result.found is False

    async def test_search_blank_query(self) -> None:
        """Test a blank query is not found without a request."""
        async with OpenFoodFactsClient() as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                result = await client.search_by_name("   ")

        assert result.found is False
        mock_get.assert_not_called()

    async def test_client_not_initialized(self) -> None:
        """Test calling without the context manager reports not found."""
        client = OpenFoodFactsClient()

        result = await client.lookup_by_barcode("3017620422003")

        assert result.found is False


class TestOpenBeautyFactsClient:
    """Test Open Beauty Facts client."""

    async def test_beauty_lookup_skips_food_fields(self) -> None:
        """Test food-only fields are not parsed for beauty products."""
        payload = {
            "status": 1,
            "product": {
                "code": "3600523614455",
                "product_name": "Hydra Serum",
                "ingredients_text": "Aqua, Glycerin, Niacinamide",
                "nutriscore_grade": "a",
                "nova_group": 1,
            },
        }
        async with OpenBeautyFactsClient() as client:
            with patch("aiohttp.ClientSession.get") as mock_get:
                mock_get.return_value.__aenter__.return_value = _response(payload)

                result = await client.lookup_by_barcode("3600523614455")

        assert result.found is True
        assert result.database == ReferenceDatabase.OPEN_BEAUTY_FACTS
        assert result.product is not None
        assert result.product.nutriscore_grade is None
        assert result.product.nova_group is None
        assert mock_get.call_args[0][0].startswith("https://world.openbeautyfacts.org/")

    def test_base_url_override(self) -> None:
        """Test a trailing slash is stripped from an overridden host."""
        client = OpenBeautyFactsClient(base_url="http://localhost:8080/")

        assert client.base_url == "http://localhost:8080"
        assert client.database == ReferenceDatabase.OPEN_BEAUTY_FACTS
