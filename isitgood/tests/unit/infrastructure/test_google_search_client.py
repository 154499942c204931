"""
Unit tests for the Google Custom Search client.

The circuit breaker is shared per process; failing calls here stay
below its threshold.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from isitgood.domain.shared.errors import (
    ConfigurationError,
    ExternalServiceError,
    RateLimitError,
    ServiceUnavailableError,
)
from isitgood.infrastructure.search.google_search_client import GoogleSearchClient


def _http_response(status_code: int, payload: object = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {}
    return response


@pytest.fixture
def client() -> GoogleSearchClient:
    return GoogleSearchClient(api_key="test-key", engine_id="test-cx")


class TestGoogleSearchClientInit:
    """Configuration handling."""

    def test_explicit_credentials(self) -> None:
        """Test credentials passed as parameters."""
        client = GoogleSearchClient(api_key="k", engine_id="cx", timeout_seconds=5)

        assert client.api_key == "k"
        assert client.engine_id == "cx"
        assert client.timeout_seconds == 5

    def test_credentials_from_env(self) -> None:
        """Test credentials are read from the environment."""
        with patch.dict(
            "os.environ",
            {"GOOGLE_SEARCH_API_KEY": "env-key", "GOOGLE_SEARCH_ENGINE_ID": "env-cx"},
            clear=True,
        ):
            client = GoogleSearchClient()

        assert client.api_key == "env-key"
        assert client.engine_id == "env-cx"
        assert client.timeout_seconds == GoogleSearchClient.TIMEOUT_S

    def test_missing_engine_id_raises(self) -> None:
        """Test a key without an engine id is a configuration error."""
        with patch.dict("os.environ", {"GOOGLE_SEARCH_API_KEY": "env-key"}, clear=True):
            with pytest.raises(ConfigurationError, match="GOOGLE_SEARCH_ENGINE_ID"):
                GoogleSearchClient()


class TestGoogleSearchClientSearch:
    """Search requests and error mapping."""

    async def test_search_maps_items(self, client: GoogleSearchClient) -> None:
        """Test items become SearchHits."""
        payload = {
            "items": [
                {
                    "title": "Masala Chai | Meria",
                    "link": "https://meria.com/products/masala-chai",
                    "snippet": "Organic black tea, cinnamon, ginger",
                    "displayLink": "meria.com",
                },
                {"title": "No link"},
                "garbage",
            ]
        }
        client._session = AsyncMock()
        client._session.get = AsyncMock(return_value=_http_response(200, payload))

        hits = await client.search("Meria Masala Chai", num=5)

        assert len(hits) == 2
        assert hits[0].display_link == "meria.com"
        assert hits[0].link == "https://meria.com/products/masala-chai"
        assert hits[1].link == ""

        params = client._session.get.call_args[1]["params"]
        assert params["q"] == "Meria Masala Chai"
        assert params["num"] == 5
        assert params["key"] == "test-key"
        assert params["cx"] == "test-cx"

    async def test_num_is_clamped(self, client: GoogleSearchClient) -> None:
        """Test num is clamped into the API's 1..10 range."""
        client._session = AsyncMock()
        client._session.get = AsyncMock(return_value=_http_response(200, {}))

        hits = await client.search("serum", num=25)
        assert hits == []
        assert client._session.get.call_args[1]["params"]["num"] == 10

        await client.search("serum", num=0)
        assert client._session.get.call_args[1]["params"]["num"] == 1

    async def test_quota_exhausted(self, client: GoogleSearchClient) -> None:
        """Test 429 raises RateLimitError."""
        client._session = AsyncMock()
        client._session.get = AsyncMock(return_value=_http_response(429))

        with pytest.raises(RateLimitError):
            await client.search("serum")

    async def test_server_error(self, client: GoogleSearchClient) -> None:
        """Test 5xx raises ServiceUnavailableError."""
        client._session = AsyncMock()
        client._session.get = AsyncMock(return_value=_http_response(503))

        with pytest.raises(ServiceUnavailableError):
            await client.search("serum")

    async def test_other_http_error(self, client: GoogleSearchClient) -> None:
        """Test a 403 raises ExternalServiceError."""
        client._session = AsyncMock()
        client._session.get = AsyncMock(return_value=_http_response(403))

        with pytest.raises(ExternalServiceError, match="403"):
            await client.search("serum")

    async def test_invalid_json_body(self, client: GoogleSearchClient) -> None:
        """Test a non-JSON 200 body raises ExternalServiceError."""
        response = _http_response(200)
        response.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)
        client._session = AsyncMock()
        client._session.get = AsyncMock(return_value=response)

        with pytest.raises(ExternalServiceError, match="invalid JSON"):
            await client.search("serum")

    async def test_not_initialized(self, client: GoogleSearchClient) -> None:
        """Test calling outside the context manager."""
        with pytest.raises(ExternalServiceError, match="not initialized"):
            await client.search("serum")

    async def test_context_manager_opens_and_closes_session(self) -> None:
        """Test the httpx session lifecycle."""
        async with GoogleSearchClient(api_key="k", engine_id="cx") as client:
            assert client._session is not None
            session = client._session

        assert session.is_closed
