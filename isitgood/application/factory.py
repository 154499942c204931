"""Service factory.

Environment-based wiring of the analysis service.
Strategy:
- .env (runtime): REASONING_PROVIDER=openai, OPENAI_API_KEY=sk-..., search keys
- tests / offline: REASONING_PROVIDER=stub
- Web search is optional: without GOOGLE_SEARCH_* keys, URL resolution
  relies on the brand whitelist and deep search is unavailable

Usage:
    from isitgood.application.factory import create_analysis_service

    async with create_analysis_service() as service:
        outcome = await service.smart_analyze("Cetaphil Gentle Cleanser", profile)

Missing or invalid configuration raises ConfigurationError here, never
at import time.
"""

from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Optional, Union

import structlog

from isitgood import config
from isitgood.application.analysis_service import AnalysisService
from isitgood.domain.classification.image_classifier import ImageModeClassifier
from isitgood.domain.extraction.extractor import EvidenceExtractor
from isitgood.domain.followup.assistant import FollowupAssistant
from isitgood.domain.ranking.engine import SelectionRankingEngine
from isitgood.domain.scoring.engine import ScoringEngine
from isitgood.domain.shared.errors import ConfigurationError
from isitgood.domain.verification.catalog import TrustCatalog
from isitgood.domain.verification.deep_search import DeepIngredientSearch
from isitgood.domain.verification.page_extraction import ProductPageReader
from isitgood.domain.verification.pipeline import IngredientVerificationPipeline
from isitgood.domain.verification.url_resolution import UrlResolver
from isitgood.infrastructure.ai.openai_client import OpenAIClient
from isitgood.infrastructure.ai.stub_reasoning_provider import StubReasoningProvider
from isitgood.infrastructure.productfacts.api_client import (
    OpenBeautyFactsClient,
    OpenFoodFactsClient,
)
from isitgood.infrastructure.search.google_search_client import GoogleSearchClient
from isitgood.infrastructure.web.page_fetcher import PageFetcher
from isitgood.logging_config import configure_logging

logger = structlog.get_logger(__name__)


def create_reasoning_provider() -> Union[OpenAIClient, StubReasoningProvider]:
    """Create reasoning provider based on REASONING_PROVIDER env var.

    Environment variable: REASONING_PROVIDER
    Values:
        - "openai": OpenAI chat completions (requires OPENAI_API_KEY), default
        - "stub": Canned responses

    Raises:
        ConfigurationError: Unknown provider, or openai without a key
    """
    if config.get_reasoning_provider() == "stub":
        return StubReasoningProvider()

    api_key = config.get_openai_api_key()
    if not api_key:
        raise ConfigurationError(
            "REASONING_PROVIDER=openai but OPENAI_API_KEY not set. "
            "Set OPENAI_API_KEY in .env or use REASONING_PROVIDER=stub"
        )
    return OpenAIClient(
        api_key=api_key,
        model=config.get_openai_model(),
        timeout=int(config.get_http_timeout_seconds() * 3),
    )


def create_search_client() -> Optional[GoogleSearchClient]:
    """Create the web search client, or None when search is not configured.

    Raises:
        ConfigurationError: If only one of the two search keys is set
    """
    api_key = config.get_google_search_api_key()
    engine_id = config.get_google_search_engine_id()
    if not api_key and not engine_id:
        logger.warning("Web search not configured, URL resolution limited to whitelist")
        return None
    return GoogleSearchClient(
        api_key=api_key,
        engine_id=engine_id,
        timeout_seconds=config.get_http_timeout_seconds(),
    )


@asynccontextmanager
async def create_analysis_service(
    catalog: Optional[TrustCatalog] = None,
) -> AsyncIterator[AnalysisService]:
    """
    Build a fully wired AnalysisService.

    All HTTP clients are opened on entry and closed on exit. Logging is
    set up from LOG_LEVEL and LOG_FORMAT unless structlog is already
    configured by the host application.

    Args:
        catalog: Trust catalog override (brand whitelist, marketplaces, ...)

    Yields:
        AnalysisService ready to use

    Raises:
        ConfigurationError: On missing or invalid configuration
    """
    config.load_environment()
    if not structlog.is_configured():
        configure_logging()
    catalog = catalog or TrustCatalog()
    timeout = config.get_http_timeout_seconds()

    reasoning = create_reasoning_provider()
    search_client = create_search_client()
    fetcher = PageFetcher(timeout_seconds=timeout, proxy_template=config.get_page_fetch_proxy())
    food_lookup = OpenFoodFactsClient(timeout_seconds=int(timeout))
    body_lookup = OpenBeautyFactsClient(timeout_seconds=int(timeout))

    async with AsyncExitStack() as stack:
        await stack.enter_async_context(reasoning)
        await stack.enter_async_context(fetcher)
        await stack.enter_async_context(food_lookup)
        await stack.enter_async_context(body_lookup)
        if search_client is not None:
            await stack.enter_async_context(search_client)

        page_reader = ProductPageReader(fetcher)
        service = AnalysisService(
            extractor=EvidenceExtractor(reasoning),
            scoring=ScoringEngine(reasoning),
            ranking=SelectionRankingEngine(reasoning),
            followup=FollowupAssistant(reasoning),
            image_classifier=ImageModeClassifier(reasoning),
            food_lookup=food_lookup,
            body_lookup=body_lookup,
            url_resolver=UrlResolver(search_client, catalog),
            pipeline=IngredientVerificationPipeline(page_reader, catalog),
            deep_search=DeepIngredientSearch(
                search_client,
                page_reader,
                catalog,
                delay_seconds=config.get_deep_search_delay_seconds(),
            ),
            search_client=search_client,
        )
        logger.info(
            "Analysis service ready",
            reasoning=type(reasoning).__name__,
            web_search=search_client is not None,
        )
        yield service
