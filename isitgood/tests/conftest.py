"""
Shared fixtures for isitgood tests.

The reasoning collaborator is replaced by a scripted fake; reference
databases, web search and page fetching by AsyncMocks or small fakes
honouring their ports (see isitgood.tests.fakes).
"""

from typing import Any, Dict
from unittest.mock import AsyncMock

import pytest

from isitgood.domain.profile.models import UserProfile
from isitgood.domain.reference.models import (
    LookupResult,
    LookupSource,
    ReferenceDatabase,
    ReferenceProduct,
)
from isitgood.domain.verification.page_extraction import ProductPageReader
from isitgood.tests.fakes import FakePageFetcher


# ═══════════════════════════════════════════════════════════
# PROFILE FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def empty_profile() -> UserProfile:
    """Profile with no allergies, sensitivities or preferences."""
    return UserProfile(name="Test")


@pytest.fixture
def allergic_profile() -> UserProfile:
    """Profile with a peanut allergy and a dairy sensitivity."""
    return UserProfile(
        name="Sofia",
        critical_allergies=["Peanuts"],
        sensitivities=["Dairy"],
        dietary_preferences=["Gluten-Free"],
    )


# ═══════════════════════════════════════════════════════════
# INGREDIENT FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def chai_ingredients() -> str:
    """Whole-food-only tea blend."""
    return "Organic Black Tea, Organic Cinnamon, Organic Ginger, Organic Cardamom"


@pytest.fixture
def clean_serum_ingredients() -> str:
    """Body-care list with no red or yellow flags."""
    return (
        "Water, Glycerin, Niacinamide, Sodium Hyaluronate, Aloe Barbadensis Leaf Juice, "
        "Squalane, Tocopherol, Cetearyl Alcohol"
    )


@pytest.fixture
def clean_serum_html(clean_serum_ingredients: str) -> str:
    """Product page carrying a readable ingredient section."""
    return (
        "<html><head>"
        '<meta name="description" content="A lightweight daily serum with hyaluronic acid '
        'for lasting hydration and a healthy glow.">'
        "<script>var tracking = 'Ingredients: none';</script>"
        "</head><body>"
        "<h1>Hydra Serum</h1>"
        f'<div class="product-ingredients">Ingredients: {clean_serum_ingredients}.</div>'
        "<p>Vegan and cruelty free. Third-party tested.</p>"
        "</body></html>"
    )


# ═══════════════════════════════════════════════════════════
# REFERENCE DATA FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def nutella_product() -> ReferenceProduct:
    """Reference record for Nutella."""
    return ReferenceProduct(
        code="3017620422003",
        product_name="Nutella",
        brands="Ferrero",
        ingredients_text=(
            "Sugar, palm oil, hazelnuts (13%), skimmed milk powder (8.7%), "
            "fat-reduced cocoa (7.4%), emulsifier: lecithins (soya), vanillin"
        ),
        allergens_tags=["en:milk", "en:nuts", "en:soybeans"],
        nova_group=4,
    )


@pytest.fixture
def nutella_lookup(nutella_product: ReferenceProduct) -> LookupResult:
    """Found result for Nutella."""
    return LookupResult(
        found=True,
        database=ReferenceDatabase.OPEN_FOOD_FACTS,
        product=nutella_product,
        source=LookupSource.BARCODE,
    )


@pytest.fixture
def mock_food_lookup() -> AsyncMock:
    """IReferenceLookup mock that finds nothing by default."""
    lookup = AsyncMock()
    lookup.lookup_by_barcode.return_value = LookupResult.not_found(
        ReferenceDatabase.OPEN_FOOD_FACTS
    )
    lookup.search_by_name.return_value = LookupResult.not_found(ReferenceDatabase.OPEN_FOOD_FACTS)
    return lookup


@pytest.fixture
def mock_body_lookup() -> AsyncMock:
    """IReferenceLookup mock for the beauty database, finding nothing."""
    lookup = AsyncMock()
    lookup.lookup_by_barcode.return_value = LookupResult.not_found(
        ReferenceDatabase.OPEN_BEAUTY_FACTS
    )
    lookup.search_by_name.return_value = LookupResult.not_found(
        ReferenceDatabase.OPEN_BEAUTY_FACTS
    )
    return lookup


# ═══════════════════════════════════════════════════════════
# SEARCH / FETCH FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def mock_search_client() -> AsyncMock:
    """IWebSearchClient mock returning no hits by default."""
    client = AsyncMock()
    client.search.return_value = []
    return client


@pytest.fixture
def page_fetcher() -> FakePageFetcher:
    """Page fetcher with no pages; tests add their own."""
    return FakePageFetcher()


@pytest.fixture
def page_reader(page_fetcher: FakePageFetcher) -> ProductPageReader:
    return ProductPageReader(page_fetcher)


# ═══════════════════════════════════════════════════════════
# COLLABORATOR RESPONSES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def scoring_response() -> Dict[str, Any]:
    """Well-formed full-mode scoring response."""
    return {
        "score": 100,
        "verdict": "EXCELLENT",
        "headline": "PURE AND SIMPLE.",
        "summary": "A short list of whole spices and tea.",
        "redFlags": [],
        "watchOuts": [],
        "goodStuff": ["Organic spices", "No added sugar"],
        "greenwashAlert": {"suggested": False, "reason": ""},
        "alternatives": [
            {"name": "Masala Chai", "brand": "Meria", "reason": "Same spices, organic"}
        ],
        "diyRecipe": {
            "title": "Stovetop Chai",
            "description": "Simmer spices with tea.",
            "ingredients": ["Black tea", "Cinnamon"],
            "steps": ["Simmer", "Strain"],
        },
    }


@pytest.fixture
def claims_only_response() -> Dict[str, Any]:
    """Well-formed claims-only response."""
    return {
        "summary": "The packaging says organic but we could not confirm the list.",
        "alternatives": [{"name": "Plain Oats", "brand": "Bob's", "reason": "Single ingredient"}],
    }
