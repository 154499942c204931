"""
Unit tests for the trust catalog and domain helpers.
"""

import pytest

from isitgood.domain.verification.catalog import (
    BrandMapping,
    TrustCatalog,
    brand_in_domain,
    extract_domain,
    normalize,
    shopify_slugify,
)


class TestDomainHelpers:
    """Normalisation, domain extraction and slugs."""

    def test_normalize(self) -> None:
        """Test punctuation and case are dropped."""
        assert normalize("Dr. Bronner's 18-in-1") == "drbronners18in1"

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.ulta.com/p/serum-123", "ulta.com"),
            ("https://meriachai.com/products/masala", "meriachai.com"),
            ("http://shop.brand.co.uk/x", "shop.brand.co.uk"),
            ("not a url", "unknown"),
            ("http://[invalid", "unknown"),
        ],
    )
    def test_extract_domain(self, url: str, expected: str) -> None:
        """Test hosts, www stripping and unparseable input."""
        assert extract_domain(url) == expected

    def test_brand_in_domain(self) -> None:
        """Test short brands never match."""
        assert brand_in_domain("drbronner.com", "Dr. Bronner") is True
        assert brand_in_domain("elfcosmetics.com", "e.l") is False
        assert brand_in_domain("sephora.com", "Tatcha") is False

    def test_shopify_slugify(self) -> None:
        """Test handles are lowercase and hyphenated."""
        assert shopify_slugify("Masala  Chai -- Organic!") == "masala-chai-organic"


class TestTrustCatalog:
    """Whitelist, marketplaces, blocklist and first-party brands."""

    def test_match_brand(self) -> None:
        """Test whitelist patterns are matched in "brand name"."""
        match = TrustCatalog().match_brand("Masala", "Meria Chai")

        assert match is not None
        mapping, pattern = match
        assert mapping.domain == "meriachai.com"
        assert pattern == "meria chai"
        assert TrustCatalog().match_brand("Hydra Serum", "Tatcha") is None

    def test_marketplaces_and_blocklist(self) -> None:
        """Test substring matching on domains."""
        catalog = TrustCatalog()

        assert catalog.is_trusted_marketplace("www.Sephora.com") is True
        assert catalog.is_trusted_marketplace("tatcha.com") is False
        assert catalog.is_blocked("pinterest.com") is True
        assert catalog.is_blocked("en.wikipedia.org") is True

    def test_first_party_brand(self) -> None:
        """Test brand or name fragments identify the trusted line for branded items."""
        catalog = TrustCatalog()

        first_party = catalog.first_party_brand("Masala Chai", "Meria")
        assert first_party is not None
        assert first_party.source_label == "Meria brand (trusted)"
        assert catalog.first_party_brand("Cafe Meria Latte", "Roastery") is not None
        assert catalog.first_party_brand("Cafe Meria Latte", None) is None
        assert catalog.first_party_brand("Meria Chai Masala", "  ") is None
        assert catalog.first_party_brand("Hydra Serum", "Tatcha") is None

    def test_catalog_is_injectable(self) -> None:
        """Test custom lists replace the defaults."""
        catalog = TrustCatalog(
            brand_mappings=[BrandMapping(patterns=["tatcha"], domain="tatcha.com")],
            trusted_marketplaces=["example-shop.com"],
            blocked_domains=[],
            first_party_brands=[],
        )

        assert catalog.match_brand("Water Cream", "Tatcha") is not None
        assert catalog.is_trusted_marketplace("amazon.com") is False
        assert catalog.is_blocked("pinterest.com") is False
        assert catalog.first_party_brand("Masala Chai", "Meria") is None
