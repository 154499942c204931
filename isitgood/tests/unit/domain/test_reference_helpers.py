"""
Unit tests for reference data helpers and the product-facts mapper.
"""

import pytest

from isitgood.domain.reference.helpers import (
    extract_barcode_from_text,
    format_additives,
    nova_description,
)
from isitgood.domain.reference.mapper import ProductFactsMapper
from isitgood.domain.reference.models import NutriscoreGrade


class TestHelpers:
    """NOVA, additives and barcode helpers."""

    @pytest.mark.parametrize(
        "group,expected",
        [
            (1, "Unprocessed or minimally processed"),
            (4, "Ultra-processed foods"),
            (None, "Processing level unknown"),
            (9, "Processing level unknown"),
        ],
    )
    def test_nova_description(self, group: object, expected: str) -> None:
        """Test known and unknown groups."""
        assert nova_description(group) == expected  # type: ignore[arg-type]

    def test_format_additives(self) -> None:
        """Test taxonomy prefixes are stripped."""
        assert format_additives(["en:e330", "", "fr:e471"]) == ["E330", "E471"]

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Nutella 3017620422003 750g", "3017620422003"),
            ("UPC 012345678905", "012345678905"),
            ("EAN8 96385074", "96385074"),
            ("Batch 12345", None),
            ("no digits", None),
        ],
    )
    def test_extract_barcode(self, text: str, expected: object) -> None:
        """Test EAN-13, UPC-A and EAN-8 runs."""
        assert extract_barcode_from_text(text) == expected


class TestProductFactsMapper:
    """API payload mapping."""

    def test_food_product(self) -> None:
        """Test a full food payload."""
        product = ProductFactsMapper.parse_product(
            {
                "code": 3017620422003,
                "product_name_en": "Nutella",
                "brands": "Ferrero",
                "ingredients_text_en": "Sugar, palm oil",
                "allergens_tags": ["en:milk", None],
                "additives_tags": ["en:e322"],
                "nutriscore_grade": "E",
                "nova_group": "4",
            }
        )

        assert product.code == "3017620422003"
        assert product.product_name == "Nutella"
        assert product.ingredients_text == "Sugar, palm oil"
        assert product.preferred_ingredients == "Sugar, palm oil"
        assert product.allergens_tags == ["en:milk"]
        assert product.nutriscore_grade == NutriscoreGrade.E
        assert product.nova_group == 4

    def test_unexpected_grades(self) -> None:
        """Test odd Nutri-Score and NOVA values."""
        product = ProductFactsMapper.parse_product({"nutriscore_grade": "z", "nova_group": 7})

        assert product.nutriscore_grade == NutriscoreGrade.UNKNOWN
        assert product.nova_group is None
        assert product.product_name == "Unknown"

    def test_beauty_product_skips_food_fields(self) -> None:
        """Test the beauty mapping leaves food fields empty."""
        product = ProductFactsMapper.parse_product(
            {"product_name": "Serum", "additives_tags": ["en:e330"], "nova_group": 1},
            include_food_fields=False,
        )

        assert product.additives_tags == []
        assert product.nova_group is None

    def test_has_ingredients(self) -> None:
        """Test either ingredient field counts."""
        assert ProductFactsMapper.has_ingredients({"ingredients_text_en": "Water"})
        assert not ProductFactsMapper.has_ingredients({"ingredients_text": ""})
