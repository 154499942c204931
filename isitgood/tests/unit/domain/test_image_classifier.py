"""
Unit tests for image mode classification.
"""

import pytest

from isitgood.domain.classification.image_classifier import (
    PARSE_FALLBACK,
    ImageKind,
    ImageModeClassifier,
    parse_image_type,
)
from isitgood.domain.reasoning.ports import ImagePayload
from isitgood.domain.shared.errors import ReasoningError
from isitgood.tests.fakes import ScriptedReasoning


@pytest.fixture
def image() -> ImagePayload:
    return ImagePayload(data=b"\xff\xd8\xff", mime_type="image/jpeg")


class TestImageModeClassifier:
    """Collaborator-backed image classification."""

    async def test_menu_image(self, image: ImagePayload) -> None:
        """Test a menu response with items."""
        reasoning = ScriptedReasoning(
            {
                "type": "menu",
                "confidence": 0.92,
                "reason": "Prices and section headers",
                "items": ["Kale Bowl", "Oat Latte", " "],
            }
        )

        detection = await ImageModeClassifier(reasoning).classify(image)

        assert detection.kind == ImageKind.MENU
        assert detection.is_menu_or_selection is True
        assert detection.items == ["Kale Bowl", "Oat Latte"]
        assert reasoning.calls[0]["image"] == image

    async def test_selection_counts_as_menu_mode(self, image: ImagePayload) -> None:
        """Test a store shelf routes to selection mode."""
        reasoning = ScriptedReasoning({"type": "SELECTION", "confidence": 0.8})

        detection = await ImageModeClassifier(reasoning).classify(image)

        assert detection.kind == ImageKind.SELECTION
        assert detection.is_menu_or_selection is True

    async def test_unparseable_response_falls_back_to_product(self, image: ImagePayload) -> None:
        """Test prose output gives the product fallback."""
        reasoning = ScriptedReasoning("I think this is a shampoo bottle.")

        detection = await ImageModeClassifier(reasoning).classify(image)

        assert detection == PARSE_FALLBACK
        assert detection.is_menu_or_selection is False

    async def test_collaborator_failure_propagates(self, image: ImagePayload) -> None:
        """Test call failures are left to the caller."""
        reasoning = ScriptedReasoning(ReasoningError("timeout"))

        with pytest.raises(ReasoningError):
            await ImageModeClassifier(reasoning).classify(image)

    async def test_transcribe_menu_requests_plain_text(self, image: ImagePayload) -> None:
        """Test transcription asks for text, not JSON."""
        reasoning = ScriptedReasoning("Kale Bowl $12.95\nOat Latte $5.50")

        text = await ImageModeClassifier(reasoning).transcribe_menu(image)

        assert text.startswith("Kale Bowl")
        assert reasoning.calls[0]["config"].json_output is False


class TestParseImageType:
    """Mapping decoded JSON onto ImageTypeDetection."""

    def test_unknown_type_falls_back(self) -> None:
        """Test an unsupported type."""
        assert parse_image_type({"type": "poster", "confidence": 0.9}) == PARSE_FALLBACK

    def test_bad_confidence_falls_back(self) -> None:
        """Test a non-numeric confidence."""
        assert parse_image_type({"type": "menu", "confidence": "high"}) == PARSE_FALLBACK

    def test_confidence_is_clamped(self) -> None:
        """Test out-of-range confidence is clamped into [0, 1]."""
        assert parse_image_type({"type": "product", "confidence": 1.7}).confidence == 1.0

    def test_non_list_items_are_dropped(self) -> None:
        """Test items must be a list."""
        assert parse_image_type({"type": "menu", "items": "Kale Bowl"}).items == []
