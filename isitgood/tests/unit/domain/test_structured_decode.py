"""
Unit tests for structured decoding of collaborator output.
"""

import pytest

from isitgood.domain.shared.errors import StructuredDecodeError
from isitgood.domain.shared.structured_decode import (
    decode_structured,
    decode_structured_or_raise,
    strip_code_fences,
)


class TestStripCodeFences:
    """Markdown fence removal."""

    @pytest.mark.parametrize(
        "raw",
        [
            '```json\n{"a": 1}\n```',
            '```JSON\n{"a": 1}```',
            '```\n{"a": 1}\n```',
            '  {"a": 1}  ',
        ],
    )
    def test_fences_removed(self, raw: str) -> None:
        """Test common fence shapes."""
        assert strip_code_fences(raw) == '{"a": 1}'


class TestDecodeStructured:
    """JSON decoding with fallback."""

    def test_plain_object(self) -> None:
        """Test a bare JSON object."""
        assert decode_structured_or_raise('{"score": 90}') == {"score": 90}

    def test_prose_around_object(self) -> None:
        """Test the outermost object is recovered from surrounding prose."""
        text = 'Here is the analysis: {"verdict": "GOOD", "score": 80} Hope this helps!'

        assert decode_structured_or_raise(text) == {"verdict": "GOOD", "score": 80}

    @pytest.mark.parametrize("raw", [None, "", "   ", "no json here", "[1, 2, 3]", "{broken"])
    def test_invalid_raises(self, raw: object) -> None:
        """Test empty, non-JSON and non-object output."""
        with pytest.raises(StructuredDecodeError):
            decode_structured_or_raise(raw)  # type: ignore[arg-type]

    def test_fallback_default(self) -> None:
        """Test the default is returned on failure."""
        assert decode_structured("nope", default={"type": "product"}) == {"type": "product"}
        assert decode_structured("nope") is None
