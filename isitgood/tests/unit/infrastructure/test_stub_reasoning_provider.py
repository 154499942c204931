"""
Unit tests for the stub reasoning provider.
"""

import json

from isitgood.domain.reasoning.ports import GenerationConfig, IReasoningProvider
from isitgood.infrastructure.ai.stub_reasoning_provider import (
    STUB_ANSWER,
    StubReasoningProvider,
)


class TestStubReasoningProvider:
    """Canned responses."""

    async def test_json_response_by_default(self) -> None:
        """Test JSON text carrying scoring and ranking keys."""
        async with StubReasoningProvider() as provider:
            text = await provider.generate("Score this")

        data = json.loads(text)
        assert data["verdict"] == "GOOD"
        assert data["cleanestOptions"] == []
        assert provider.prompts == ["Score this"]

    async def test_plain_text_answer(self) -> None:
        """Test non-JSON requests get the fixed answer."""
        provider = StubReasoningProvider()

        text = await provider.generate("Is it vegan?", config=GenerationConfig(json_output=False))

        assert text == STUB_ANSWER

    async def test_custom_response(self) -> None:
        """Test a custom canned object."""
        provider = StubReasoningProvider(response={"type": "menu", "confidence": 0.9})

        data = json.loads(await provider.generate("Classify"))

        assert data == {"type": "menu", "confidence": 0.9}
        assert isinstance(provider, IReasoningProvider)
