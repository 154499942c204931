"""Stub reasoning provider for testing.

Returns canned responses without calling external APIs. Useful for
offline runs and end-to-end tests (REASONING_PROVIDER=stub).
"""

import json
from typing import Any, Dict, List, Optional

from isitgood.domain.reasoning.ports import GenerationConfig, ImagePayload

STUB_ANSWER = "That looks like a solid choice for your profile. Check the label for anything you avoid."

STUB_RESPONSE: Dict[str, Any] = {
    # Image type / extraction
    "type": "product",
    "confidence": 0.5,
    "reason": "Stub classification",
    "items": [],
    "name": "Unknown Product",
    "category": "food",
    "cleanClaims": [],
    # Product scoring
    "verdict": "GOOD",
    "headline": "BEAUTIFULLY CLEAN.",
    "summary": "Stub analysis of the verified ingredients.",
    "redFlags": [],
    "watchOuts": [],
    "goodStuff": [],
    "alternatives": [],
    # Menu / selection ranking
    "title": "Menu Analysis",
    "cleanestOptions": [],
    "alsoGoodOptions": [],
    "cautionItems": [],
    "generalAdvice": "Stub ranking.",
    "itemCount": 0,
}


class StubReasoningProvider:
    """
    Stub implementation of IReasoningProvider for testing.

    JSON requests get one object carrying the keys of every prompt
    contract; plain-text requests get a short fixed answer. Prompts
    are recorded for inspection.
    """

    def __init__(self, response: Optional[Dict[str, Any]] = None) -> None:
        self.response = response or STUB_RESPONSE
        self.prompts: List[str] = []

    async def __aenter__(self) -> "StubReasoningProvider":
        """Enter async context (no-op for stub)."""
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        """Exit async context (no-op for stub)."""
        return None

    async def generate(
        self,
        prompt: str,
        image: Optional[ImagePayload] = None,
        config: Optional[GenerationConfig] = None,
    ) -> str:
        self.prompts.append(prompt)
        if config is not None and not config.json_output:
            return STUB_ANSWER
        return json.dumps(self.response)
