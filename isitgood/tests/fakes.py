"""
Test doubles honouring the core's ports.
"""

import json
from typing import Any, Dict, List, Optional, Union

from isitgood.domain.reasoning.ports import GenerationConfig, ImagePayload
from isitgood.domain.shared.errors import PageFetchError
from isitgood.domain.verification.catalog import extract_domain
from isitgood.domain.verification.models import SearchHit

Response = Union[str, Dict[str, Any], Exception]


class ScriptedReasoning:
    """Reasoning collaborator fake returning queued responses in order.

    A dict is sent as JSON text, an Exception instance is raised. When
    one response is left it repeats for every further call.
    """

    def __init__(self, *responses: Response) -> None:
        self.responses: List[Response] = list(responses)
        self.calls: List[Dict[str, Any]] = []

    async def generate(
        self,
        prompt: str,
        image: Optional[ImagePayload] = None,
        config: Optional[GenerationConfig] = None,
    ) -> str:
        self.calls.append({"prompt": prompt, "image": image, "config": config})
        if not self.responses:
            raise AssertionError("ScriptedReasoning has no responses left")
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response

    @property
    def prompts(self) -> List[str]:
        return [call["prompt"] for call in self.calls]


class FakePageFetcher:
    """IPageFetcher fake serving HTML from a url -> html map; other URLs 404."""

    def __init__(self, pages: Optional[Dict[str, str]] = None) -> None:
        self.pages: Dict[str, str] = pages or {}
        self.fetched: List[str] = []

    async def fetch(self, url: str) -> str:
        self.fetched.append(url)
        if url not in self.pages:
            raise PageFetchError("HTTP 404", status=404)
        return self.pages[url]


def make_hit(link: str, title: str = "", display_link: str = "", snippet: str = "") -> SearchHit:
    """SearchHit whose display_link defaults to the link's host."""
    return SearchHit(
        title=title,
        link=link,
        snippet=snippet,
        display_link=display_link or extract_domain(link),
    )
