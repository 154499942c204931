"""
OpenAI reasoning client.

Implements IReasoningProvider over the chat completions API: text
prompts, optional image attachment as a base64 data URL, JSON mode and
client-side rate limiting.
"""

from __future__ import annotations

import asyncio
import base64
import os
import time
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import structlog
from openai import AsyncOpenAI

from isitgood.domain.reasoning.ports import GenerationConfig, ImagePayload
from isitgood.domain.shared.errors import ReasoningError

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletion

logger = structlog.get_logger(__name__)


def image_data_url(image: ImagePayload) -> str:
    """Encode an image as a data URL for vision input.

    Example:
        >>> image_data_url(ImagePayload(data=b"abc", mime_type="image/png"))
        'data:image/png;base64,YWJj'
    """
    encoded = base64.b64encode(image.data).decode("ascii")
    return f"data:{image.mime_type};base64,{encoded}"


class OpenAIClient:
    """
    Async OpenAI client implementing IReasoningProvider.

    Features:
    - JSON output mode when requested
    - Vision input via data URLs
    - Automatic retry on transient failures (SDK-level)
    - Rate limiting (60 RPM default)

    Example:
        >>> async with OpenAIClient() as client:
        ...     text = await client.generate(
        ...         "Return {\\"ok\\": true}",
        ...         config=GenerationConfig(json_output=True),
        ...     )
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        max_retries: int = 3,
        timeout: int = 30,
        rpm_limit: int = 60,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (reads OPENAI_API_KEY if None)
            model: Model to use (must support vision for image input)
            max_retries: Max retry attempts on failure
            timeout: Request timeout in seconds
            rpm_limit: Requests per minute limit
            client: Optional pre-configured AsyncOpenAI client (for testing)

        Raises:
            ValueError: If API key not found and client not provided
        """
        if client is not None:
            self._client: Optional[AsyncOpenAI] = client
            self.api_key: str = api_key or "test-key"
        else:
            resolved_key = api_key or os.getenv("OPENAI_API_KEY")
            if not resolved_key:
                raise ValueError(
                    "OPENAI_API_KEY not found in environment. "
                    "Set it in .env file or pass as parameter."
                )
            self.api_key = resolved_key
            self._client = None

        self.model = model
        self.max_retries = max_retries
        self.timeout = timeout
        self.rpm_limit = rpm_limit

        self._request_times: List[float] = []
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> OpenAIClient:
        """Async context manager entry."""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.close()

    def _ensure_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
        return self._client

    async def _rate_limit(self) -> None:
        """
        Enforce rate limiting.

        Tracks request timestamps over a sliding 60s window and sleeps
        when the window is full.
        """
        async with self._lock:
            now = time.time()
            cutoff = now - 60.0
            self._request_times = [t for t in self._request_times if t > cutoff]

            if len(self._request_times) >= self.rpm_limit:
                wait_time = 60.0 - (now - self._request_times[0])
                if wait_time > 0:
                    await asyncio.sleep(wait_time)
                    now = time.time()
                    cutoff = now - 60.0
                    self._request_times = [t for t in self._request_times if t > cutoff]

            self._request_times.append(now)

    @staticmethod
    def build_messages(prompt: str, image: Optional[ImagePayload] = None) -> List[Dict[str, Any]]:
        """Single user message, with the image first when attached."""
        if image is None:
            return [{"role": "user", "content": prompt}]
        return [
            {
                "role": "user",
                "content": [
                    {"type": "image_url", "image_url": {"url": image_data_url(image)}},
                    {"type": "text", "text": prompt},
                ],
            }
        ]

    async def complete(
        self,
        messages: List[Dict[str, Any]],
        response_format: Optional[Dict[str, str]] = None,
        temperature: float = 0.4,
        max_tokens: int = 2048,
    ) -> Dict[str, Any]:
        """
        Run one chat completion.

        Args:
            messages: Chat messages
            response_format: {"type": "json_object"} for JSON mode
            temperature: Sampling temperature (0.0-2.0)
            max_tokens: Max tokens in response

        Returns:
            Dict with content, finish_reason and usage
        """
        client = self._ensure_client()
        await self._rate_limit()

        params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if response_format:
            params["response_format"] = response_format

        completion: ChatCompletion = await client.chat.completions.create(**params)

        choice = completion.choices[0]
        return {
            "content": choice.message.content or "",
            "finish_reason": choice.finish_reason,
            "usage": {
                "prompt_tokens": (completion.usage.prompt_tokens if completion.usage else 0),
                "completion_tokens": (
                    completion.usage.completion_tokens if completion.usage else 0
                ),
                "total_tokens": (completion.usage.total_tokens if completion.usage else 0),
            },
        }

    async def generate(
        self,
        prompt: str,
        image: Optional[ImagePayload] = None,
        config: Optional[GenerationConfig] = None,
    ) -> str:
        """
        Generate text for a prompt (IReasoningProvider).

        Raises:
            ReasoningError: On API failure or empty response
        """
        config = config or GenerationConfig()
        response_format = {"type": "json_object"} if config.json_output else None

        try:
            response = await self.complete(
                messages=self.build_messages(prompt, image),
                response_format=response_format,
                temperature=config.temperature,
                max_tokens=config.max_output_tokens,
            )
        except Exception as e:
            logger.error("OpenAI completion failed", model=self.model, error=str(e))
            raise ReasoningError(f"OpenAI completion failed: {e}") from e

        content = response["content"]
        if not content.strip():
            raise ReasoningError("OpenAI returned an empty response")

        logger.debug(
            "OpenAI completion",
            model=self.model,
            finish_reason=response["finish_reason"],
            total_tokens=response["usage"]["total_tokens"],
            has_image=image is not None,
        )
        return content
