"""
Port for the reasoning collaborator.

The hosted language model used for image reading, narrative scoring,
ranking and follow-up answers sits behind this interface so the core
stays testable without network access.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class ImagePayload(BaseModel):
    """Raw image bytes handed to the collaborator."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str = "image/jpeg"


class GenerationConfig(BaseModel):
    """Small generation-control structure sent with each prompt."""

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(0.4, ge=0.0, le=2.0)
    max_output_tokens: int = Field(2048, gt=0)
    json_output: bool = True


@runtime_checkable
class IReasoningProvider(Protocol):
    """
    Port for the reasoning collaborator.

    Accepts a prompt, optionally with an attached image, and returns
    generated text. Implementations may use any hosted model.
    """

    async def generate(
        self,
        prompt: str,
        image: Optional[ImagePayload] = None,
        config: Optional[GenerationConfig] = None,
    ) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Full prompt text
            image: Optional image attached to the prompt
            config: Temperature / length / JSON-mode controls

        Returns:
            Generated text (JSON text when config.json_output is set)

        Raises:
            ReasoningError: If the call fails or returns nothing
        """
        ...
