"""
User profile domain models.

The profile is owned by the surrounding application and passed read-only
into every core call.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class BodySensitivity(str, Enum):
    """Selectable skin & body sensitivities."""

    FRAGRANCE = "Fragrance"
    ESSENTIAL_OILS = "Essential Oils"
    PEPPERMINT = "Peppermint"
    BERGAMOT = "Bergamot"
    CEDARWOOD = "Cedarwood"
    ALCOHOL_DENAT = "Alcohol (denat.)"
    SILICONES = "Silicones"
    RETINOL = "Retinol"
    GENTLE_PRESERVATIVES = "Benzyl Alcohol / Sorbic Acid"
    TINGLING = "Anything that tingles"


ESSENTIAL_OIL_SENSITIVITIES = frozenset(
    {
        BodySensitivity.ESSENTIAL_OILS.value,
        BodySensitivity.PEPPERMINT.value,
        BodySensitivity.BERGAMOT.value,
        BodySensitivity.CEDARWOOD.value,
    }
)


class UserProfile(BaseModel):
    """User clean-living profile.

    Example:
        >>> profile = UserProfile(
        ...     name="Sofia",
        ...     critical_allergies=["Peanuts"],
        ...     body_sensitivities=["Fragrance"],
        ... )
        >>> assert profile.has_fragrance_sensitivity()
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    critical_allergies: List[str] = Field(default_factory=list)
    sensitivities: List[str] = Field(default_factory=list)
    dietary_preferences: List[str] = Field(default_factory=list)
    body_sensitivities: List[str] = Field(default_factory=list)

    def has_body_sensitivity(self, sensitivity: BodySensitivity) -> bool:
        """Check for an exact body-sensitivity selection."""
        return sensitivity.value in self.body_sensitivities

    def has_essential_oil_sensitivity(self) -> bool:
        return any(s in ESSENTIAL_OIL_SENSITIVITIES for s in self.body_sensitivities)

    def has_fragrance_sensitivity(self) -> bool:
        return self.has_body_sensitivity(BodySensitivity.FRAGRANCE)

    def has_alcohol_sensitivity(self) -> bool:
        return self.has_body_sensitivity(BodySensitivity.ALCOHOL_DENAT)


class ChatRole(str, Enum):
    """Chat message author."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One turn of a follow-up conversation."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole
    content: str
