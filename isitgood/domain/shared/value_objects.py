"""
Shared value objects.

Immutable, validated domain primitives.
"""

from __future__ import annotations

import re
import uuid
from pydantic import BaseModel, Field, ConfigDict


class Barcode(BaseModel):
    """
    Product barcode value object.

    Validates barcode format (8-13 digits).
    Used for product database lookups.

    Example:
        >>> barcode = Barcode(value="3017620422003")
        >>> assert len(barcode.value) == 13
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., pattern=r"^\d{8,13}$", description="Barcode digits")

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def from_string(cls, s: str) -> Barcode:
        """Create from string, stripping spaces and dashes."""
        return cls(value=re.sub(r"[\s-]", "", s))

    @classmethod
    def try_parse(cls, s: str | None) -> Barcode | None:
        """Return a Barcode or None when the string is not a barcode."""
        if not s:
            return None
        cleaned = re.sub(r"[\s-]", "", s)
        if not re.fullmatch(r"\d{8,13}", cleaned):
            return None
        return cls(value=cleaned)


class ResultId(BaseModel):
    """
    Result identifier.

    Identifies a produced ScanResult or MenuSelectionResult.
    Format: "scan_<12_hex_chars>"

    Example:
        >>> result_id = ResultId.generate()
        >>> assert result_id.value.startswith("scan_")
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., pattern=r"^scan_[a-f0-9]{12}$")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> ResultId:
        """Generate a new random result id."""
        return cls(value=f"scan_{uuid.uuid4().hex[:12]}")
