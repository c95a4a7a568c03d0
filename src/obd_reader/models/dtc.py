"""Data models for Diagnostic Trouble Codes (DTCs)."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DTCCategory(str, Enum):
    """DTC category, selected by the top two bits of the first code byte."""
    POWERTRAIN = "P"  # 00
    CHASSIS = "C"     # 01
    BODY = "B"        # 10
    NETWORK = "U"     # 11

    @classmethod
    def from_bits(cls, bits: int) -> "DTCCategory":
        """Map the two category bits (0-3) to a category."""
        return _CATEGORY_BY_BITS[bits & 0x03]


_CATEGORY_BY_BITS = (
    DTCCategory.POWERTRAIN,
    DTCCategory.CHASSIS,
    DTCCategory.BODY,
    DTCCategory.NETWORK,
)


class DiagnosticCode(BaseModel):
    """A single trouble code as reported by Mode 03."""

    model_config = ConfigDict(frozen=True)

    category: DTCCategory = Field(..., description="Code category (P/C/B/U)")
    code: str = Field(..., pattern=r"^[0-9A-F]{4}$", description="Four uppercase hex digits")

    @classmethod
    def from_bytes(cls, byte1: int, byte2: int) -> "DiagnosticCode":
        """Build a code from the two raw bytes of a Mode 03 record."""
        number = ((byte1 & 0x3F) << 8) | (byte2 & 0xFF)
        return cls(category=DTCCategory.from_bits(byte1 >> 6), code=f"{number:04X}")

    @classmethod
    def from_string(cls, text: str) -> "DiagnosticCode":
        """Parse a code string such as 'P0301'."""
        text = text.strip().upper()
        if len(text) != 5:
            raise ValueError(f"Invalid DTC code: {text!r}")
        return cls(category=DTCCategory(text[0]), code=text[1:])

    @property
    def text(self) -> str:
        """Full code string, e.g. 'P0301'."""
        return f"{self.category.value}{self.code}"

    @property
    def is_generic(self) -> bool:
        """Check if this is a generic (SAE) code vs manufacturer-specific."""
        if self.code[0] == "0":
            return True
        # 2xxx is SAE-reserved only for powertrain
        return self.code[0] == "2" and self.category == DTCCategory.POWERTRAIN

    def __str__(self) -> str:
        return self.text
