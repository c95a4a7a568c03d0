"""Data models for session snapshots."""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .dtc import DiagnosticCode
from .live import LiveReading

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """Format a moment as ISO-8601 UTC with second precision."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(TIMESTAMP_FORMAT)


class SessionSnapshot(BaseModel):
    """Timestamped copy of the engine's live reading and trouble codes."""

    model_config = ConfigDict(frozen=True)

    timestamp: str = Field(..., description="ISO-8601 UTC, second precision")
    dtcs: Tuple[DiagnosticCode, ...] = Field(default=(), description="Codes in adapter order")
    live: LiveReading = Field(default_factory=LiveReading)

    @classmethod
    def build(
        cls,
        live: LiveReading,
        dtcs: Iterable[DiagnosticCode],
        now: Optional[datetime] = None,
    ) -> "SessionSnapshot":
        """Create a snapshot stamped with the current (or given) time."""
        return cls(timestamp=utc_timestamp(now), dtcs=tuple(dtcs), live=live)

    @classmethod
    def from_export(cls, data: Dict[str, Any]) -> "SessionSnapshot":
        """Rebuild a snapshot from its exported dictionary form."""
        return cls(
            timestamp=data["timestamp"],
            dtcs=tuple(DiagnosticCode.from_string(code) for code in data.get("dtcs", [])),
            live=LiveReading(**data.get("live", {})),
        )

    @property
    def dtc_codes(self) -> list:
        """Codes as plain strings."""
        return [dtc.text for dtc in self.dtcs]

    def to_dict_for_export(self) -> Dict[str, Any]:
        """Convert to dictionary suitable for JSON export."""
        return {
            "timestamp": self.timestamp,
            "dtcs": self.dtc_codes,
            "live": self.live.to_dict(),
        }
