"""Data models for OBD reader."""

from .dtc import DiagnosticCode, DTCCategory
from .live import LiveReading
from .session import SessionSnapshot

__all__ = [
    "DiagnosticCode",
    "DTCCategory",
    "LiveReading",
    "SessionSnapshot",
]
