"""OBD Reader - ELM327 session engine for live data and trouble codes."""

__version__ = "1.0.0"

from .connection.engine import SessionEngine, ConnectionState, ConnectionResult
from .errors import ObdReaderError, TransportError, CommandTimeoutError, ProtocolViolation
from .models import DiagnosticCode, DTCCategory, LiveReading, SessionSnapshot

__all__ = [
    "SessionEngine",
    "ConnectionState",
    "ConnectionResult",
    "ObdReaderError",
    "TransportError",
    "CommandTimeoutError",
    "ProtocolViolation",
    "DiagnosticCode",
    "DTCCategory",
    "LiveReading",
    "SessionSnapshot",
]
