"""Connection management for ELM327 adapters."""

from .channel import Command, CommandChannel, RawResponse
from .engine import SessionEngine, ConnectionState, ConnectionResult
from .initializer import AdapterInitializer, INIT_SEQUENCE
from .simulator import SimulatedTransport
from .transport import Transport, SerialTransport

__all__ = [
    "Command",
    "CommandChannel",
    "RawResponse",
    "SessionEngine",
    "ConnectionState",
    "ConnectionResult",
    "AdapterInitializer",
    "INIT_SEQUENCE",
    "SimulatedTransport",
    "Transport",
    "SerialTransport",
]
