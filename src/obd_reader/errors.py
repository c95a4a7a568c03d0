"""Exception hierarchy for adapter communication."""

from typing import Optional


class ObdReaderError(Exception):
    """Base class for all OBD reader errors."""


class TransportError(ObdReaderError):
    """Byte stream failed to open, write, read or close."""


class CommandTimeoutError(ObdReaderError, TimeoutError):
    """No prompt was received before the command deadline."""

    def __init__(self, command: str, timeout: float, partial: str = ""):
        self.command = command
        self.timeout = timeout
        self.partial = partial
        message = f"No response to {command!r} within {timeout:.2f}s"
        if partial:
            message += f" (partial: {partial!r})"
        super().__init__(message)


class ProtocolViolation(ObdReaderError):
    """A command was issued while another was outstanding, or while not connected."""

    def __init__(self, message: str, command: Optional[str] = None):
        self.command = command
        super().__init__(message)
