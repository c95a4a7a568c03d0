"""Command/response framing over a half-duplex transport."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..errors import CommandTimeoutError, ProtocolViolation
from .transport import Transport

logger = logging.getLogger(__name__)

PROMPT = b">"
TERMINATOR = "\r"

# Progress line some adapters print while auto-detecting the protocol.
SEARCHING_PREFIX = "SEARCHING"


@dataclass(frozen=True)
class Command:
    """A single ASCII command line."""
    text: str

    def __post_init__(self):
        text = self.text.strip()
        if not text:
            raise ValueError("Command text is empty")
        if not text.isascii() or "\r" in text or "\n" in text:
            raise ValueError(f"Invalid command text: {self.text!r}")
        object.__setattr__(self, "text", text)

    def encode(self) -> bytes:
        """Wire form: the text followed by a carriage return."""
        return (self.text + TERMINATOR).encode("ascii")

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class RawResponse:
    """What came back for one command."""
    command: str
    raw: bytes
    text: str
    elapsed: float


def _squash(text: str) -> str:
    return "".join(text.split()).upper()


def normalize_response(command: str, raw: bytes) -> str:
    """
    Turn raw adapter output into a single line of text.

    Drops the prompt, blank lines, an echoed copy of the command and
    'SEARCHING...' progress lines, then joins what remains with spaces.
    """
    text = raw.decode("ascii", errors="ignore").replace(PROMPT.decode(), "")
    lines = [ln.strip() for ln in text.replace("\r", "\n").split("\n")]
    lines = [ln for ln in lines if ln]

    if lines and _squash(lines[0]) == _squash(command):
        lines = lines[1:]

    lines = [ln for ln in lines if not ln.upper().startswith(SEARCHING_PREFIX)]
    return " ".join(lines)


class CommandChannel:
    """Sends one command at a time and collects its prompt-terminated reply.

    The adapter is half-duplex: a second ``send`` while one is in flight is
    refused with ``ProtocolViolation`` rather than queued or interleaved.
    """

    def __init__(
        self,
        transport: Transport,
        is_ready: Optional[Callable[[], bool]] = None,
        raw_logger: Optional[Callable[[str, str], None]] = None,
    ):
        """
        Initialize channel.

        Args:
            transport: Open byte stream to the adapter
            is_ready: Gate consulted before each send (engine connection state)
            raw_logger: Optional callback receiving ("TX"|"RX", text)
        """
        self._transport = transport
        self._is_ready = is_ready or (lambda: True)
        self._raw_logger = raw_logger
        self._busy = threading.Lock()
        self._outstanding: Optional[str] = None

    @property
    def transport(self) -> Transport:
        """Get the underlying transport."""
        return self._transport

    @property
    def outstanding(self) -> Optional[str]:
        """Command currently awaiting its reply, if any."""
        return self._outstanding

    def send(self, command, timeout: float) -> RawResponse:
        """
        Send a command and wait for the prompt.

        Args:
            command: Command or plain command text
            timeout: Seconds to wait for the prompt

        Returns:
            RawResponse with normalized text

        Raises:
            ProtocolViolation: If not ready or another command is outstanding
            CommandTimeoutError: If no prompt arrives in time (transport stays open)
            TransportError: If the byte stream fails
        """
        if not isinstance(command, Command):
            command = Command(command)

        if not self._is_ready():
            raise ProtocolViolation(f"Cannot send {command.text!r}: not connected", command.text)

        if not self._busy.acquire(blocking=False):
            raise ProtocolViolation(
                f"Cannot send {command.text!r} while {self._outstanding!r} is outstanding",
                command.text,
            )

        try:
            self._outstanding = command.text
            return self._exchange(command, timeout)
        finally:
            self._outstanding = None
            self._busy.release()

    def _exchange(self, command: Command, timeout: float) -> RawResponse:
        start = time.monotonic()
        self._transport.reset_input()

        self._trace("TX", command.text)
        self._transport.write(command.encode())

        raw = self._transport.read_until(lambda buf: PROMPT in buf, start + timeout)
        elapsed = time.monotonic() - start

        if PROMPT not in raw:
            partial = normalize_response(command.text, raw)
            raise CommandTimeoutError(command.text, timeout, partial)

        # Bytes after the prompt are discarded.
        raw = raw[:raw.index(PROMPT) + 1]
        text = normalize_response(command.text, raw)
        self._trace("RX", text)

        return RawResponse(command=command.text, raw=raw, text=text, elapsed=elapsed)

    def _trace(self, direction: str, text: str) -> None:
        logger.debug(f"{direction} {text!r}")
        if self._raw_logger:
            try:
                self._raw_logger(direction, text)
            except Exception as e:
                logger.warning(f"Raw logger callback error: {e}")
