"""In-memory ELM327 emulator (no hardware required)."""

import logging
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional

from ..errors import TransportError
from .transport import Transport

logger = logging.getLogger(__name__)

DEFAULT_RESPONSES: Dict[str, str] = {
    "ATZ": "ELM327 v1.5",
    "ATE0": "OK",
    "ATE1": "OK",
    "ATL0": "OK",
    "ATL1": "OK",
    "ATH0": "OK",
    "ATH1": "OK",
    "ATSP0": "OK",
    "ATRV": "12.3V",
    # Mode 01 replies carry a leading length byte ahead of the mode/PID echo.
    "010C": "04 41 0C 1A F8",
    "010D": "03 41 0D 32",
    "0105": "03 41 05 5A",
    "03": "43 01 03 01 00 00",
}

UNKNOWN_REPLY = "?"


class SimulatedTransport(Transport):
    """Transport that answers like an ELM327 on a quiet vehicle bus."""

    def __init__(
        self,
        responses: Optional[Dict[str, str]] = None,
        stalled: Iterable[str] = (),
        open_error: Optional[str] = None,
        latency: float = 0.0,
    ):
        """
        Initialize simulator.

        Args:
            responses: Replies by command, merged over the defaults
            stalled: Commands that are never answered
            open_error: If set, open() fails with this message
            latency: Seconds before a reply becomes readable
        """
        self.responses = dict(DEFAULT_RESPONSES)
        self.responses.update({k.upper(): v for k, v in (responses or {}).items()})
        self.stalled = {c.upper() for c in stalled}
        self.open_error = open_error
        self.latency = latency

        self.written: List[str] = []
        self.open_count = 0
        self.close_count = 0

        self._cond = threading.Condition()
        self._buffer = bytearray()
        self._ready_at = 0.0
        self._open = False
        self._echo = True

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        if self.open_error:
            raise TransportError(self.open_error)
        with self._cond:
            self._open = True
            self._echo = True
            self._buffer.clear()
        self.open_count += 1
        logger.info("Simulated adapter opened")

    def set_response(self, command: str, response: str) -> None:
        """Change the reply for a command."""
        self.responses[command.upper()] = response

    def write(self, data: bytes) -> None:
        with self._cond:
            if not self._open:
                raise TransportError("Simulated adapter is not open")
            for line in data.decode("ascii", errors="ignore").split("\r"):
                line = line.strip()
                if line:
                    self._respond(line)
            self._cond.notify_all()

    def _respond(self, command: str) -> None:
        key = "".join(command.split()).upper()
        self.written.append(key)
        if key in self.stalled:
            return

        reply = ""
        if self._echo:
            reply += command + "\r"
        reply += self.responses.get(key, UNKNOWN_REPLY) + "\r\r>"

        if key in ("ATZ", "ATE1"):
            self._echo = True
        elif key == "ATE0":
            self._echo = False

        self._buffer.extend(reply.encode("ascii"))
        self._ready_at = time.monotonic() + self.latency

    def read_until(self, predicate: Callable[[bytes], bool], deadline: float) -> bytes:
        with self._cond:
            while True:
                if not self._open:
                    raise TransportError("Simulated adapter closed while reading")
                now = time.monotonic()
                available = bytes(self._buffer) if now >= self._ready_at else b""
                if predicate(available) or now >= deadline:
                    del self._buffer[:len(available)]
                    return available
                wake = deadline if now >= self._ready_at else min(deadline, self._ready_at)
                self._cond.wait(max(wake - now, 0.0))

    def reset_input(self) -> None:
        with self._cond:
            self._buffer.clear()

    def close(self) -> None:
        with self._cond:
            self._open = False
            self._buffer.clear()
            self._cond.notify_all()
        self.close_count += 1
