"""ELM327 initialization handshake."""

import logging
import re
import threading
from typing import Optional, Sequence

from ..errors import TransportError
from .channel import CommandChannel

logger = logging.getLogger(__name__)

RESET = "ATZ"

# Reset, echo off, linefeeds off, headers off, automatic protocol.
INIT_SEQUENCE: Sequence[str] = (RESET, "ATE0", "ATL0", "ATH0", "ATSP0")


def extract_version(response: str) -> Optional[str]:
    """Pull the chip identification (e.g. 'ELM327 v1.5') out of the reset banner."""
    text = (response or "").strip()
    if not text:
        return None
    match = re.search(r"(ELM327\s*v?\s*[\w.]+)", text, re.IGNORECASE)
    if match:
        return match.group(1).strip()
    return text[:40].strip()


class AdapterInitializer:
    """Puts a freshly connected adapter into a known state."""

    def __init__(
        self,
        command_timeout: float = 2.0,
        reset_timeout: float = 5.0,
        delay: float = 0.1,
        sequence: Sequence[str] = INIT_SEQUENCE,
    ):
        """
        Initialize handshake runner.

        Args:
            command_timeout: Prompt timeout for configuration commands
            reset_timeout: Prompt timeout for the reset, which reboots the chip
            delay: Pause between consecutive commands
            sequence: Commands to issue, in order
        """
        self.command_timeout = command_timeout
        self.reset_timeout = reset_timeout
        self.delay = delay
        self.sequence = tuple(sequence)
        self.adapter_version: Optional[str] = None

    def initialize(self, channel: CommandChannel, cancel: Optional[threading.Event] = None) -> bool:
        """
        Run the handshake. Responses are not validated.

        Args:
            channel: Channel to the adapter
            cancel: Set by the engine to abort a connect in progress

        Returns:
            True once every command has been answered

        Raises:
            TransportError: On stream failure or cancellation
            CommandTimeoutError: If a command gets no prompt
        """
        cancel = cancel or threading.Event()
        self.adapter_version = None

        for index, command in enumerate(self.sequence):
            if index:
                logger.debug(f"Waiting {self.delay:.2f}s before {command}")
                if cancel.wait(self.delay):
                    raise TransportError("Initialization cancelled")

            timeout = self.reset_timeout if command == RESET else self.command_timeout
            response = channel.send(command, timeout)

            if command == RESET:
                self.adapter_version = extract_version(response.text)

        logger.info(f"Adapter initialized ({self.adapter_version or 'unknown version'})")
        return True
