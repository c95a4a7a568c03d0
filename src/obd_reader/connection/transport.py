"""Byte stream transports for ELM327 adapters."""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

import serial

from ..errors import TransportError

logger = logging.getLogger(__name__)

# Longest single blocking read, so close() from another thread is noticed quickly.
POLL_INTERVAL = 0.05


class Transport(ABC):
    """Bidirectional byte stream to an adapter."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Check if the stream is open."""

    @abstractmethod
    def open(self) -> None:
        """Open the stream. Raises TransportError on failure."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write all bytes. Raises TransportError on failure."""

    @abstractmethod
    def read_until(self, predicate: Callable[[bytes], bool], deadline: float) -> bytes:
        """
        Read until the accumulated bytes satisfy a predicate.

        Args:
            predicate: Called with everything read so far
            deadline: time.monotonic() value after which reading stops

        Returns:
            Accumulated bytes; the predicate may not hold if the deadline passed

        Raises:
            TransportError: If the stream fails or is closed while reading
        """

    @abstractmethod
    def close(self) -> None:
        """Close the stream, unblocking any pending read."""

    def reset_input(self) -> None:
        """Discard unread input."""

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class SerialTransport(Transport):
    """Transport over a serial device, e.g. a Bluetooth RFCOMM binding."""

    def __init__(self, port: str, baudrate: int = 38400):
        """
        Initialize serial transport.

        Args:
            port: Device path such as /dev/rfcomm0 or COM5
            baudrate: Baud rate for the serial link
        """
        self.port = port
        self.baudrate = baudrate
        self._serial: Optional[serial.Serial] = None
        self._closed = threading.Event()

    @property
    def is_open(self) -> bool:
        conn = self._serial
        return conn is not None and conn.is_open and not self._closed.is_set()

    def open(self) -> None:
        logger.info(f"Opening {self.port} at {self.baudrate} baud")
        try:
            self._serial = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                timeout=POLL_INTERVAL,
                write_timeout=POLL_INTERVAL * 20,
            )
        except (serial.SerialException, OSError, ValueError) as e:
            raise TransportError(f"Could not open {self.port}: {e}") from e
        self._closed.clear()

    def write(self, data: bytes) -> None:
        conn = self._require_open()
        try:
            conn.write(data)
            conn.flush()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Write to {self.port} failed: {e}") from e

    def read_until(self, predicate: Callable[[bytes], bool], deadline: float) -> bytes:
        conn = self._require_open()
        buf = bytearray()

        while not predicate(bytes(buf)):
            if time.monotonic() >= deadline:
                break
            if self._closed.is_set():
                raise TransportError(f"{self.port} closed while reading")
            try:
                chunk = conn.read(conn.in_waiting or 1)
            except (serial.SerialException, OSError, TypeError) as e:
                # TypeError: pyserial drops the file descriptor on a concurrent close
                raise TransportError(f"Read from {self.port} failed: {e}") from e
            if chunk:
                buf.extend(chunk)

        return bytes(buf)

    def reset_input(self) -> None:
        conn = self._require_open()
        try:
            conn.reset_input_buffer()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Could not flush {self.port}: {e}") from e

    def close(self) -> None:
        self._closed.set()
        conn = self._serial
        if conn is None:
            return

        cancel_read = getattr(conn, "cancel_read", None)
        if cancel_read is not None:
            try:
                cancel_read()
            except (serial.SerialException, OSError) as e:
                logger.debug(f"cancel_read on {self.port} failed: {e}")

        try:
            conn.close()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Error closing {self.port}: {e}") from e
        finally:
            self._serial = None
        logger.info(f"Closed {self.port}")

    def _require_open(self) -> serial.Serial:
        conn = self._serial
        if conn is None or self._closed.is_set():
            raise TransportError(f"{self.port} is not open")
        return conn
