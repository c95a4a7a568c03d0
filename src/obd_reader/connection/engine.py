"""Session engine: connection state machine for one ELM327 adapter."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Tuple, TYPE_CHECKING

from ..config import ReaderSettings, get_settings
from ..decoders.dtc import DTC_COMMAND, DtcDecoder
from ..decoders.pid import COOLANT_TEMP, RPM, SPEED, VOLTAGE_COMMAND, PidDecoder
from ..errors import ObdReaderError, ProtocolViolation
from ..models.dtc import DiagnosticCode
from ..models.live import LiveReading
from ..models.session import SessionSnapshot
from .channel import CommandChannel
from .initializer import AdapterInitializer
from .transport import SerialTransport, Transport

if TYPE_CHECKING:
    from ..storage.snapshots import SnapshotStore

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Connection state enumeration."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


@dataclass
class ConnectionResult:
    """Result of a connection attempt."""
    success: bool
    state: ConnectionState
    message: str
    device_ref: str = ""
    adapter_version: Optional[str] = None
    error: Optional[str] = None


TransportFactory = Callable[[str], Transport]


class OrderedLock:
    """Mutex that admits waiting threads strictly in arrival order."""

    def __init__(self):
        self._cond = threading.Condition()
        self._next_ticket = 0
        self._serving = 0

    @property
    def queued(self) -> int:
        """Number of holders plus waiters."""
        with self._cond:
            return self._next_ticket - self._serving

    def __enter__(self):
        with self._cond:
            ticket = self._next_ticket
            self._next_ticket += 1
            while ticket != self._serving:
                self._cond.wait()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        with self._cond:
            self._serving += 1
            self._cond.notify_all()
        return False


class SessionEngine:
    """Owns the transport and connection state for one adapter session.

    All methods block and are meant to run off any UI thread. ``connect``
    and ``read_data`` are served one at a time in call order;
    ``disconnect`` may be called at any moment, from any thread, and
    unblocks an outstanding command by closing the transport.
    """

    def __init__(
        self,
        transport_factory: Optional[TransportFactory] = None,
        settings: Optional[ReaderSettings] = None,
        initializer: Optional[AdapterInitializer] = None,
        pid_decoder: Optional[PidDecoder] = None,
        dtc_decoder: Optional[DtcDecoder] = None,
    ):
        self._settings = settings or get_settings()
        self._transport_factory = transport_factory or self._serial_factory
        self._initializer = initializer or AdapterInitializer(
            command_timeout=self._settings.command_timeout,
            reset_timeout=self._settings.reset_timeout,
            delay=self._settings.init_delay,
        )
        self._pid_decoder = pid_decoder or PidDecoder()
        self._dtc_decoder = dtc_decoder or DtcDecoder()

        self._state = ConnectionState.DISCONNECTED
        self._state_lock = threading.RLock()
        self._op_lock = OrderedLock()
        self._cancel = threading.Event()

        self._transport: Optional[Transport] = None
        self._channel: Optional[CommandChannel] = None
        self._device_ref: Optional[str] = None
        self._adapter_version: Optional[str] = None

        self._live = LiveReading()
        self._dtcs: Tuple[DiagnosticCode, ...] = ()
        self._reading = False
        self._last_error: Optional[str] = None
        self._failure_reason: Optional[str] = None
        self._on_state_change: Optional[Callable[[ConnectionState], None]] = None

    def _serial_factory(self, device_ref: str) -> Transport:
        return SerialTransport(device_ref, baudrate=self._settings.baudrate)

    # -- read-only state ----------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        """Get current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """Check if the handshake completed and the session is usable."""
        return self._state == ConnectionState.CONNECTED

    @property
    def is_reading(self) -> bool:
        """Check if a read cycle is in progress."""
        return self._reading

    @property
    def live(self) -> LiveReading:
        """Most recent complete live reading."""
        return self._live

    @property
    def dtcs(self) -> Tuple[DiagnosticCode, ...]:
        """Trouble codes from the most recent read cycle."""
        return self._dtcs

    @property
    def last_error(self) -> Optional[str]:
        """Human-readable reason of the last failed operation."""
        return self._last_error

    @property
    def failure_reason(self) -> Optional[str]:
        """Reason the last connect attempt failed, if it did."""
        return self._failure_reason

    @property
    def device_ref(self) -> Optional[str]:
        """Device the session is (or was last) connected to."""
        return self._device_ref

    @property
    def adapter_version(self) -> Optional[str]:
        """Chip identification reported during the handshake."""
        return self._adapter_version

    def on_state_change(self, callback: Callable[[ConnectionState], None]) -> None:
        """Register callback for state changes."""
        self._on_state_change = callback

    def _set_state(self, state: ConnectionState) -> None:
        """Update state and notify callbacks."""
        with self._state_lock:
            if self._state == state:
                return
            self._state = state
        logger.debug(f"State -> {state.value}")
        if self._on_state_change:
            try:
                self._on_state_change(state)
            except Exception as e:
                logger.warning(f"State change callback error: {e}")

    def _channel_ready(self) -> bool:
        return self._state in (ConnectionState.CONNECTING, ConnectionState.CONNECTED)

    # -- transitions --------------------------------------------------------

    def connect(self, device_ref: Optional[str] = None) -> ConnectionResult:
        """
        Open the transport and run the adapter handshake.

        Args:
            device_ref: Device to open (defaults to the configured port)

        Returns:
            ConnectionResult; on failure the engine is back in DISCONNECTED
        """
        device_ref = device_ref or self._settings.port

        with self._op_lock:
            if self._state != ConnectionState.DISCONNECTED:
                self.disconnect()

            cancel = threading.Event()
            with self._state_lock:
                self._cancel = cancel
                self._device_ref = device_ref
                self._adapter_version = None
                self._failure_reason = None
            self._set_state(ConnectionState.CONNECTING)

            try:
                logger.info(f"Connecting to {device_ref}...")
                transport = self._transport_factory(device_ref)
                with self._state_lock:
                    self._transport = transport
                    self._channel = CommandChannel(transport, is_ready=self._channel_ready)
                    channel = self._channel
                transport.open()
                self._initializer.initialize(channel, cancel)
            except Exception as e:
                reason = str(e) or e.__class__.__name__
                if not cancel.is_set():
                    logger.error(f"Connection to {device_ref} failed: {reason}")
                return self._fail_connect(device_ref, reason)

            with self._state_lock:
                cancelled = cancel.is_set()
                if not cancelled:
                    self._adapter_version = self._initializer.adapter_version
                    self._last_error = None
                    self._set_state(ConnectionState.CONNECTED)
            if cancelled:
                return self._fail_connect(device_ref, "Connection cancelled")
            logger.info(f"Connected to {device_ref}")

            return ConnectionResult(
                success=True,
                state=ConnectionState.CONNECTED,
                message=f"Connected to {device_ref}",
                device_ref=device_ref,
                adapter_version=self._adapter_version,
            )

    def _fail_connect(self, device_ref: str, reason: str) -> ConnectionResult:
        with self._state_lock:
            # A disconnect() during the attempt already moved to DISCONNECTED.
            failed = self._state == ConnectionState.CONNECTING
            if failed:
                self._failure_reason = reason
                self._last_error = reason
                self._set_state(ConnectionState.FAILED)
        self._release_transport()
        if failed:
            self._set_state(ConnectionState.DISCONNECTED)
        else:
            logger.info(f"Connection to {device_ref} cancelled")

        return ConnectionResult(
            success=False,
            state=ConnectionState.DISCONNECTED,
            message="Connection failed" if failed else "Connection cancelled",
            device_ref=device_ref,
            error=reason,
        )

    def disconnect(self) -> None:
        """Close the transport and return to DISCONNECTED. Safe to repeat."""
        with self._state_lock:
            if self._state == ConnectionState.DISCONNECTED and self._transport is None:
                return
            # Refuse further sends before the close wakes a blocked reader.
            self._cancel.set()
            self._set_state(ConnectionState.DISCONNECTED)

        self._release_transport()
        logger.info("Disconnected from adapter")

    def _release_transport(self) -> None:
        with self._state_lock:
            self._cancel.set()
            transport = self._transport
            self._transport = None
            self._channel = None

        if transport is None:
            return
        try:
            transport.close()
        except Exception as e:
            logger.warning(f"Error closing transport: {e}")

    # -- operations ---------------------------------------------------------

    def read_data(self) -> SessionSnapshot:
        """
        Run one read cycle: RPM, speed, coolant, voltage, then stored DTCs.

        Returns:
            Snapshot of the freshly read state

        Raises:
            ProtocolViolation: If not connected
            TransportError, CommandTimeoutError: If any step fails; the
                engine stays CONNECTED and keeps the previous reading
        """
        with self._op_lock:
            channel = self._channel
            if self._state != ConnectionState.CONNECTED or channel is None:
                self._last_error = "Not connected to OBD device"
                raise ProtocolViolation(self._last_error)

            self._reading = True
            self._last_error = None
            try:
                live = LiveReading(
                    rpm=self._read_pid(channel, RPM),
                    speed_kmh=self._read_pid(channel, SPEED),
                    coolant_c=self._read_pid(channel, COOLANT_TEMP),
                    battery_v=self._read_voltage(channel),
                )
                dtcs = self._read_dtcs(channel)
            except ObdReaderError as e:
                self._last_error = str(e)
                logger.warning(f"Read cycle failed: {e}")
                raise
            finally:
                self._reading = False

            with self._state_lock:
                self._live = live
                self._dtcs = tuple(dtcs)

            return self.build_snapshot()

    def _timeout(self) -> float:
        return self._settings.command_timeout

    def _read_pid(self, channel: CommandChannel, pid: str) -> int:
        response = channel.send(pid, self._timeout())
        decoded = self._pid_decoder.decode_checked(pid, response.text)
        if not decoded.is_valid:
            logger.debug(f"PID {pid} fell back to 0 (response {response.text!r})")
        return decoded.value

    def _read_voltage(self, channel: CommandChannel) -> float:
        response = channel.send(VOLTAGE_COMMAND, self._timeout())
        return self._pid_decoder.decode_voltage(response.text)

    def _read_dtcs(self, channel: CommandChannel) -> List[DiagnosticCode]:
        response = channel.send(DTC_COMMAND, self._timeout())
        return self._dtc_decoder.decode(response.text)

    def send_raw(self, command: str, timeout: Optional[float] = None):
        """Send a single command over the session channel (diagnostics)."""
        with self._op_lock:
            channel = self._channel
            if self._state != ConnectionState.CONNECTED or channel is None:
                raise ProtocolViolation("Not connected to OBD device", command)
            return channel.send(command, timeout or self._timeout())

    def build_snapshot(self, now: Optional[datetime] = None) -> SessionSnapshot:
        """Snapshot of the current reading and codes. No I/O."""
        with self._state_lock:
            live, dtcs = self._live, self._dtcs
        return SessionSnapshot.build(live, dtcs, now=now)

    def save_snapshot(self, store: "SnapshotStore", filename: Optional[str] = None):
        """Build a snapshot and hand it to a storage sink."""
        return store.save(self.build_snapshot(), filename=filename)

    def get_status_info(self) -> dict:
        """Get detailed status information."""
        return {
            "state": self._state.value,
            "is_connected": self.is_connected,
            "is_reading": self._reading,
            "device": self._device_ref,
            "adapter_version": self._adapter_version,
            "last_error": self._last_error,
            "dtc_count": len(self._dtcs),
        }

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
        return False
