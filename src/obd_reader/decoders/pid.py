"""PID decoder for Mode 01 live data and the adapter voltage query.

Decoding is best-effort: a short or malformed response yields the zero
value for the PID instead of an error. A zero reading is therefore not a
reliable "unsupported" or "failed" signal. Callers that need to tell the
two apart use ``decode_checked``, which also reports validity.
"""

import logging
import math
import string
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

# Payload bytes start after three leading bytes (six hex characters).
PAYLOAD_OFFSET = 6

VOLTAGE_COMMAND = "ATRV"

HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True)
class PidSpec:
    """Static definition of a decodable PID."""
    code: str
    name: str
    unit: str
    byte_count: int
    formula: Callable[[List[int]], int]
    offset: int = PAYLOAD_OFFSET

    @property
    def min_hex_length(self) -> int:
        """Shortest hex string that holds the whole payload."""
        return self.offset + 2 * self.byte_count


@dataclass(frozen=True)
class DecodedValue:
    """A decoded value plus whether it came from a well-formed payload."""
    value: int
    is_valid: bool


PID_TABLE: Mapping[str, PidSpec] = {
    "010C": PidSpec(
        code="010C",
        name="Engine RPM",
        unit="rpm",
        byte_count=2,
        formula=lambda b: (256 * b[0] + b[1]) // 4,
    ),
    "010D": PidSpec(
        code="010D",
        name="Vehicle Speed",
        unit="km/h",
        byte_count=1,
        formula=lambda b: b[0],
    ),
    "0105": PidSpec(
        code="0105",
        name="Coolant Temperature",
        unit="C",
        byte_count=1,
        formula=lambda b: b[0] - 40,
    ),
}

RPM = "010C"
SPEED = "010D"
COOLANT_TEMP = "0105"


def clean_hex(response: str) -> str:
    """Strip spaces, line breaks and the prompt from a response."""
    return "".join(response.replace(">", "").split())


def parse_byte(pair: str) -> int:
    """Parse exactly two hex digits (no sign, no prefix)."""
    if len(pair) != 2 or any(c not in HEX_DIGITS for c in pair):
        raise ValueError(f"Not a hex byte: {pair!r}")
    return int(pair, 16)


class PidDecoder:
    """Decodes raw Mode 01 responses into physical values."""

    def __init__(self, table: Optional[Mapping[str, PidSpec]] = None):
        self._table: Dict[str, PidSpec] = dict(table or PID_TABLE)

    @property
    def pids(self) -> List[str]:
        """Get the PID codes this decoder knows."""
        return list(self._table)

    def spec(self, pid: str) -> Optional[PidSpec]:
        """Get the definition for a PID."""
        return self._table.get(pid.upper())

    def decode(self, pid: str, response: str) -> int:
        """Decode a response, returning 0 on any anomaly."""
        return self.decode_checked(pid, response).value

    def decode_checked(self, pid: str, response: str) -> DecodedValue:
        """Decode a response and report whether the payload was well formed."""
        spec = self.spec(pid)
        if spec is None:
            logger.warning(f"No decoder for PID {pid}")
            return DecodedValue(0, False)

        hex_str = clean_hex(response)
        if len(hex_str) < spec.min_hex_length:
            logger.warning(f"Short response for {spec.name}: {response!r}")
            return DecodedValue(0, False)

        try:
            payload = [
                parse_byte(hex_str[spec.offset + 2 * i:spec.offset + 2 * i + 2])
                for i in range(spec.byte_count)
            ]
        except ValueError:
            logger.warning(f"Malformed response for {spec.name}: {response!r}")
            return DecodedValue(0, False)

        return DecodedValue(spec.formula(payload), True)

    @staticmethod
    def decode_voltage(response: str) -> float:
        """
        Decode an ATRV reply such as '12.3V'.

        Returns:
            Voltage in volts, or 0.0 if the reply cannot be parsed
        """
        text = response.replace(">", "").strip()
        if text[-1:] in ("V", "v"):
            text = text[:-1].strip()

        try:
            value = float(text)
        except ValueError:
            logger.warning(f"Unparsable voltage reply: {response!r}")
            return 0.0

        if not math.isfinite(value) or value < 0:
            logger.warning(f"Voltage out of range: {response!r}")
            return 0.0
        return value
