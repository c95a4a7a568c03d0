"""Mode 03 response decoder.

Like the PID decoder this never raises: malformed hex ends the list early
and whatever was decoded up to that point is returned.
"""

import logging
from typing import List

from ..models.dtc import DiagnosticCode
from .pid import clean_hex, parse_byte

logger = logging.getLogger(__name__)

DTC_COMMAND = "03"

NO_DATA_MARKER = "NODATA"
ZERO_COUNT_REPLY = "4300"

# Mode echo plus count byte.
HEADER_LENGTH = 4
GROUP_LENGTH = 4


class DtcDecoder:
    """Decodes stored trouble codes from a raw Mode 03 response."""

    def decode(self, response: str) -> List[DiagnosticCode]:
        """
        Decode a Mode 03 response.

        Args:
            response: Response text, e.g. '43 01 03 01 00 00'

        Returns:
            Codes in adapter order, duplicates kept
        """
        hex_str = clean_hex(response).upper()
        if NO_DATA_MARKER in hex_str or hex_str.startswith(ZERO_COUNT_REPLY):
            return []

        codes: List[DiagnosticCode] = []
        i = HEADER_LENGTH
        while i + GROUP_LENGTH <= len(hex_str):
            try:
                byte1 = parse_byte(hex_str[i:i + 2])
                byte2 = parse_byte(hex_str[i + 2:i + 4])
            except ValueError:
                logger.warning(f"Malformed DTC group at offset {i}: {response!r}")
                break

            if byte1 == 0 and byte2 == 0:
                break

            codes.append(DiagnosticCode.from_bytes(byte1, byte2))
            i += GROUP_LENGTH

        return codes
