"""Decoders for interpreting adapter responses."""

from .dtc import DtcDecoder
from .pid import PidDecoder, PidSpec, DecodedValue, PID_TABLE

__all__ = ["DtcDecoder", "PidDecoder", "PidSpec", "DecodedValue", "PID_TABLE"]
