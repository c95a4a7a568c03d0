"""Tests for Mode 03 trouble code decoding."""

import pytest

from obd_reader.decoders.dtc import DtcDecoder
from obd_reader.models.dtc import DiagnosticCode, DTCCategory


@pytest.fixture
def decoder():
    return DtcDecoder()


def codes(decoder, response):
    return [dtc.text for dtc in decoder.decode(response)]


def test_single_code(decoder):
    result = decoder.decode("43 01 03 01 00 00")

    assert result == [DiagnosticCode(category=DTCCategory.POWERTRAIN, code="0301")]
    assert str(result[0]) == "P0301"


def test_category_from_top_bits(decoder):
    assert codes(decoder, "43 04 01 71 41 23 81 00 C1 55") == ["P0171", "C0123", "B0100", "U0155"]


def test_low_six_bits_form_code(decoder):
    assert codes(decoder, "43 01 FF FF") == ["U3FFF"]


def test_stops_at_zero_sentinel(decoder):
    assert codes(decoder, "43 02 03 01 00 00 04 20") == ["P0301"]


def test_duplicates_kept_in_order(decoder):
    assert codes(decoder, "43 03 04 20 03 01 04 20") == ["P0420", "P0301", "P0420"]


@pytest.mark.parametrize("response", ["NO DATA", "no data", "SEARCHING... NO DATA", "43 00", "4300", "", "43"])
def test_empty_results(decoder, response):
    assert decoder.decode(response) == []


def test_zero_count_only_at_start(decoder):
    # A 0x43 code byte followed by 0x00 is data, not the zero-count reply.
    assert codes(decoder, "43 01 01 43 00 00") == ["P0143"]


def test_malformed_group_returns_partial(decoder):
    assert codes(decoder, "43 02 03 01 ZZ 20 04 20") == ["P0301"]


def test_incomplete_trailing_group_ignored(decoder):
    assert codes(decoder, "43 01 03 01 0") == ["P0301"]


def test_prompt_and_line_breaks_ignored(decoder):
    assert codes(decoder, "43 01 03 01\r00 00\r>") == ["P0301"]
