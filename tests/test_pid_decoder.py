"""Tests for Mode 01 and voltage decoding."""

import pytest

from obd_reader.decoders.pid import (
    COOLANT_TEMP,
    PID_TABLE,
    RPM,
    SPEED,
    PidDecoder,
    parse_byte,
)


@pytest.fixture
def decoder():
    return PidDecoder()


class TestRpm:
    @pytest.mark.parametrize("a,b,expected", [
        (0x1A, 0xF8, 1726),
        (0x0B, 0xB8, 750),
        (0x00, 0x00, 0),
        (0x00, 0x03, 0),
        (0xFF, 0xFF, 16383),
    ])
    def test_formula_truncates(self, decoder, a, b, expected):
        response = f"04 41 0C {a:02X} {b:02X}"
        assert decoder.decode(RPM, response) == expected
        assert expected == (256 * a + b) // 4

    def test_ignores_prompt_and_case(self, decoder):
        assert decoder.decode(RPM, "04 41 0c 1a f8>") == 1726

    def test_payload_read_at_fixed_offset(self, decoder):
        # Without the leading byte the payload is misaligned and too short.
        assert decoder.decode(RPM, "41 0C 1A F8") == 0


class TestSingleBytePids:
    def test_speed(self, decoder):
        assert decoder.decode(SPEED, "03 41 0D 32") == 50

    @pytest.mark.parametrize("a,expected", [(0x5A, 50), (0x28, 0), (0x27, -1), (0x00, -40), (0xFF, 215)])
    def test_coolant_offset(self, decoder, a, expected):
        assert decoder.decode(COOLANT_TEMP, f"03 41 05 {a:02X}") == expected


class TestBestEffort:
    @pytest.mark.parametrize("response", ["", "NO DATA", "41 0C 1A", "04 41 0C 1A", "?"])
    def test_short_response_is_zero(self, decoder, response):
        assert decoder.decode(RPM, response) == 0

    def test_malformed_hex_is_zero(self, decoder):
        assert decoder.decode(RPM, "04 41 0C ZZ F8") == 0
        assert decoder.decode(SPEED, "03 41 0D G1") == 0

    def test_signed_text_is_not_hex(self, decoder):
        assert decoder.decode(RPM, "04 41 0C -1 F8") == 0

    def test_unknown_pid_is_zero(self, decoder):
        assert decoder.decode("0111", "03 41 11 80") == 0

    def test_checked_decode_reports_validity(self, decoder):
        good = decoder.decode_checked(COOLANT_TEMP, "03 41 05 28")
        bad = decoder.decode_checked(COOLANT_TEMP, "NO DATA")

        assert good.value == 0 and good.is_valid
        assert bad.value == 0 and not bad.is_valid


class TestVoltage:
    @pytest.mark.parametrize("response,expected", [
        ("12.3V", 12.3),
        (" 14.1V ", 14.1),
        ("11.8", 11.8),
        ("12.6v>", 12.6),
    ])
    def test_parses_decimal(self, response, expected):
        assert PidDecoder.decode_voltage(response) == pytest.approx(expected)

    @pytest.mark.parametrize("response", ["", "V", "ELM327", "NO DATA", "?", "nanV", "-1.0V"])
    def test_unparsable_is_zero(self, response):
        assert PidDecoder.decode_voltage(response) == 0.0


def test_table_lengths():
    assert PID_TABLE[RPM].min_hex_length == 10
    assert PID_TABLE[SPEED].min_hex_length == 8
    assert PID_TABLE[COOLANT_TEMP].min_hex_length == 8


def test_parse_byte_rejects_non_hex():
    assert parse_byte("aF") == 0xAF
    for bad in ("+1", "-1", "0x", "1", "123", " 1"):
        with pytest.raises(ValueError):
            parse_byte(bad)
