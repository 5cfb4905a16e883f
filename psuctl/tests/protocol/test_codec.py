from __future__ import annotations

import pytest

from psuctl.protocol import scpi
from psuctl.protocol.codec import (
    decode_bool,
    decode_error_entry,
    decode_float,
    decode_status_mask,
    decode_text,
    encode_command,
    encode_query,
    format_arg,
    is_known_bool_token,
)
from psuctl.protocol.errors import ProtocolError


def test_encode_command_formats_three_decimals():
    assert encode_command(scpi.VOLTAGE, 12.5) == b"VOLT 12.500\n"
    assert encode_command(scpi.CURRENT, 2) == b"CURR 2.000\n"
    assert encode_command(scpi.VOLTAGE, 0.0004) == b"VOLT 0.000\n"


def test_encode_command_without_argument_and_with_token():
    assert encode_command(scpi.RESET) == b"*RST\n"
    assert encode_command(scpi.OUTPUT, scpi.OUTPUT_ON) == b"OUTP ON\n"


def test_encode_command_does_not_double_newline():
    assert encode_command("SYST:REM\n") == b"SYST:REM\n"


def test_encode_query_appends_question_mark_once():
    assert encode_query(scpi.IDN) == b"*IDN?\n"
    assert encode_query(scpi.MEAS_VOLTAGE) == b"MEAS:VOLT?\n"
    assert encode_query("VOLT?") == b"VOLT?\n"


def test_format_arg_rejects_bool():
    with pytest.raises(TypeError):
        format_arg(True)


def test_decode_text_strips_line_endings():
    assert decode_text("  TDK-LAMBDA,G30-60-56,123,1.0 \r\n") == "TDK-LAMBDA,G30-60-56,123,1.0"


@pytest.mark.parametrize("raw,expected", [("12.345\n", 12.345), (" -0.5\r\n", -0.5), ("1E+01", 10.0)])
def test_decode_float(raw, expected):
    assert decode_float(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", "\n", "ERR", "12,5", "nan\n", "inf", "-inf"])
def test_decode_float_malformed_raises_protocol_error(raw):
    with pytest.raises(ProtocolError) as ei:
        decode_float(raw)
    assert ei.value.response == raw
    assert ei.value.code == "protocol_error"


@pytest.mark.parametrize(
    "raw,expected",
    [("1\n", True), (" ON \r\n", True), ("on", True), ("0", False), ("OFF\n", False), ("", False), ("2", False)],
)
def test_decode_bool(raw, expected):
    assert decode_bool(raw) is expected


def test_is_known_bool_token():
    assert is_known_bool_token("ON\n")
    assert is_known_bool_token("0")
    assert not is_known_bool_token("")
    assert not is_known_bool_token("YES")


def test_decode_status_mask_bits():
    flags = decode_status_mask("19\n")  # 0b10011

    assert flags.raw == 19
    assert flags.over_voltage is True
    assert flags.over_current is True
    assert flags.over_temperature is True


def test_decode_status_mask_ignores_unknown_bits():
    flags = decode_status_mask("4")

    assert flags.raw == 4
    assert (flags.over_voltage, flags.over_current, flags.over_temperature) == (False, False, False)


def test_decode_status_mask_accepts_float_text():
    assert decode_status_mask("2.0").over_current is True


@pytest.mark.parametrize("raw", ["garbage", "nan", "inf"])
def test_decode_status_mask_malformed_raises(raw):
    with pytest.raises(ProtocolError):
        decode_status_mask(raw)


def test_decode_error_entry():
    assert decode_error_entry('0,"No error"\n') == (0, "No error")
    assert decode_error_entry('-113,"Undefined header"') == (-113, "Undefined header")
    assert decode_error_entry("-222") == (-222, "")


def test_decode_error_entry_malformed_raises():
    with pytest.raises(ProtocolError):
        decode_error_entry("No error")
