# psuctl/protocol/codec.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union

from . import scpi
from .errors import ProtocolError

#: Tokens read as "true" by decode_bool(); everything else is false.
TRUE_TOKENS = frozenset({"1", "ON"})
FALSE_TOKENS = frozenset({"0", "OFF"})

#: Fixed precision of numeric command arguments.
ARG_DECIMALS = 3

Arg = Union[str, int, float, None]


@dataclass(frozen=True)
class StatusFlags:
    """Decoded STAT:QUES? bitfield. Unknown bits are ignored."""
    raw: int
    over_voltage: bool
    over_current: bool
    over_temperature: bool


# ---------------- Encoding ----------------

def terminate(line: str) -> str:
    """Append a single newline unless one is already present."""
    return line if line.endswith("\n") else line + "\n"


def format_arg(arg: Arg) -> str:
    if isinstance(arg, bool):
        raise TypeError("bool is not a valid command argument; pass 'ON'/'OFF'")
    if isinstance(arg, (int, float)):
        return f"{float(arg):.{ARG_DECIMALS}f}"
    return str(arg)


def encode_command(verb: str, arg: Arg = None) -> bytes:
    """
    VOLT, 12.5  -> b"VOLT 12.500\\n"
    OUTP, "ON"  -> b"OUTP ON\\n"
    *RST        -> b"*RST\\n"
    """
    line = verb if arg is None else f"{verb} {format_arg(arg)}"
    return terminate(line).encode("ascii")


def encode_query(verb: str) -> bytes:
    """VOLT -> b"VOLT?\\n" (a trailing '?' is not doubled)."""
    v = verb.rstrip("\n")
    if not v.endswith("?"):
        v += "?"
    return terminate(v).encode("ascii")


# ---------------- Decoding ----------------

def decode_text(raw: str) -> str:
    """Strip leading/trailing whitespace including CR/LF."""
    return raw.strip()


def decode_float(raw: str) -> float:
    text = decode_text(raw)
    try:
        value = float(text)
    except ValueError:
        raise ProtocolError(
            f"Failed to parse numeric response: {raw!r}",
            response=raw,
            hint="Device returned a non-numeric reply (timeout or wrong command?).",
        ) from None
    if not math.isfinite(value):
        raise ProtocolError(f"Numeric response is not finite: {raw!r}", response=raw)
    return value


def decode_bool(raw: str) -> bool:
    return decode_text(raw).upper() in TRUE_TOKENS


def is_known_bool_token(raw: str) -> bool:
    token = decode_text(raw).upper()
    return token in TRUE_TOKENS or token in FALSE_TOKENS


def decode_status_mask(raw: str) -> StatusFlags:
    mask = int(decode_float(raw))
    return StatusFlags(
        raw=mask,
        over_voltage=bool(mask & (1 << scpi.BIT_OVER_VOLTAGE)),
        over_current=bool(mask & (1 << scpi.BIT_OVER_CURRENT)),
        over_temperature=bool(mask & (1 << scpi.BIT_OVER_TEMPERATURE)),
    )


def decode_error_entry(raw: str) -> Tuple[int, str]:
    """
    SYST:ERR? reply -> (code, message).

    '-113,"Undefined header"' -> (-113, "Undefined header")
    '0,"No error"'            -> (0, "No error")
    """
    text = decode_text(raw)
    code_s, sep, msg = text.partition(",")
    try:
        code = int(code_s.strip())
    except ValueError:
        raise ProtocolError(f"Malformed error queue entry: {raw!r}", response=raw) from None
    if not sep:
        return code, ""
    return code, msg.strip().strip('"')
