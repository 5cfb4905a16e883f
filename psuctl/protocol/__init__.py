# protocol/__init__.py

from .codec import (
    StatusFlags,
    decode_bool,
    decode_error_entry,
    decode_float,
    decode_status_mask,
    decode_text,
    encode_command,
    encode_query,
    terminate,
)
from .errors import ProtocolError

__all__ = [
    "StatusFlags",
    "encode_command", "encode_query", "terminate",
    "decode_text", "decode_float", "decode_bool", "decode_status_mask", "decode_error_entry",
    "ProtocolError",
]
