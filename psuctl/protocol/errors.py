# psuctl/protocol/errors.py
from __future__ import annotations

from psuctl.core.errors import PsuError


class ProtocolError(PsuError):
    """A device response could not be decoded into the expected type."""
    code = "protocol_error"

    def __init__(self, message: str, *, response: str = "", hint: str | None = None):
        super().__init__(message, hint=hint, details={"response": response})
        self.response = response
