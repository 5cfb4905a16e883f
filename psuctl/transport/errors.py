# psuctl/transport/errors.py
from __future__ import annotations

from psuctl.core.errors import PsuError


class TransportError(PsuError):
    """Base class for transport-layer failures."""
    code = "transport_error"


class TransportOpenError(TransportError):
    pass


class TransportIOError(TransportError):
    pass


class TransportClosedError(TransportIOError):
    """Remote side closed the connection while we were reading."""
