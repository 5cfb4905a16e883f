# psuctl/core/errors.py
from __future__ import annotations


class PsuError(Exception):
    """
    Base class for all expected operational errors in psuctl.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, logs, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration / setup errors (no hardware access yet)
# ---------------------------------------------------------------------------

class ConfigurationError(PsuError):
    """
    Connection configuration is invalid or unsupported.

    Examples:
      - empty host / serial port path
      - TCP port outside 1..65535
      - unsupported baud rate, byte size, parity or stop bits
      - unknown keys or wrongly typed values in a config file
    """
    code = "configuration_error"


# ---------------------------------------------------------------------------
# Session lifecycle errors
# ---------------------------------------------------------------------------

class NotConnectedError(PsuError):
    """
    Operation attempted while the session is not connected.
    """
    code = "not_connected"


class DeviceConnectError(PsuError):
    """
    Transport opened but the device did not complete the handshake.

    Examples:
      - *IDN? returned nothing within the timeout
      - wrong baud rate (device answers with garbage or not at all)
    """
    code = "device_connect_error"


# ---------------------------------------------------------------------------
# Client-side precondition errors (raised before any I/O)
# ---------------------------------------------------------------------------

class InvalidArgumentError(PsuError):
    """
    Argument rejected before anything was sent to the device.

    Examples:
      - non-positive ramp rate
      - NaN setpoint
      - non-positive safety ceiling
    """
    code = "invalid_argument"


class LimitExceededError(InvalidArgumentError):
    """
    Setpoint outside [0, configured safety ceiling].
    """
    code = "limit_exceeded"


class NotSupportedError(PsuError):
    """
    Feature or device model not supported by this implementation.
    """
    code = "not_supported"


class OperationCancelledError(PsuError):
    """
    A blocking operation (ramp) was cancelled by the caller.
    """
    code = "cancelled"
