from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

DEFAULT_TCP_PORT = 8003
DEFAULT_BAUDRATE = 9600
DEFAULT_TIMEOUT_S = 1.0


class ConnectionKind(str, Enum):
    """Channel kinds; the value doubles as the transport driver key."""

    SERIAL = "serial"
    NETWORK = "network"


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Static description of how to reach one instrument.

    Contains only configuration, no runtime state. Validation of the endpoint
    happens when the transport is opened.

    Attributes:
        kind: SERIAL or NETWORK.
        host / port: TCP endpoint (NETWORK).
        serial_port / baudrate / bytesize / parity / stopbits: line settings (SERIAL).
        timeout_s: Per-response read timeout, also used as socket/write timeout.
    """

    kind: ConnectionKind
    host: str = ""
    port: int = DEFAULT_TCP_PORT
    serial_port: str = ""
    baudrate: int = DEFAULT_BAUDRATE
    bytesize: int = 8
    parity: str = "N"
    stopbits: float = 1
    timeout_s: float = DEFAULT_TIMEOUT_S

    @classmethod
    def network(
        cls,
        host: str,
        port: int = DEFAULT_TCP_PORT,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> "ConnectionConfig":
        return cls(kind=ConnectionKind.NETWORK, host=host, port=port, timeout_s=timeout_s)

    @classmethod
    def serial(
        cls,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> "ConnectionConfig":
        return cls(kind=ConnectionKind.SERIAL, serial_port=port, baudrate=baudrate, timeout_s=timeout_s)

    @property
    def endpoint(self) -> str:
        if self.kind is ConnectionKind.NETWORK:
            return f"{self.host}:{self.port}"
        return f"{self.serial_port}@{self.baudrate}"

    def transport_params(self, poll_interval_s: Optional[float] = None) -> Dict[str, Any]:
        """Constructor kwargs for the transport driver matching `kind`."""
        if self.kind is ConnectionKind.NETWORK:
            params: Dict[str, Any] = {
                "host": self.host,
                "port": self.port,
                "timeout_s": self.timeout_s,
            }
        else:
            params = {
                "port": self.serial_port,
                "baudrate": self.baudrate,
                "bytesize": self.bytesize,
                "parity": self.parity,
                "stopbits": self.stopbits,
                "timeout_s": self.timeout_s,
            }
        if poll_interval_s is not None:
            params["poll_interval_s"] = poll_interval_s
        return params

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "endpoint": self.endpoint,
            "timeout_s": self.timeout_s,
        }
