# psuctl/transport/registry.py
from __future__ import annotations

from typing import Dict, Iterable, Type

from .base import Transport
from .errors import TransportError
from .serial_line import SerialLineTransport
from .tcp import TcpTransport


class TransportDriverRegistry:
    """
    Maps a connection kind ("network", "serial", ...) to a Transport class.

    Keys are case-insensitive. Tests inject their own map to swap in fakes;
    nothing here reads configuration.
    """

    def __init__(self, drivers: Dict[str, Type[Transport]]):
        self._drivers: Dict[str, Type[Transport]] = {}
        for key, transport_cls in drivers.items():
            self.register(key, transport_cls)

    @classmethod
    def default(cls) -> "TransportDriverRegistry":
        return cls({"network": TcpTransport, "serial": SerialLineTransport})

    def register(self, driver: str, transport_cls: Type[Transport]) -> None:
        self._drivers[driver.lower()] = transport_cls

    def drivers(self) -> Iterable[str]:
        return sorted(self._drivers)

    def has(self, driver: str) -> bool:
        return driver.lower() in self._drivers

    def get_class(self, driver: str) -> Type[Transport]:
        try:
            return self._drivers[driver.lower()]
        except KeyError:
            known = ", ".join(self.drivers()) or "(none)"
            raise TransportError(f"No transport for connection kind '{driver}' (known: {known})") from None

    def create(self, driver: str, **params) -> Transport:
        """Build an unopened transport for `driver` from constructor kwargs."""
        return self.get_class(driver)(**params)
