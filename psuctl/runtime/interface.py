"""
Vendor-neutral power supply interface.

Concrete models subclass PowerSupply directly; optional features have default
implementations that raise NotSupportedError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from psuctl.core.errors import NotSupportedError
from psuctl.model.device import PowerSupplyCapabilities, PowerSupplyStatus, Vendor


class PowerSupply(ABC):
    """Abstract base class for programmable DC power supplies."""

    # ---------------- Connection ----------------

    @abstractmethod
    def connect(self) -> None:
        """
        Open the channel and perform the identification handshake.

        Raises:
            ConfigurationError: endpoint invalid
            TransportError: endpoint unreachable
            DeviceConnectError: device did not identify itself
        """

    @abstractmethod
    def disconnect(self) -> None:
        """Release the channel. Never raises."""

    @abstractmethod
    def is_connected(self) -> bool: ...

    # ---------------- Basic control ----------------

    @abstractmethod
    def enable_output(self, enable: bool) -> None: ...

    @abstractmethod
    def is_output_enabled(self) -> bool:
        """Query the device for the output state."""

    @abstractmethod
    def reset(self) -> None: ...

    # ---------------- Voltage / current ----------------

    @abstractmethod
    def set_voltage(self, voltage: float) -> None: ...

    @abstractmethod
    def get_voltage(self) -> float:
        """Programmed voltage setpoint in volts."""

    @abstractmethod
    def measure_voltage(self) -> float:
        """Measured output voltage in volts."""

    @abstractmethod
    def set_current(self, current: float) -> None: ...

    @abstractmethod
    def get_current(self) -> float:
        """Programmed current limit in amperes."""

    @abstractmethod
    def measure_current(self) -> float:
        """Measured output current in amperes."""

    @abstractmethod
    def measure_power(self) -> float:
        """Output power in watts."""

    # ---------------- Status / information ----------------

    @abstractmethod
    def get_identification(self) -> str: ...

    @abstractmethod
    def get_status(self) -> PowerSupplyStatus: ...

    @abstractmethod
    def get_capabilities(self) -> PowerSupplyCapabilities: ...

    @property
    @abstractmethod
    def vendor(self) -> Vendor: ...

    @property
    @abstractmethod
    def model(self) -> str: ...

    # ---------------- Optional features ----------------

    def set_over_voltage_protection(self, voltage: float) -> None:
        raise NotSupportedError("OVP not supported by this power supply.")

    def clear_protection(self) -> None:
        raise NotSupportedError("Protection clear not supported by this power supply.")

    # ---------------- Raw access ----------------

    @abstractmethod
    def send_command(self, command: str) -> None:
        """Send a vendor-specific command line (no response expected)."""

    @abstractmethod
    def send_query(self, query: str) -> str:
        """Send a vendor-specific query and return the trimmed response."""

    def __enter__(self) -> "PowerSupply":
        self.connect()
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.disconnect()
