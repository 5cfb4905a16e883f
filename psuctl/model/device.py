from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Vendor(str, Enum):
    TDK_LAMBDA = "tdk-lambda"
    KEYSIGHT = "keysight"
    ROHDE_SCHWARZ = "rohde-schwarz"
    RIGOL = "rigol"
    SIGLENT = "siglent"
    TTI = "tti"
    BK_PRECISION = "bk-precision"
    TENMA = "tenma"
    CUSTOM = "custom"


@dataclass(frozen=True)
class PowerSupplyCapabilities:
    """
    Static, vendor-defined ratings of a model. Never queried from the device.
    """
    max_voltage: float
    max_current: float
    max_power: float
    channels: int = 1
    supports_remote_sensing: bool = False
    supports_ovp: bool = False
    supports_ocp: bool = False
    supports_opp: bool = False
    supports_sequencing: bool = False


@dataclass(frozen=True)
class PowerSupplyStatus:
    """
    Point-in-time status snapshot. Re-fetch on demand; nothing is cached.
    """
    output_enabled: bool = False
    over_voltage_protection: bool = False
    over_current_protection: bool = False
    over_power_protection: bool = False
    over_temperature: bool = False
    remote_sensing: bool = False
    cc_mode: bool = False
    cv_mode: bool = False

    @property
    def faulted(self) -> bool:
        return (
            self.over_voltage_protection
            or self.over_current_protection
            or self.over_power_protection
            or self.over_temperature
        )


@dataclass(frozen=True)
class Timing:
    """Fixed pauses the instrument needs between commands (seconds)."""
    command_delay_s: float = 0.05
    connect_settle_s: float = 0.1
    reset_settle_s: float = 0.5
    clear_settle_s: float = 0.1
    ramp_step_s: float = 0.1


@dataclass(frozen=True)
class DeviceProfile:
    """
    Catalog entry for one supported model (loaded from devices.yml).
    """
    vendor: Vendor
    model: str
    capabilities: PowerSupplyCapabilities
    idn_vendor: str = ""
    default_tcp_port: int = 8003
    default_baudrate: int = 9600
    timing: Timing = field(default_factory=Timing)

    @property
    def key(self) -> tuple[Vendor, str]:
        return (self.vendor, self.model.upper())

    def __repr__(self) -> str:
        return f"DeviceProfile(vendor='{self.vendor.value}', model='{self.model}')"
