# psuctl/runtime/factory.py
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Tuple

from psuctl.core.errors import NotSupportedError
from psuctl.model.connection import DEFAULT_BAUDRATE, DEFAULT_TCP_PORT, ConnectionConfig
from psuctl.model.device import Vendor
from psuctl.runtime.g30 import TdkLambdaG30
from psuctl.runtime.interface import PowerSupply

ControllerCtor = Callable[..., PowerSupply]

# (vendor, upper-cased model) -> controller class
_CONTROLLERS: Dict[Tuple[Vendor, str], ControllerCtor] = {
    (Vendor.TDK_LAMBDA, "G30"): TdkLambdaG30,
}

# *IDN? manufacturer field -> Vendor
_IDN_VENDORS: Dict[str, Vendor] = {
    "TDK-LAMBDA": Vendor.TDK_LAMBDA,
    "TDK LAMBDA": Vendor.TDK_LAMBDA,
    "LAMBDA": Vendor.TDK_LAMBDA,
    "KEYSIGHT TECHNOLOGIES": Vendor.KEYSIGHT,
    "AGILENT TECHNOLOGIES": Vendor.KEYSIGHT,
    "ROHDE&SCHWARZ": Vendor.ROHDE_SCHWARZ,
    "RIGOL TECHNOLOGIES": Vendor.RIGOL,
    "SIGLENT": Vendor.SIGLENT,
    "THURLBY THANDAR": Vendor.TTI,
    "B&K PRECISION": Vendor.BK_PRECISION,
    "TENMA": Vendor.TENMA,
}


def register_controller(vendor: Vendor, model: str, ctor: ControllerCtor) -> None:
    """Make an additional model available to create_power_supply()."""
    _CONTROLLERS[(vendor, model.upper())] = ctor


def supported_models() -> list[Tuple[Vendor, str]]:
    return sorted(_CONTROLLERS.keys(), key=lambda k: (k[0].value, k[1]))


def create_power_supply(
    vendor: Vendor,
    model: str,
    config: ConnectionConfig,
    *,
    logger: Optional[logging.Logger] = None,
    **kwargs,
) -> PowerSupply:
    """
    Factory function to create the controller for a vendor/model.

    Model matching is by family prefix, so "G30-60-56" resolves to G30.

    Raises:
        NotSupportedError: vendor/model combination not implemented
    """
    ctor = _lookup(vendor, model)
    if ctor is None:
        known = ", ".join(f"{v.value}/{m}" for v, m in supported_models())
        raise NotSupportedError(
            f"Unsupported power supply {vendor.value}/{model}.",
            hint=f"Supported: {known}",
            details={"vendor": vendor.value, "model": model},
        )
    return ctor(config, logger=logger, **kwargs)


def parse_idn(idn: str) -> Tuple[Optional[Vendor], str]:
    """
    '*IDN?' reply -> (vendor or None, model).

    'TDK-LAMBDA,G30-60-56,SN123,1.02' -> (Vendor.TDK_LAMBDA, 'G30-60-56')
    """
    fields = [f.strip() for f in idn.strip().split(",")]
    manufacturer = fields[0].upper() if fields else ""
    model = fields[1] if len(fields) > 1 else ""

    vendor = _IDN_VENDORS.get(manufacturer)
    if vendor is None:
        for prefix, v in _IDN_VENDORS.items():
            if manufacturer.startswith(prefix):
                vendor = v
                break
    return vendor, model


def create_from_idn(
    idn: str,
    config: ConnectionConfig,
    *,
    logger: Optional[logging.Logger] = None,
    **kwargs,
) -> PowerSupply:
    vendor, model = parse_idn(idn)
    if vendor is None or not model:
        raise NotSupportedError(
            f"Cannot determine vendor/model from identification {idn!r}.",
            hint="Use create_power_supply() with an explicit vendor and model.",
            details={"idn": idn},
        )
    return create_power_supply(vendor, model, config, logger=logger, **kwargs)


def create_g30_network(host: str, port: int = DEFAULT_TCP_PORT, **kwargs) -> TdkLambdaG30:
    return TdkLambdaG30(ConnectionConfig.network(host, port), **kwargs)


def create_g30_serial(port: str, baudrate: int = DEFAULT_BAUDRATE, **kwargs) -> TdkLambdaG30:
    return TdkLambdaG30(ConnectionConfig.serial(port, baudrate), **kwargs)


def _lookup(vendor: Vendor, model: str) -> Optional[ControllerCtor]:
    want = model.strip().upper()
    exact = _CONTROLLERS.get((vendor, want))
    if exact is not None:
        return exact
    for (v, m), ctor in _CONTROLLERS.items():
        if v is vendor and want.startswith(m):
            return ctor
    return None
