"""
psuctl: control library for programmable DC power supplies.

Typical use:

    from psuctl import create_g30_network

    with create_g30_network("192.168.1.100") as psu:
        psu.set_current(2.0)
        psu.set_voltage(12.5)
        psu.enable_output(True)
        print(psu.measure_power())
"""

from psuctl.core.errors import (
    ConfigurationError,
    DeviceConnectError,
    InvalidArgumentError,
    LimitExceededError,
    NotConnectedError,
    NotSupportedError,
    OperationCancelledError,
    PsuError,
)
from psuctl.model import (
    ConnectionConfig,
    ConnectionKind,
    PowerSupplyCapabilities,
    PowerSupplyStatus,
    Timing,
    Vendor,
)
from psuctl.protocol.errors import ProtocolError
from psuctl.runtime.factory import (
    create_from_idn,
    create_g30_network,
    create_g30_serial,
    create_power_supply,
)
from psuctl.runtime.g30 import TdkLambdaG30
from psuctl.runtime.interface import PowerSupply
from psuctl.runtime.state import SessionState
from psuctl.transport.errors import TransportClosedError, TransportError

__version__ = "1.0.0"

__all__ = [
    "PowerSupply", "TdkLambdaG30", "SessionState",
    "create_power_supply", "create_from_idn", "create_g30_network", "create_g30_serial",
    "ConnectionConfig", "ConnectionKind",
    "PowerSupplyCapabilities", "PowerSupplyStatus", "Timing", "Vendor",
    "PsuError", "ConfigurationError", "TransportError", "TransportClosedError", "ProtocolError",
    "NotConnectedError", "DeviceConnectError", "InvalidArgumentError", "LimitExceededError",
    "NotSupportedError", "OperationCancelledError",
]
