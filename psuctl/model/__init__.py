from .connection import ConnectionConfig, ConnectionKind
from .device import DeviceProfile, PowerSupplyCapabilities, PowerSupplyStatus, Timing, Vendor
from .loader import DeviceProfileLoader, load_profile

__all__ = ["ConnectionConfig",
           "ConnectionKind",
           "DeviceProfile",
           "PowerSupplyCapabilities",
           "PowerSupplyStatus",
           "Timing",
           "Vendor",
           "DeviceProfileLoader",
           "load_profile"]
