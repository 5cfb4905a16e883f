# psuctl/model/loader.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import yaml

from .device import DeviceProfile, PowerSupplyCapabilities, Timing, Vendor

DEVICES_FILE = "devices.yml"


def metadata_root() -> Path:
    # <package>/metadata, based on this file's location
    return Path(__file__).resolve().parents[1] / "metadata"


class DeviceProfileLoader:
    """
    Loads device profiles from YAML into strongly-typed model classes.

    After calling load_all(), exposes:
        self.profiles : dict[str, DeviceProfile]  (profile key -> profile)
    """

    def __init__(self, config_dir: str | Path | None = None):
        self.config_dir = Path(config_dir) if config_dir is not None else metadata_root()
        self.profiles: Dict[str, DeviceProfile] = {}

    # ---------------------------------------------------------------------
    # YAML utility
    # ---------------------------------------------------------------------
    def _load_yaml(self, filename: str) -> dict:
        full_path = self.config_dir / filename
        if not full_path.exists():
            raise FileNotFoundError(f"Missing metadata file: {full_path}")

        with open(full_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    # ---------------------------------------------------------------------
    # Public entry point
    # ---------------------------------------------------------------------
    def load_all(self) -> "DeviceProfileLoader":
        self.profiles.clear()

        data = self._load_yaml(DEVICES_FILE)
        devices = data.get("devices")
        if not isinstance(devices, dict):
            raise ValueError(f"{DEVICES_FILE} is missing 'devices' root node")

        for key, info in devices.items():
            self.profiles[str(key).lower()] = self._parse_profile(str(key), info)
        return self

    # ---------------------------------------------------------------------
    # Parsing
    # ---------------------------------------------------------------------
    @staticmethod
    def _parse_profile(key: str, info: object) -> DeviceProfile:
        if not isinstance(info, dict):
            raise ValueError(f"Device '{key}' entry must be a mapping")

        vendor_raw = info.get("vendor")
        if not vendor_raw:
            raise ValueError(f"Device '{key}' is missing 'vendor'")
        try:
            vendor = Vendor(str(vendor_raw).lower())
        except ValueError:
            raise ValueError(f"Device '{key}' has unknown vendor '{vendor_raw}'") from None

        model = info.get("model")
        if not model:
            raise ValueError(f"Device '{key}' is missing 'model'")

        caps = info.get("capabilities")
        if not isinstance(caps, dict):
            raise ValueError(f"Device '{key}' 'capabilities' must be a mapping")
        for required in ("max_voltage", "max_current"):
            if required not in caps:
                raise ValueError(f"Device '{key}' capabilities missing '{required}'")

        max_voltage = float(caps["max_voltage"])
        max_current = float(caps["max_current"])
        capabilities = PowerSupplyCapabilities(
            max_voltage=max_voltage,
            max_current=max_current,
            max_power=float(caps.get("max_power", max_voltage * max_current)),
            channels=int(caps.get("channels", 1)),
            supports_remote_sensing=bool(caps.get("supports_remote_sensing", False)),
            supports_ovp=bool(caps.get("supports_ovp", False)),
            supports_ocp=bool(caps.get("supports_ocp", False)),
            supports_opp=bool(caps.get("supports_opp", False)),
            supports_sequencing=bool(caps.get("supports_sequencing", False)),
        )

        timing_raw = info.get("timing") or {}
        if not isinstance(timing_raw, dict):
            raise ValueError(f"Device '{key}' 'timing' must be a mapping")
        timing = Timing(**{k: float(v) for k, v in timing_raw.items() if k in Timing.__dataclass_fields__})

        return DeviceProfile(
            vendor=vendor,
            model=str(model),
            capabilities=capabilities,
            idn_vendor=str(info.get("idn_vendor", "")),
            default_tcp_port=int(info.get("default_tcp_port", 8003)),
            default_baudrate=int(info.get("default_baudrate", 9600)),
            timing=timing,
        )

    # ---------------------------------------------------------------------
    # Accessors
    # ---------------------------------------------------------------------
    def get(self, key: str) -> Optional[DeviceProfile]:
        return self.profiles.get(key.lower())

    def find(self, vendor: Vendor, model: str) -> Optional[DeviceProfile]:
        want = (vendor, model.upper())
        for profile in self.profiles.values():
            if profile.key == want:
                return profile
        return None


def load_profile(key: str, config_dir: str | Path | None = None) -> DeviceProfile:
    loader = DeviceProfileLoader(config_dir).load_all()
    profile = loader.get(key)
    if profile is None:
        raise KeyError(f"Unknown device profile '{key}'")
    return profile
