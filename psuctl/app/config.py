# psuctl/app/config.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from psuctl.core.errors import ConfigurationError
from psuctl.model.connection import ConnectionConfig, ConnectionKind

# key -> schema type; mirrors ConnectionConfig fields
CONFIG_SCHEMA: Dict[str, str] = {
    "kind": "str",
    "host": "str",
    "port": "int",
    "serial_port": "str",
    "baudrate": "int",
    "bytesize": "int",
    "parity": "str",
    "stopbits": "float",
    "timeout_s": "float",
}


def connection_config_from_mapping(data: Mapping[str, Any]) -> ConnectionConfig:
    """
    Build a ConnectionConfig from a plain mapping (YAML file, CLI overrides).

    Unknown keys and wrongly typed values raise ConfigurationError. `kind` is
    inferred from the presence of `host` / `serial_port` when omitted.
    """
    for key in data:
        if key not in CONFIG_SCHEMA:
            raise ConfigurationError(
                f"Unknown connection param '{key}'.",
                hint=f"Valid params: {sorted(CONFIG_SCHEMA.keys())}",
                details={"param": key},
            )

    resolved: Dict[str, Any] = {}
    for name, value in data.items():
        if value is None:
            continue
        try:
            resolved[name] = _cast_param(value, CONFIG_SCHEMA[name])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid value for connection param '{name}'.",
                hint=str(e),
                details={"param": name, "value": value, "expected_type": CONFIG_SCHEMA[name]},
            ) from None

    kind_raw = resolved.pop("kind", None)
    if kind_raw is None:
        if resolved.get("host"):
            kind_raw = ConnectionKind.NETWORK.value
        elif resolved.get("serial_port"):
            kind_raw = ConnectionKind.SERIAL.value
        else:
            raise ConfigurationError(
                "No endpoint configured.",
                hint="Set 'host' (network) or 'serial_port' (serial).",
            )
    try:
        kind = ConnectionKind(str(kind_raw).lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown connection kind '{kind_raw}'.",
            hint=f"Use one of: {', '.join(k.value for k in ConnectionKind)}",
        ) from None

    return ConnectionConfig(kind=kind, **resolved)


def load_connection_config(
    path: str | Path,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ConnectionConfig:
    """
    Load the 'connection' section of a YAML file, then apply overrides
    (e.g. CLI flags; None values are ignored).
    """
    full_path = Path(path)
    try:
        with open(full_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigurationError(f"Config file not found: {full_path}") from None
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Config file is not valid YAML: {full_path}", hint=str(e)) from None

    section = data.get("connection", data) if isinstance(data, dict) else None
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Config file {full_path} must contain a 'connection' mapping.",
        )

    merged = dict(section)
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return connection_config_from_mapping(merged)


def _cast_param(value: Any, type_name: str) -> Any:
    if type_name == "str":
        if not isinstance(value, str):
            raise TypeError(f"Expected str, got {type(value).__name__}")
        return value

    if type_name == "int":
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Expected int, got {type(value).__name__}")
        return value

    if type_name == "float":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"Expected float, got {type(value).__name__}")
        return float(value)

    # unknown schema type
    raise TypeError(f"Unknown schema type '{type_name}'")
