from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from psuctl.app.config import connection_config_from_mapping, load_connection_config
from psuctl.core.errors import ConfigurationError
from psuctl.model.connection import ConnectionConfig, ConnectionKind


def _write(p: Path, text: str) -> Path:
    path = p / "psu.yml"
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
    return path


def test_mapping_network_with_defaults():
    cfg = connection_config_from_mapping({"kind": "network", "host": "192.168.1.100"})

    assert cfg == ConnectionConfig.network("192.168.1.100")
    assert cfg.port == 8003
    assert cfg.timeout_s == 1.0


def test_mapping_infers_kind_from_endpoint():
    assert connection_config_from_mapping({"host": "10.0.0.2"}).kind is ConnectionKind.NETWORK
    assert connection_config_from_mapping({"serial_port": "COM3"}).kind is ConnectionKind.SERIAL


def test_mapping_kind_is_case_insensitive_and_none_values_skipped():
    cfg = connection_config_from_mapping(
        {"kind": "SERIAL", "serial_port": "/dev/ttyUSB0", "baudrate": 19200, "host": None}
    )

    assert cfg.kind is ConnectionKind.SERIAL
    assert cfg.baudrate == 19200
    assert cfg.endpoint == "/dev/ttyUSB0@19200"


def test_mapping_timeout_int_is_widened_to_float():
    cfg = connection_config_from_mapping({"host": "h", "timeout_s": 2})
    assert cfg.timeout_s == 2.0
    assert isinstance(cfg.timeout_s, float)


@pytest.mark.parametrize(
    "data",
    [
        {"host": "h", "speed": 1},              # unknown key
        {"host": "h", "port": "8003"},          # wrong type
        {"host": "h", "port": True},            # bool is not an int here
        {"serial_port": 5},
        {"kind": "usb", "host": "h"},           # unknown kind
        {"timeout_s": 1.0},                     # no endpoint
    ],
)
def test_mapping_rejects_invalid(data):
    with pytest.raises(ConfigurationError):
        connection_config_from_mapping(data)


def test_load_connection_section_with_overrides(tmp_path: Path):
    path = _write(
        tmp_path,
        """
        connection:
          kind: network
          host: 192.168.1.100
          port: 8003
          timeout_s: 0.5
        """,
    )

    cfg = load_connection_config(path, {"host": "192.168.1.101", "port": None})

    assert cfg.host == "192.168.1.101"
    assert cfg.port == 8003
    assert cfg.timeout_s == 0.5


def test_load_top_level_mapping(tmp_path: Path):
    path = _write(
        tmp_path,
        """
        serial_port: /dev/ttyS1
        baudrate: 38400
        parity: E
        """,
    )

    cfg = load_connection_config(path)

    assert cfg.kind is ConnectionKind.SERIAL
    assert (cfg.serial_port, cfg.baudrate, cfg.parity) == ("/dev/ttyS1", 38400, "E")


def test_load_missing_file(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        load_connection_config(tmp_path / "nope.yml")


def test_load_invalid_yaml(tmp_path: Path):
    path = _write(tmp_path, "connection: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_connection_config(path)


def test_load_non_mapping(tmp_path: Path):
    path = _write(tmp_path, "- a\n- b\n")
    with pytest.raises(ConfigurationError):
        load_connection_config(path)
