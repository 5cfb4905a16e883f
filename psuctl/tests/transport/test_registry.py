from __future__ import annotations

import pytest

from psuctl.core.errors import ConfigurationError
from psuctl.model.connection import ConnectionConfig
from psuctl.transport.base import Transport
from psuctl.transport.errors import TransportError
from psuctl.transport.factory import TransportFactory
from psuctl.transport.registry import TransportDriverRegistry
from psuctl.transport.serial_line import SerialLineTransport
from psuctl.transport.tcp import TcpTransport


class DummyTransport(Transport):
    def __init__(self, *, x: int = 0):
        self.x = x

    def open(self) -> None: ...
    def close(self) -> None: ...
    def is_open(self) -> bool: return False
    def write(self, data: bytes) -> int: return len(data)
    def read_line(self, timeout_s: float) -> str: return ""


def test_registry_has_and_get_class_case_insensitive():
    reg = TransportDriverRegistry({"DUMMY": DummyTransport})

    assert reg.has("dummy") is True
    assert reg.has("DuMmY") is True
    assert reg.get_class("dummy") is DummyTransport


def test_registry_get_class_unknown_raises():
    reg = TransportDriverRegistry({})
    with pytest.raises(TransportError):
        reg.get_class("serial")


def test_registry_create_instantiates_with_params():
    reg = TransportDriverRegistry({"dummy": DummyTransport})

    t = reg.create("DUMMY", x=42)
    assert isinstance(t, DummyTransport)
    assert t.x == 42


def test_default_registry_covers_connection_kinds():
    reg = TransportDriverRegistry.default()

    assert list(reg.drivers()) == ["network", "serial"]
    assert reg.get_class("NETWORK") is TcpTransport

    reg.register("Loopback", DummyTransport)
    assert reg.has("loopback")


def test_factory_builds_network_transport_without_opening():
    t = TransportFactory().create(ConnectionConfig.network("192.168.1.100", timeout_s=2.0))

    assert isinstance(t, TcpTransport)
    assert (t.host, t.port, t.timeout_s) == ("192.168.1.100", 8003, 2.0)
    assert t.is_open() is False


def test_factory_builds_serial_transport_with_poll_interval():
    t = TransportFactory(poll_interval_s=0.005).create(ConnectionConfig.serial("/dev/ttyUSB0", 19200))

    assert isinstance(t, SerialLineTransport)
    assert t.port == "/dev/ttyUSB0"
    assert t.baudrate == 19200
    assert t.poll_interval_s == 0.005


def test_factory_unregistered_driver_is_configuration_error():
    factory = TransportFactory(TransportDriverRegistry({"serial": SerialLineTransport}))
    with pytest.raises(ConfigurationError):
        factory.create(ConnectionConfig.network("10.0.0.5"))


def test_factory_constructor_mismatch_is_configuration_error():
    factory = TransportFactory(TransportDriverRegistry({"network": DummyTransport}))
    with pytest.raises(ConfigurationError):
        factory.create(ConnectionConfig.network("10.0.0.5"))
