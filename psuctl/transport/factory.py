# psuctl/transport/factory.py
from __future__ import annotations

from typing import Optional

from psuctl.core.errors import ConfigurationError
from psuctl.model.connection import ConnectionConfig
from psuctl.transport.base import Transport
from psuctl.transport.errors import TransportError
from psuctl.transport.registry import TransportDriverRegistry


class TransportFactory:
    """
    Constructs a transport instance from a ConnectionConfig.
    Note: does NOT open the transport.
    """

    def __init__(
        self,
        drivers: Optional[TransportDriverRegistry] = None,
        *,
        poll_interval_s: Optional[float] = None,
    ):
        self._drivers = drivers or TransportDriverRegistry.default()
        self._poll_interval_s = poll_interval_s

    def create(self, config: ConnectionConfig) -> Transport:
        driver = getattr(config.kind, "value", config.kind)
        params = config.transport_params(self._poll_interval_s)

        try:
            return self._drivers.create(str(driver), **params)
        except (TransportError, TypeError) as e:
            # unknown driver key or constructor mismatch
            raise ConfigurationError(
                f"Failed to construct transport (driver='{driver}').",
                hint=str(e),
                details={"driver": str(driver), "endpoint": config.endpoint},
            ) from None
