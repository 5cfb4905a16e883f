# psuctl/transport/tcp.py
from __future__ import annotations

import select
import socket
import time
from typing import Optional

from psuctl.core.errors import ConfigurationError

from .base import DEFAULT_POLL_INTERVAL_S, Transport
from .errors import TransportClosedError, TransportIOError, TransportOpenError

#: Bytes requested per recv() call.
RECV_CHUNK = 256


class TcpTransport(Transport):
    """
    TCP stream transport (LAN interface of the instrument).

    The socket timeout is set to timeout_s so a stalled send or recv cannot
    block forever; read_line() additionally polls with select() every
    poll_interval_s.
    """

    def __init__(
        self,
        host: str,
        port: int,
        timeout_s: float = 1.0,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    ):
        self.host = host
        self.port = port
        self.timeout_s = timeout_s
        self.poll_interval_s = poll_interval_s
        self.sock: Optional[socket.socket] = None
        self._rx = bytearray()

    def _validate(self) -> None:
        if not self.host:
            raise ConfigurationError(
                "Network host is empty.",
                hint="Pass the instrument IP address or hostname.",
            )
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ConfigurationError(
                f"Invalid TCP port {self.port!r}.",
                hint="Port must be an integer in 1..65535.",
                details={"host": self.host, "port": self.port},
            )
        self._validate_timing()

    def open(self) -> None:
        if self.sock is not None:
            return
        self._validate()

        try:
            sock = socket.create_connection((self.host, self.port), timeout=self.timeout_s)
        except OSError as e:
            raise TransportOpenError(f"could not connect to {self.host}:{self.port}: {e}") from None

        sock.settimeout(self.timeout_s)
        self.sock = sock
        self._rx.clear()

    def close(self) -> None:
        self._rx.clear()
        if self.sock is not None:
            try:
                self.sock.close()
            except OSError:
                pass
            finally:
                self.sock = None

    def is_open(self) -> bool:
        return self.sock is not None

    def write(self, data: bytes) -> int:
        if self.sock is None:
            raise TransportIOError("write while transport not open")

        try:
            self.sock.sendall(data)
        except OSError as e:
            # socket stays open; only a remote close ends the connection
            raise TransportIOError(f"TCP send failed: {e}") from None
        return len(data)

    def read_line(self, timeout_s: float) -> str:
        if self.sock is None:
            raise TransportIOError("read while transport not open")

        deadline = time.monotonic() + max(0.0, timeout_s)
        while True:
            line = self._split_line(self._rx)
            if line is not None:
                return self._decode(line)

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break

            try:
                ready, _, _ = select.select([self.sock], [], [], min(self.poll_interval_s, remaining))
                if not ready:
                    continue
                chunk = self.sock.recv(RECV_CHUNK)
            except socket.timeout:
                continue
            except OSError as e:
                self._rx.clear()
                raise TransportIOError(f"TCP receive failed: {e}") from None

            if not chunk:
                self.close()
                raise TransportClosedError(
                    f"TCP connection closed by remote host {self.host}:{self.port}"
                )
            self._rx.extend(chunk)

        # timeout reached -> return whatever is collected
        partial = bytes(self._rx)
        self._rx.clear()
        return self._decode(partial)
