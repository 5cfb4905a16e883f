from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any

from psuctl.core.errors import ConfigurationError

#: Line delimiter of the ASCII command protocol.
NEWLINE = b"\n"

#: Default granularity of the read_line() polling loop.
DEFAULT_POLL_INTERVAL_S = 0.02


class Transport(ABC):
    """
    Abstract line-oriented transport interface (TCP, serial).

    Contract:
      - open()/close() manage the underlying connection. close() is idempotent
        and never raises.
      - write(data) returns the number of bytes written.
      - read_line(timeout_s) collects bytes until a newline or until timeout_s
        elapses, polling in small increments. On timeout it returns whatever
        was collected, possibly "". Bytes following the newline are kept for
        the next call.
    """

    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def is_open(self) -> bool: ...

    @abstractmethod
    def write(self, data: bytes) -> int: ...

    @abstractmethod
    def read_line(self, timeout_s: float) -> str: ...

    def _validate_timing(self) -> None:
        """timeout_s and poll_interval_s must be finite and positive."""
        for name in ("timeout_s", "poll_interval_s"):
            value = getattr(self, name)
            if (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or not math.isfinite(value)
                or value <= 0
            ):
                raise ConfigurationError(
                    f"Invalid {name} {value!r}.",
                    hint=f"{name} must be a positive number of seconds.",
                    details={name: value},
                )

    @staticmethod
    def _split_line(buf: bytearray) -> bytes | None:
        """Pop one newline-terminated line off buf, or None if incomplete."""
        idx = buf.find(NEWLINE)
        if idx < 0:
            return None
        line = bytes(buf[: idx + 1])
        del buf[: idx + 1]
        return line

    @staticmethod
    def _decode(raw: bytes) -> str:
        return raw.decode("ascii", errors="replace")

    def __enter__(self) -> "Transport":
        self.open()
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()
