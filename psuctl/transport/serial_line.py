# psuctl/transport/serial_line.py
from __future__ import annotations

import time
from typing import Optional

import serial
from serial import SerialException
from serial.serialutil import SerialBase

from psuctl.core.errors import ConfigurationError

from .base import DEFAULT_POLL_INTERVAL_S, Transport
from .errors import TransportIOError, TransportOpenError


class SerialLineTransport(Transport):
    """
    RS-232 / USB-serial line transport implemented via pyserial.

    The port read timeout is the poll interval, so read_line() wakes up at
    least every poll_interval_s regardless of traffic.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 9600,
        bytesize: int = 8,
        parity: str = "N",
        stopbits: float = 1,
        timeout_s: float = 1.0,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    ):
        self.port = port
        self.baudrate = baudrate
        self.bytesize = bytesize
        self.parity = parity
        self.stopbits = stopbits
        self.timeout_s = timeout_s
        self.poll_interval_s = poll_interval_s
        self.ser: Optional[serial.Serial] = None
        self._rx = bytearray()

    def _validate(self) -> None:
        if not self.port:
            raise ConfigurationError(
                "Serial port path is empty.",
                hint="Pass e.g. /dev/ttyUSB0 or COM3.",
            )
        if self.baudrate not in SerialBase.BAUDRATES:
            raise ConfigurationError(
                f"Unsupported baud rate {self.baudrate!r}.",
                hint=f"Supported: {', '.join(str(b) for b in SerialBase.BAUDRATES)}",
                details={"port": self.port, "baudrate": self.baudrate},
            )
        if self.bytesize not in SerialBase.BYTESIZES:
            raise ConfigurationError(
                f"Unsupported byte size {self.bytesize!r}.",
                details={"port": self.port, "bytesize": self.bytesize},
            )
        if self.parity not in SerialBase.PARITIES:
            raise ConfigurationError(
                f"Unsupported parity {self.parity!r}.",
                hint="Use one of N, E, O, M, S.",
                details={"port": self.port, "parity": self.parity},
            )
        if self.stopbits not in SerialBase.STOPBITS:
            raise ConfigurationError(
                f"Unsupported stop bits {self.stopbits!r}.",
                details={"port": self.port, "stopbits": self.stopbits},
            )
        self._validate_timing()

    def open(self) -> None:
        if self.ser is not None:
            return
        self._validate()

        try:
            self.ser = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                bytesize=self.bytesize,
                parity=self.parity,
                stopbits=self.stopbits,
                timeout=self.poll_interval_s,
                write_timeout=self.timeout_s,
            )
            self.ser.reset_input_buffer()
            self.ser.reset_output_buffer()
        except (SerialException, OSError) as e:
            self.ser = None
            raise TransportOpenError(f"could not open serial port {self.port!r}: {e}") from None
        self._rx.clear()

    def close(self) -> None:
        self._rx.clear()
        if self.ser is not None:
            try:
                self.ser.close()
            except (SerialException, OSError):
                pass
            finally:
                self.ser = None

    def is_open(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def write(self, data: bytes) -> int:
        if self.ser is None:
            raise TransportIOError("write while transport not open")

        try:
            return self.ser.write(data)
        except (SerialException, OSError) as e:
            # port stays open; the caller decides whether to disconnect
            raise TransportIOError(f"serial write failed: {e}") from None

    def read_line(self, timeout_s: float) -> str:
        if self.ser is None:
            raise TransportIOError("read while transport not open")

        deadline = time.monotonic() + max(0.0, timeout_s)
        try:
            while True:
                line = self._split_line(self._rx)
                if line is not None:
                    return self._decode(line)
                if time.monotonic() >= deadline:
                    break
                # blocks for at most poll_interval_s (port timeout)
                chunk = self.ser.read(self.ser.in_waiting or 1)
                if chunk:
                    self._rx.extend(chunk)
        except (SerialException, OSError) as e:
            self._rx.clear()
            raise TransportIOError(f"serial read failed (device disconnected?): {e}") from None

        # timeout reached -> return whatever is collected
        partial = bytes(self._rx)
        self._rx.clear()
        return self._decode(partial)
