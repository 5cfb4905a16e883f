# psuctl/runtime/g30.py
from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable, Optional

from psuctl.core.errors import (
    ConfigurationError,
    DeviceConnectError,
    InvalidArgumentError,
    LimitExceededError,
    NotConnectedError,
    OperationCancelledError,
)
from psuctl.interfaces.command_sink import CommandEvent, CommandSink
from psuctl.model.connection import DEFAULT_TIMEOUT_S, ConnectionConfig
from psuctl.model.device import (
    DeviceProfile,
    PowerSupplyCapabilities,
    PowerSupplyStatus,
    Timing,
    Vendor,
)
from psuctl.model.loader import load_profile
from psuctl.protocol import scpi
from psuctl.protocol.codec import (
    decode_bool,
    decode_error_entry,
    decode_float,
    decode_status_mask,
    decode_text,
    encode_command,
    encode_query,
    is_known_bool_token,
    terminate,
)
from psuctl.runtime.interface import PowerSupply
from psuctl.runtime.state import SessionInfo, SessionState
from psuctl.transport.base import Transport
from psuctl.transport.factory import TransportFactory


class TdkLambdaG30(PowerSupply):
    """
    TDK-Lambda G30 single-channel supply over TCP or serial.

    One instance owns one transport and allows one exchange at a time; it is
    not thread-safe. Setpoints are checked against the client-side ceilings
    (max_voltage / max_current) before anything is written.
    """

    PROFILE_KEY = "g30"

    def __init__(
        self,
        config: Optional[ConnectionConfig] = None,
        *,
        transport: Optional[Transport] = None,
        profile: Optional[DeviceProfile] = None,
        timing: Optional[Timing] = None,
        logger: Optional[logging.Logger] = None,
        cmd_sink: Optional[CommandSink] = None,
    ):
        if config is None and transport is None:
            raise ConfigurationError(
                "A ConnectionConfig or a Transport is required.",
                hint="Use ConnectionConfig.network(host) or ConnectionConfig.serial(port).",
            )

        self._config = config
        self._profile = profile or load_profile(self.PROFILE_KEY)
        self._timing = timing or self._profile.timing
        self._log = logger or logging.getLogger(__name__)
        self._cmd_sink = cmd_sink
        self._timeout_s = config.timeout_s if config is not None else DEFAULT_TIMEOUT_S

        self._transport: Transport = transport if transport is not None else TransportFactory().create(config)

        self._state = SessionState.DISCONNECTED
        self._output_enabled = False
        self._identification: Optional[str] = None
        self._max_voltage = self._profile.capabilities.max_voltage
        self._max_current = self._profile.capabilities.max_current
        self._seq = 0

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def endpoint(self) -> str:
        if self._config is not None:
            return self._config.endpoint
        return type(self._transport).__name__

    def connect(self) -> None:
        if self._state is SessionState.CONNECTED:
            return

        self._state = SessionState.CONNECTING
        self._log.info("CONNECT_START endpoint=%s", self.endpoint)

        try:
            self._transport.open()
            self._sleep(self._timing.connect_settle_s)

            idn = self.get_identification()
            if not idn:
                raise DeviceConnectError(
                    "Device did not answer the identification query.",
                    hint="Check the endpoint, baud rate and that the instrument is in remote mode.",
                    details={"endpoint": self.endpoint},
                )

            self._identification = idn
            self._state = SessionState.CONNECTED
            self.reset()
            self.clear_protection()
        except BaseException as e:
            # includes KeyboardInterrupt during the settle/IDN wait
            self._log.warning("CONNECT_FAILED endpoint=%s err=%r", self.endpoint, e)
            self._transport.close()
            self._state = SessionState.DISCONNECTED
            self._identification = None
            raise

        self._log.info("CONNECT_OK endpoint=%s idn=%s", self.endpoint, self._identification)

    def disconnect(self) -> None:
        if self._state is SessionState.CONNECTED and self._transport.is_open():
            # best-effort safety: never leave the output live behind a dropped session
            try:
                self._write(encode_command(scpi.OUTPUT, scpi.OUTPUT_OFF))
                self._output_enabled = False
            except Exception as e:
                self._log.debug("DISCONNECT_OUTPUT_OFF_FAILED err=%s", e)

        self._transport.close()
        if self._state is not SessionState.DISCONNECTED:
            self._log.info("DISCONNECTED endpoint=%s", self.endpoint)
        self._state = SessionState.DISCONNECTED

    def is_connected(self) -> bool:
        return self._state is SessionState.CONNECTED and self._transport.is_open()

    def info(self) -> SessionInfo:
        return SessionInfo(
            state=self._state,
            endpoint=self.endpoint,
            transport_open=self._transport.is_open(),
            output_enabled=self._output_enabled,
            max_voltage=self._max_voltage,
            max_current=self._max_current,
            identification=self._identification,
        )

    def __del__(self) -> None:
        if getattr(self, "_transport", None) is None:
            return
        try:
            self.disconnect()
        except Exception:
            pass

    # ------------------------------------------------------------------
    # Safety ceilings
    # ------------------------------------------------------------------
    @property
    def max_voltage(self) -> float:
        return self._max_voltage

    @max_voltage.setter
    def max_voltage(self, value: float) -> None:
        self._max_voltage = self._positive("max_voltage", value)

    @property
    def max_current(self) -> float:
        return self._max_current

    @max_current.setter
    def max_current(self, value: float) -> None:
        self._max_current = self._positive("max_current", value)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    @property
    def output_enabled(self) -> bool:
        """Locally cached output state (see is_output_enabled() for the device's)."""
        return self._output_enabled

    def enable_output(self, enable: bool) -> None:
        self._require_connected()
        self._write(encode_command(scpi.OUTPUT, scpi.OUTPUT_ON if enable else scpi.OUTPUT_OFF))
        self._output_enabled = bool(enable)

    def is_output_enabled(self) -> bool:
        self._require_connected()
        raw = self._query(scpi.OUTPUT)
        if not is_known_bool_token(raw):
            self._log.warning("UNRECOGNIZED_OUTPUT_STATE response=%r (treated as off)", raw)
        return decode_bool(raw)

    def reset(self) -> None:
        self._require_connected()
        self._write(encode_command(scpi.RESET))
        self._sleep(self._timing.reset_settle_s)
        self._output_enabled = False

    def clear_protection(self) -> None:
        self._require_connected()
        self._write(encode_command(scpi.CLEAR_STATUS))
        self._sleep(self._timing.clear_settle_s)

    # ------------------------------------------------------------------
    # Voltage
    # ------------------------------------------------------------------
    def set_voltage(self, voltage: float) -> None:
        self._validate_setpoint("Voltage", voltage, self._max_voltage, "V")
        self._require_connected()
        self._write(encode_command(scpi.VOLTAGE, voltage))

    def get_voltage(self) -> float:
        self._require_connected()
        return decode_float(self._query(scpi.VOLTAGE))

    def measure_voltage(self) -> float:
        self._require_connected()
        return decode_float(self._query(scpi.MEAS_VOLTAGE))

    def set_voltage_with_ramp(
        self,
        voltage: float,
        rate_v_per_s: float,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """
        Step the voltage setpoint towards `voltage` at `rate_v_per_s`.

        Ten steps per (unit / rate), one step every Timing.ramp_step_s, then a
        final exact set. Blocks the calling thread for the whole ramp.
        """
        self._validate_setpoint("Voltage", voltage, self._max_voltage, "V")
        self._ramp("voltage", voltage, rate_v_per_s, self.get_voltage, self.set_voltage, cancel)

    # ------------------------------------------------------------------
    # Current
    # ------------------------------------------------------------------
    def set_current(self, current: float) -> None:
        self._validate_setpoint("Current", current, self._max_current, "A")
        self._require_connected()
        self._write(encode_command(scpi.CURRENT, current))

    def get_current(self) -> float:
        self._require_connected()
        return decode_float(self._query(scpi.CURRENT))

    def measure_current(self) -> float:
        self._require_connected()
        return decode_float(self._query(scpi.MEAS_CURRENT))

    def set_current_with_ramp(
        self,
        current: float,
        rate_a_per_s: float,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        self._validate_setpoint("Current", current, self._max_current, "A")
        self._ramp("current", current, rate_a_per_s, self.get_current, self.set_current, cancel)

    # ------------------------------------------------------------------
    # Power / protection
    # ------------------------------------------------------------------
    def measure_power(self) -> float:
        # two separate queries: not atomic with respect to a changing load
        self._require_connected()
        voltage = self.measure_voltage()
        current = self.measure_current()
        return voltage * current

    def set_over_voltage_protection(self, voltage: float) -> None:
        if not self._is_number(voltage) or voltage < 0:
            raise InvalidArgumentError(
                f"OVP level must be a non-negative number, got {voltage!r}.",
                details={"voltage": voltage},
            )
        self._require_connected()
        self._write(encode_command(scpi.OVP, voltage))

    def get_over_voltage_protection(self) -> float:
        self._require_connected()
        return decode_float(self._query(scpi.OVP))

    # ------------------------------------------------------------------
    # Status / information
    # ------------------------------------------------------------------
    def get_identification(self) -> str:
        if self._state is SessionState.DISCONNECTED or not self._transport.is_open():
            raise NotConnectedError("Not connected to device.", hint="Call connect() first.")
        return decode_text(self._query(scpi.IDN))

    def get_status(self) -> PowerSupplyStatus:
        self._require_connected()
        output_enabled = self.is_output_enabled()
        flags = decode_status_mask(self._query(scpi.STATUS_QUESTIONABLE))
        return PowerSupplyStatus(
            output_enabled=output_enabled,
            over_voltage_protection=flags.over_voltage,
            over_current_protection=flags.over_current,
            over_temperature=flags.over_temperature,
        )

    def check_error(self) -> str:
        """Head of the device error queue as returned (e.g. '0,"No error"')."""
        self._require_connected()
        return decode_text(self._query(scpi.SYSTEM_ERROR))

    def read_error(self) -> tuple[int, str]:
        self._require_connected()
        return decode_error_entry(self._query(scpi.SYSTEM_ERROR))

    def get_capabilities(self) -> PowerSupplyCapabilities:
        return self._profile.capabilities

    @property
    def vendor(self) -> Vendor:
        return self._profile.vendor

    @property
    def model(self) -> str:
        return self._profile.model

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------
    def send_command(self, command: str) -> None:
        self._require_connected()
        self._write(self._encode_raw(command))

    def send_query(self, query: str) -> str:
        self._require_connected()
        return decode_text(self._exchange(self._encode_raw(query)))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _ramp(
        self,
        name: str,
        target: float,
        rate: float,
        read: Callable[[], float],
        write: Callable[[float], None],
        cancel: Optional[threading.Event],
    ) -> None:
        if not self._is_number(rate) or rate <= 0:
            raise InvalidArgumentError(
                f"Ramp rate must be positive, got {rate!r}.",
                details={"rate": rate},
            )
        self._require_connected()

        start = read()
        delta = target - start
        steps = abs(delta) / rate * 10
        lo, hi = min(start, target), max(start, target)

        self._log.info(
            "RAMP_START %s from=%.3f to=%.3f rate=%.3f steps=%d",
            name, start, target, rate, int(steps),
        )

        for i in range(1, int(steps) + 1):
            self._check_cancel(cancel, name)
            write(min(hi, max(lo, start + delta * i / steps)))
            self._sleep(self._timing.ramp_step_s)

        self._check_cancel(cancel, name)
        write(target)
        self._log.info("RAMP_DONE %s value=%.3f", name, target)

    def _check_cancel(self, cancel: Optional[threading.Event], name: str) -> None:
        if cancel is not None and cancel.is_set():
            self._log.info("RAMP_CANCELLED %s", name)
            raise OperationCancelledError(f"{name.capitalize()} ramp cancelled.")

    def _validate_setpoint(self, what: str, value: float, ceiling: float, unit: str) -> None:
        if not self._is_number(value):
            raise InvalidArgumentError(f"{what} must be a number, got {value!r}.")
        if value < 0:
            raise LimitExceededError(
                f"{what} cannot be negative ({value}{unit}).",
                details={"value": value, "min": 0.0},
            )
        if value > ceiling:
            raise LimitExceededError(
                f"{what} {value}{unit} exceeds maximum limit of {ceiling}{unit}.",
                hint=f"Raise max_{what.lower()} if the load allows it.",
                details={"value": value, "max": ceiling},
            )

    def _require_connected(self) -> None:
        if not self.is_connected():
            raise NotConnectedError("Not connected to device.", hint="Call connect() first.")

    def _write(self, data: bytes) -> int:
        self._seq += 1
        line = data.decode("ascii").strip()
        self._log.debug("TX %r", line)
        self._emit(CommandEvent(name=line, kind="send", request_id=str(self._seq)))

        n = self._transport.write(data)
        self._sleep(self._timing.command_delay_s)
        return n

    def _query(self, verb: str) -> str:
        return self._exchange(encode_query(verb))

    def _exchange(self, data: bytes) -> str:
        t0 = time.perf_counter()
        self._write(data)
        raw = self._transport.read_line(self._timeout_s)
        rtt_ms = (time.perf_counter() - t0) * 1000.0

        self._log.debug("RX %r rtt_ms=%.1f", raw, rtt_ms)
        self._emit(
            CommandEvent(
                name=data.decode("ascii").strip(),
                kind="recv",
                request_id=str(self._seq),
                payload={"response": decode_text(raw), "rtt_ms": rtt_ms},
            )
        )
        return raw

    def _emit(self, event: CommandEvent) -> None:
        if self._cmd_sink is None:
            return
        try:
            self._cmd_sink.on_command(event.stamped())
        except Exception:
            self._log.exception("COMMAND_SINK_ERROR")

    @staticmethod
    def _encode_raw(text: str) -> bytes:
        if not text or not text.strip():
            raise InvalidArgumentError("Command text is empty.")
        try:
            return terminate(text).encode("ascii")
        except UnicodeEncodeError:
            raise InvalidArgumentError(f"Command must be ASCII: {text!r}") from None

    @staticmethod
    def _is_number(value: object) -> bool:
        return (
            isinstance(value, (int, float))
            and not isinstance(value, bool)
            and not math.isnan(value)
        )

    def _positive(self, name: str, value: float) -> float:
        if not self._is_number(value) or value <= 0:
            raise InvalidArgumentError(
                f"{name} must be positive, got {value!r}.",
                details={name: value},
            )
        return float(value)

    @staticmethod
    def _sleep(seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)
