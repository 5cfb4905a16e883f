# psuctl/cli/commands.py
from __future__ import annotations

import argparse
import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from psuctl.app.config import connection_config_from_mapping, load_connection_config
from psuctl.cli.args import connection_overrides
from psuctl.core.errors import InvalidArgumentError
from psuctl.core.recording.command import CommandTraceLogger
from psuctl.model.connection import ConnectionConfig
from psuctl.model.device import Vendor
from psuctl.model.loader import DeviceProfileLoader
from psuctl.runtime.factory import create_power_supply
from psuctl.runtime.g30 import TdkLambdaG30

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# ---------------- Logging ----------------

def configure_logging(*, verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    Attach handlers to the root logger (idempotent).
    Kept in CLI (presentation-layer concern); the library never adds handlers.
    """
    root = logging.getLogger()

    if verbose and not any(getattr(h, "_psuctl_console", False) for h in root.handlers):
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(logging.DEBUG)
        sh.setFormatter(logging.Formatter(LOG_FORMAT))
        sh._psuctl_console = True  # type: ignore[attr-defined]
        root.addHandler(sh)
        root.setLevel(logging.DEBUG)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        target = str(path.resolve())
        for h in root.handlers:
            if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target:
                return

        fh = logging.FileHandler(path, encoding="utf-8", delay=True)
        fh.setLevel(logging.INFO)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(fh)

        if root.level > logging.INFO or root.level == logging.NOTSET:
            root.setLevel(logging.INFO)


# ---------------- Session helpers ----------------

def resolve_config(args: argparse.Namespace) -> ConnectionConfig:
    overrides = connection_overrides(args)
    if getattr(args, "config", None):
        return load_connection_config(args.config, overrides)
    return connection_config_from_mapping(overrides)


@contextmanager
def open_session(args: argparse.Namespace) -> Iterator[TdkLambdaG30]:
    configure_logging(verbose=args.verbose, log_file=args.log_file)
    config = resolve_config(args)

    sink = None
    if args.trace:
        sink = CommandTraceLogger(logger=logging.getLogger("psuctl.trace"), file_path=Path(args.trace))

    psu = create_power_supply(Vendor.TDK_LAMBDA, "G30", config, cmd_sink=sink)
    try:
        psu.connect()
        yield psu
    finally:
        psu.disconnect()
        if sink is not None:
            sink.close()


def print_readings(psu: TdkLambdaG30) -> None:
    v = psu.measure_voltage()
    i = psu.measure_current()
    print(f"Voltage:   {v:.3f} V")
    print(f"Current:   {i:.3f} A")
    print(f"Power:     {v * i:.3f} W")


# ---------------- Commands ----------------

def cmd_profiles() -> int:
    loader = DeviceProfileLoader().load_all()
    print("Device profiles:\n")
    for key in sorted(loader.profiles):
        p = loader.profiles[key]
        c = p.capabilities
        print(f"{key}: {p.vendor.value} {p.model}")
        print(f"  ratings: {c.max_voltage:g} V / {c.max_current:g} A / {c.max_power:g} W, channels={c.channels}")
        print(f"  defaults: tcp_port={p.default_tcp_port} baudrate={p.default_baudrate}")
    return 0


def cmd_idn(args: argparse.Namespace) -> int:
    with open_session(args) as psu:
        print(psu.get_identification())
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    with open_session(args) as psu:
        st = psu.get_status()
        info = psu.info()
        print(f"Device:    {info.identification}")
        print(f"Endpoint:  {info.endpoint}")
        print(f"Output:    {'ON' if st.output_enabled else 'off'}")
        print(f"Setpoints: {psu.get_voltage():.3f} V / {psu.get_current():.3f} A")
        print(f"OVP level: {psu.get_over_voltage_protection():.3f} V")
        print_readings(psu)
        faults = [
            name
            for name, active in (
                ("OVP", st.over_voltage_protection),
                ("OCP", st.over_current_protection),
                ("OTP", st.over_temperature),
            )
            if active
        ]
        print(f"Faults:    {', '.join(faults) if faults else '(none)'}")
    return 0


def cmd_measure(args: argparse.Namespace) -> int:
    with open_session(args) as psu:
        print_readings(psu)
    return 0


def cmd_error(args: argparse.Namespace) -> int:
    with open_session(args) as psu:
        code, message = psu.read_error()
        print(f"{code}: {message}")
    return 0


def cmd_set(args: argparse.Namespace) -> int:
    if args.output and not args.hold > 0:
        raise InvalidArgumentError(
            "--output needs --hold: the output is switched off when the session closes.",
            hint="Pass e.g. --hold 60 to keep the output on for a minute.",
        )

    with open_session(args) as psu:
        if args.max_voltage is not None:
            psu.max_voltage = args.max_voltage
        if args.max_current is not None:
            psu.max_current = args.max_current

        if args.current is not None:
            psu.set_current(args.current)
        if args.voltage is not None:
            if args.ramp_rate is not None:
                psu.set_voltage_with_ramp(args.voltage, args.ramp_rate)
            else:
                psu.set_voltage(args.voltage)

        if args.output:
            psu.enable_output(True)

        deadline = time.monotonic() + max(0.0, args.hold)
        while time.monotonic() < deadline:
            print_readings(psu)
            time.sleep(min(1.0, max(0.0, deadline - time.monotonic())))

        print(f"Setpoints: {psu.get_voltage():.3f} V / {psu.get_current():.3f} A")
    return 0


def cmd_raw(args: argparse.Namespace) -> int:
    with open_session(args) as psu:
        if args.query:
            print(psu.send_query(args.text))
        else:
            psu.send_command(args.text)
    return 0
