# psuctl/cli/args.py
from __future__ import annotations

import argparse
from typing import Any, Dict, Optional


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="psuctl",
        description="Control a programmable DC power supply over TCP or serial.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("profiles", help="List built-in device profiles.")

    common = argparse.ArgumentParser(add_help=False)
    conn = common.add_argument_group("connection")
    conn.add_argument("--config", default=None, help="YAML file with a 'connection' section.")
    conn.add_argument("--host", default=None, help="Instrument IP address / hostname (network).")
    conn.add_argument("--port", type=int, default=None, help="TCP port (default 8003).")
    conn.add_argument("--serial", dest="serial_port", default=None, help="Serial device, e.g. /dev/ttyUSB0.")
    conn.add_argument("--baud", dest="baudrate", type=int, default=None, help="Serial baud rate (default 9600).")
    conn.add_argument("--timeout", dest="timeout_s", type=float, default=None, help="Response timeout in seconds.")

    out = common.add_argument_group("logging")
    out.add_argument("-v", "--verbose", action="store_true", help="Log protocol traffic to stderr.")
    out.add_argument("--log-file", default=None, help="Append application log to this file.")
    out.add_argument("--trace", default=None, help="Append command/response events (JSON lines) to this file.")

    sub.add_parser("idn", parents=[common], help="Print the identification string.")
    sub.add_parser("status", parents=[common], help="Print setpoints, measurements and fault flags.")
    sub.add_parser("measure", parents=[common], help="Print measured voltage, current and power.")
    sub.add_parser("error", parents=[common], help="Print the head of the device error queue.")

    p_set = sub.add_parser("set", parents=[common], help="Program setpoints (output is switched off on exit).")
    p_set.add_argument("--voltage", type=float, default=None)
    p_set.add_argument("--current", type=float, default=None)
    p_set.add_argument("--ramp-rate", type=float, default=None, help="Ramp voltage at this rate (V/s).")
    p_set.add_argument("--max-voltage", type=float, default=None, help="Client-side voltage ceiling.")
    p_set.add_argument("--max-current", type=float, default=None, help="Client-side current ceiling.")
    p_set.add_argument("--output", action="store_true", help="Enable the output for --hold seconds (required); it is switched off on exit.")
    p_set.add_argument("--hold", type=float, default=0.0, help="Seconds to keep the session open, printing readings.")

    p_raw = sub.add_parser("raw", parents=[common], help="Send a raw command line.")
    p_raw.add_argument("text")
    p_raw.add_argument("--query", action="store_true", help="Read and print one response line.")

    return parser


def connection_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Connection-related flags that were actually given on the command line."""
    names = ("host", "port", "serial_port", "baudrate", "timeout_s")
    return {n: getattr(args, n) for n in names if getattr(args, n, None) is not None}


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
