from __future__ import annotations

import json
from pathlib import Path

import pytest

import psuctl.cli.commands as commands_mod
import psuctl.runtime.g30 as g30_mod
from psuctl.cli.args import connection_overrides, parse_args
from psuctl.cli.main import main
from psuctl.model.connection import ConnectionKind
from psuctl.runtime.g30 import TdkLambdaG30


class ScriptedTransport:
    def __init__(self, responses):
        self.responses = responses
        self.writes: list[str] = []
        self.opened = False
        self._pending: list[str] = []

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.opened = False

    def is_open(self) -> bool:
        return self.opened

    def write(self, data: bytes) -> int:
        line = data.decode("ascii").strip()
        self.writes.append(line)
        if line.endswith("?"):
            self._pending.append(self.responses.get(line, ""))
        return len(data)

    def read_line(self, timeout_s: float) -> str:
        return self._pending.pop(0) if self._pending else ""


@pytest.fixture
def device(monkeypatch):
    """Route the CLI to a scripted G30; returns (transport, captured config)."""
    monkeypatch.setattr(g30_mod.time, "sleep", lambda s: None)
    t = ScriptedTransport(
        {
            "*IDN?": "TDK-LAMBDA,G30-60-56,SN1234,1.02\n",
            "VOLT?": "12.000\n",
            "CURR?": "2.000\n",
            "MEAS:VOLT?": "12.000\n",
            "MEAS:CURR?": "1.500\n",
            "SYST:ERR?": '0,"No error"\n',
        }
    )
    seen = {}

    def fake_create(vendor, model, config, **kwargs):
        seen["config"] = config
        return TdkLambdaG30(config, transport=t, **kwargs)

    monkeypatch.setattr(commands_mod, "create_power_supply", fake_create)
    return t, seen


def test_parse_args_connection_overrides():
    args = parse_args(["idn", "--serial", "/dev/ttyUSB0", "--baud", "19200"])

    assert args.cmd == "idn"
    assert connection_overrides(args) == {"serial_port": "/dev/ttyUSB0", "baudrate": 19200}


def test_profiles_lists_builtin_g30(capsys):
    assert main(["profiles"]) == 0

    out = capsys.readouterr().out
    assert "g30: tdk-lambda G30" in out
    assert "30 V / 56 A / 1680 W" in out


def test_missing_endpoint_is_reported_with_hint(capsys):
    assert main(["idn"]) == 1

    out = capsys.readouterr().out
    assert out.startswith("ERROR: No endpoint configured.")
    assert "Hint:" in out


def test_bad_config_file_is_reported(tmp_path: Path, capsys):
    assert main(["idn", "--config", str(tmp_path / "missing.yml")]) == 1
    assert "Config file not found" in capsys.readouterr().out


def test_idn_prints_identification(device, capsys):
    t, seen = device

    assert main(["idn", "--host", "10.0.0.5", "--timeout", "0.5"]) == 0

    assert capsys.readouterr().out.strip() == "TDK-LAMBDA,G30-60-56,SN1234,1.02"
    assert seen["config"].kind is ConnectionKind.NETWORK
    assert seen["config"].timeout_s == 0.5
    assert t.opened is False


def test_measure_prints_readings(device, capsys):
    assert main(["measure", "--host", "10.0.0.5"]) == 0

    out = capsys.readouterr().out
    assert "Voltage:   12.000 V" in out
    assert "Current:   1.500 A" in out
    assert "Power:     18.000 W" in out


def test_set_programs_setpoints_then_output_off(device, capsys):
    t, _ = device

    assert main(["set", "--host", "10.0.0.5", "--voltage", "12", "--current", "2", "--output", "--hold", "0.001"]) == 0

    after_handshake = t.writes[t.writes.index("*CLS") + 1:]
    assert after_handshake[:3] == ["CURR 2.000", "VOLT 12.000", "OUTP ON"]
    assert after_handshake[-1] == "OUTP OFF"
    assert "Setpoints: 12.000 V / 2.000 A" in capsys.readouterr().out


def test_set_over_limit_fails_without_writing_setpoint(device, capsys):
    t, _ = device

    assert main(["set", "--host", "10.0.0.5", "--max-voltage", "10", "--voltage", "12"]) == 1

    assert not any(w.startswith("VOLT ") for w in t.writes)
    assert "exceeds maximum limit" in capsys.readouterr().out


def test_error_prints_queue_head(device, capsys):
    assert main(["error", "--host", "10.0.0.5"]) == 0
    assert capsys.readouterr().out.strip() == "0: No error"


def test_raw_query_with_trace_file(device, tmp_path: Path, capsys):
    trace = tmp_path / "trace" / "cmds.jsonl"

    assert main(["raw", "VOLT?", "--query", "--host", "10.0.0.5", "--trace", str(trace)]) == 0
    assert capsys.readouterr().out.strip() == "12.000"

    events = [json.loads(line) for line in trace.read_text(encoding="utf-8").splitlines()]
    recv = [e for e in events if e["kind"] == "recv" and e["name"] == "VOLT?"]
    assert recv and recv[0]["payload"]["response"] == "12.000"


def test_set_output_without_hold_is_rejected_before_connecting(device, capsys):
    t, seen = device

    assert main(["set", "--host", "10.0.0.5", "--voltage", "12", "--output"]) == 1

    out = capsys.readouterr().out
    assert "--output needs --hold" in out
    assert "Hint:" in out
    assert t.writes == []
    assert "config" not in seen
