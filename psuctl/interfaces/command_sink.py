# psuctl/interfaces/command_sink.py
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Literal, Mapping, Optional, Protocol

EventKind = Literal["send", "recv"]


@dataclass(frozen=True, slots=True)
class CommandEvent:
    """
    One line on the wire, as seen by the controller.

    name is the command line without terminator ("VOLT 12.500", "MEAS:CURR?").
    A query produces a "send" and a "recv" event sharing request_id; the recv
    payload holds the trimmed response and the round-trip time in ms.
    """
    name: str
    kind: EventKind
    payload: Optional[Mapping[str, Any]] = None
    request_id: Optional[str] = None
    ts_utc: Optional[str] = None

    def stamped(self) -> "CommandEvent":
        """Copy with ts_utc set to now, unless already stamped."""
        if self.ts_utc is not None:
            return self
        return replace(self, ts_utc=datetime.now(timezone.utc).isoformat())


class CommandSink(Protocol):
    """Receives command events synchronously, in the caller's thread."""

    def on_command(self, event: CommandEvent) -> None: ...
    def close(self) -> None: ...
