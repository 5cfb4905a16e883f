# psuctl/core/recording/command.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Optional

from psuctl.interfaces.command_sink import CommandEvent, CommandSink


@dataclass
class CommandTraceLogger(CommandSink):
    """
    CommandSink that logs each exchange and optionally appends it as one JSON
    line to file_path. Writes happen synchronously in the caller's thread.
    """
    logger: logging.Logger
    file_path: Optional[Path] = None

    def __post_init__(self) -> None:
        self._fh: Optional[IO[str]] = None
        if self.file_path is not None:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(self.file_path, "a", encoding="utf-8")

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def on_command(self, event: CommandEvent) -> None:
        event = event.stamped()

        out = {
            "name": event.name,
            "kind": event.kind,
            "request_id": event.request_id,
            "payload": dict(event.payload) if event.payload is not None else None,
            "ts_utc": event.ts_utc,
        }
        out = {k: v for k, v in out.items() if v is not None}

        self.logger.info("CMD %s %s %s", event.kind.upper(), event.name, out.get("payload", ""))

        if self._fh is not None:
            self._fh.write(json.dumps(out, ensure_ascii=False) + "\n")
            self._fh.flush()
