# psuctl/runtime/state.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SessionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class SessionInfo:
    """
    Snapshot of the local session bookkeeping (no device I/O involved).
    """
    state: SessionState
    endpoint: str
    transport_open: bool
    output_enabled: bool
    max_voltage: float
    max_current: float
    identification: Optional[str] = None
