"""Human-readable change notifications."""

from __future__ import annotations

import sys
from datetime import datetime
from enum import IntEnum
from typing import Iterable, Optional, TextIO

from portwatch.monitor import Change


class Level(IntEnum):
    """Verbosity of alert output."""

    INFO = 0
    WARN = 1


def _rfc3339_now() -> str:
    stamp = datetime.now().astimezone().isoformat(timespec="seconds")
    return stamp[:-6] + "Z" if stamp.endswith("+00:00") else stamp


class Alerter:
    """Writes change notifications to a text stream."""

    def __init__(self, out: Optional[TextIO] = None, level: Level = Level.INFO) -> None:
        self.out = out if out is not None else sys.stdout
        self.level = level

    def notify(self, change: Change) -> None:
        """Write one line describing ``change``."""
        if change.opened:
            action, symbol = "OPENED", "+"
        else:
            action, symbol = "CLOSED", "-"
        address = change.port.address or str(change.port)
        self.out.write(f"[{_rfc3339_now()}] [{symbol}] port {address} {action}\n")

    def watch(self, changes: Iterable[Change]) -> None:
        """Notify for every change until the input is exhausted."""
        for change in changes:
            self.notify(change)