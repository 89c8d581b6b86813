"""Counting open ports by protocol."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterable, Optional

from portwatch.ports import Port


@dataclass(frozen=True)
class CountSnapshot:
    """Counts for one set of ports."""

    total: int = 0
    tcp: int = 0
    udp: int = 0


class Counter:
    """Tracks the port counts of the latest scan."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = CountSnapshot()

    def record(self, ports: Optional[Iterable[Port]]) -> CountSnapshot:
        """Count the given ports and remember the result."""
        ports = list(ports or ())
        snap = CountSnapshot(
            total=len(ports),
            tcp=sum(1 for p in ports if p.protocol == "tcp"),
            udp=sum(1 for p in ports if p.protocol == "udp"),
        )
        with self._lock:
            self._last = snap
        return snap

    def last(self) -> CountSnapshot:
        """Return the most recently recorded snapshot."""
        with self._lock:
            return self._last

    def summary(self) -> str:
        """Return a human-readable summary of the last snapshot."""
        s = self.last()
        return f"open ports: total={s.total} tcp={s.tcp} udp={s.udp}"