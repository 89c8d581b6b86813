"""How often each port appears in scan results."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional, TextIO

from portwatch.ports import Port

_STAMP = "%Y-%m-%d %H:%M:%S"


def _key(port: Port) -> str:
    return f"{port.protocol}:{port.address}"


@dataclass(frozen=True)
class FrequencyEntry:
    """How many scans a port has appeared in, and when."""

    port: Port
    seen_count: int
    first_seen: datetime
    last_seen: datetime


class FrequencyTracker:
    """Counts scan appearances per port."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, FrequencyEntry] = {}

    def record(self, port: Port, at: Optional[datetime] = None) -> None:
        """Count one appearance of ``port`` at ``at`` (default: now)."""
        at = at if at is not None else datetime.now(timezone.utc)
        key = _key(port)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._entries[key] = FrequencyEntry(port=port, seen_count=1, first_seen=at, last_seen=at)
            else:
                self._entries[key] = replace(entry, seen_count=entry.seen_count + 1, last_seen=at)

    def top(self, n: int = 0) -> list[FrequencyEntry]:
        """Return the ``n`` most frequently seen ports; all of them if ``n`` <= 0."""
        with self._lock:
            ranked = sorted(self._entries.values(), key=lambda e: -e.seen_count)
        if 0 < n < len(ranked):
            return ranked[:n]
        return ranked

    def reset(self) -> None:
        """Forget all recorded data."""
        with self._lock:
            self._entries.clear()


def frequency_pipeline(
    tracker: FrequencyTracker,
    samples: Iterable[Iterable[Port]],
    stop: Optional[threading.Event] = None,
) -> Iterator[list[Port]]:
    """Record every port of each sample in ``tracker`` and yield the sample on."""
    for sample in samples:
        if stop is not None and stop.is_set():
            return
        ports = list(sample)
        now = datetime.now(timezone.utc)
        for port in ports:
            tracker.record(port, now)
        yield ports


def _write_table(out: TextIO, rows: list[list[str]], padding: int = 2) -> None:
    columns = len(rows[0]) - 1
    widths = [max(len(row[i]) for row in rows) + padding for i in range(columns)]
    for row in rows:
        cells = "".join(cell.ljust(width) for cell, width in zip(row, widths))
        out.write(cells + row[-1] + "\n")


def print_top(out: TextIO, tracker: FrequencyTracker, n: int) -> None:
    """Write the top ``n`` entries as an aligned table."""
    rows = [["PROTO", "ADDR", "COUNT", "FIRST SEEN", "LAST SEEN"]]
    rows.extend(
        [
            e.port.protocol,
            e.port.address,
            str(e.seen_count),
            e.first_seen.strftime(_STAMP),
            e.last_seen.strftime(_STAMP),
        ]
        for e in tracker.top(n)
    )
    _write_table(out, rows)


def summary(tracker: FrequencyTracker) -> str:
    """Return a one-line description of the most frequently seen port."""
    top = tracker.top(1)
    if not top:
        return "no frequency data"
    e = top[0]
    return f"most frequent: {e.port.protocol} {e.port.address} ({e.seen_count} scans)"