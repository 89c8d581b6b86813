"""Ports that closed again shortly after opening."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, TextIO, Union

from portwatch.ports import Port

Duration = Union[float, timedelta]


def _as_timedelta(value: Duration) -> timedelta:
    return value if isinstance(value, timedelta) else timedelta(seconds=value)


def _format_duration(d: timedelta) -> str:
    """Render ``d`` rounded to milliseconds, e.g. ``500ms``, ``2.5s``, ``1m3s``."""
    micros = d // timedelta(microseconds=1)
    sign = "-" if micros < 0 else ""
    ms = (abs(micros) + 500) // 1000
    if ms == 0:
        return "0s"
    if ms < 1000:
        return f"{sign}{ms}ms"
    hours, rest = divmod(ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    whole, frac = divmod(rest, 1000)
    seconds = f"{whole}.{frac:03d}".rstrip("0") if frac else str(whole)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def _clock(moment: datetime) -> str:
    return f"{moment:%H:%M:%S}.{moment.microsecond // 1000:03d}"


@dataclass(frozen=True)
class EvictionEntry:
    """A port that was open for less than the minimum uptime."""

    port: Port
    opened_at: datetime
    closed_at: datetime
    duration: timedelta


class EvictionTracker:
    """Records ports closed before ``min_up`` had elapsed."""

    def __init__(self, min_up: Duration) -> None:
        self.min_up = _as_timedelta(min_up)
        self._lock = threading.Lock()
        self._evictions: list[EvictionEntry] = []
        self._open_since: dict[Port, datetime] = {}

    def opened(self, port: Port, at: datetime) -> None:
        """Note when ``port`` was seen open; the time is forgotten once it closes."""
        with self._lock:
            self._open_since[port] = at

    def closed(self, port: Port, opened_at: datetime, closed_at: datetime) -> bool:
        """Record the port if it closed too soon; return True if it did."""
        with self._lock:
            self._open_since.pop(port, None)
        duration = max(closed_at - opened_at, timedelta(0))
        if duration >= self.min_up:
            return False
        entry = EvictionEntry(port=port, opened_at=opened_at, closed_at=closed_at, duration=duration)
        with self._lock:
            self._evictions.append(entry)
        return True

    def all(self) -> list[EvictionEntry]:
        """Return a copy of all recorded evictions."""
        with self._lock:
            return list(self._evictions)

    def reset(self) -> None:
        """Forget every recorded eviction."""
        with self._lock:
            self._evictions.clear()


def print_evictions(out: TextIO, entries: Iterable[EvictionEntry]) -> None:
    """Write an eviction table to ``out``."""
    entries = list(entries)
    if not entries:
        out.write("no evictions recorded\n")
        return
    out.write(f"{'PORT':<8} {'PROTO':<6} {'OPENED':<20} {'CLOSED':<20} DURATION\n")
    out.write("-" * 72 + "\n")
    for e in entries:
        out.write(
            f"{e.port.number:<8} {e.port.protocol:<6} {_clock(e.opened_at):<20} "
            f"{_clock(e.closed_at):<20} {_format_duration(e.duration)}\n"
        )


def summary(entries: Iterable[EvictionEntry]) -> str:
    """Return a one-line summary of the evictions."""
    count = len(list(entries))
    if count == 0:
        return "evictions: none"
    return f"evictions: {count} short-lived port(s) detected"