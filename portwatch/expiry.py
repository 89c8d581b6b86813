"""Ports that have not been seen within a time-to-live."""

from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Iterator, Optional, TextIO, Union

from portwatch.ports import Port

Duration = Union[float, timedelta]

_END = object()
_POLL = 0.05


def _as_timedelta(value: Duration) -> timedelta:
    return value if isinstance(value, timedelta) else timedelta(seconds=value)


def _key(port: Port) -> str:
    return f"{port.protocol}:{port}"


def _format_seconds(d: timedelta) -> str:
    """Render ``d`` rounded to whole seconds, e.g. ``5s`` or ``1h0m3s``."""
    micros = d // timedelta(microseconds=1)
    sign = "-" if micros < 0 else ""
    total = (abs(micros) + 500_000) // 1_000_000
    if total == 0:
        return "0s"
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


@dataclass(frozen=True)
class ExpiryEntry:
    """When a port was last seen open, and how long it may go unseen."""

    port: Port
    last_seen: datetime
    ttl: timedelta

    def expired(self, now: datetime) -> bool:
        """Return True if more than ``ttl`` has passed since ``last_seen``."""
        return now - self.last_seen > self.ttl


class ExpiryTracker:
    """Tracks ports and reports those not seen within the TTL."""

    def __init__(self, ttl: Duration) -> None:
        self.ttl = _as_timedelta(ttl)
        self._lock = threading.Lock()
        self._entries: dict[str, ExpiryEntry] = {}

    def seen(self, port: Port, now: datetime) -> None:
        """Record that ``port`` was observed at ``now``."""
        with self._lock:
            self._entries[_key(port)] = ExpiryEntry(port=port, last_seen=now, ttl=self.ttl)

    def expired(self, now: datetime) -> list[ExpiryEntry]:
        """Return the entries whose TTL has elapsed at ``now``."""
        with self._lock:
            return [e for e in self._entries.values() if e.expired(now)]

    def evict(self, now: datetime) -> list[ExpiryEntry]:
        """Remove and return the entries whose TTL has elapsed at ``now``."""
        with self._lock:
            gone = {k: e for k, e in self._entries.items() if e.expired(now)}
            for key in gone:
                del self._entries[key]
            return list(gone.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass(frozen=True)
class ExpiryEvent:
    """A port that was not seen again within its TTL."""

    port: Port
    last_seen: datetime
    expired_at: datetime


def print_expired(out: TextIO, entries: Iterable[ExpiryEntry], now: datetime) -> None:
    """Write the expired entries, sorted by port number, to ``out``."""
    out.write(f"{'PROTO':<8} {'PORT':<6} LAST SEEN\n")
    for e in sorted(entries, key=lambda e: e.port.number):
        age = _format_seconds(now - e.last_seen)
        out.write(f"{e.port.protocol:<8} {e.port.number:<6} {age} ago\n")


def summary(entries: Iterable[ExpiryEntry]) -> str:
    """Return a one-line description of the expiry state."""
    count = len(list(entries))
    if count == 0:
        return "no expired ports"
    return f"{count} port(s) expired"


def print_summary_line(out: TextIO, entries: Iterable[ExpiryEntry]) -> None:
    """Write the summary line and a newline to ``out``."""
    out.write(summary(entries) + "\n")


def expiry_pipeline(
    source: Iterable[Port],
    ttl: Duration,
    interval: Duration,
    stop: Optional[threading.Event] = None,
) -> Iterator[ExpiryEvent]:
    """Track ports from ``source`` and yield one event per port that expires.

    Expired ports are evicted every ``interval``. The pipeline ends when the
    source is exhausted or ``stop`` is set.
    """
    stop = stop if stop is not None else threading.Event()
    tracker = ExpiryTracker(ttl)
    period = _as_timedelta(interval).total_seconds()
    inbox: "queue.Queue[object]" = queue.Queue()

    def feed() -> None:
        try:
            for port in source:
                inbox.put(port)
                if stop.is_set():
                    break
        finally:
            inbox.put(_END)

    threading.Thread(target=feed, name="portwatch-expiry-feed", daemon=True).start()

    next_tick = time.monotonic() + period
    while not stop.is_set():
        remaining = next_tick - time.monotonic()
        if remaining <= 0:
            next_tick = max(next_tick + period, time.monotonic())
            now = datetime.now(timezone.utc)
            for entry in tracker.evict(now):
                if stop.is_set():
                    return
                yield ExpiryEvent(port=entry.port, last_seen=entry.last_seen, expired_at=now)
            continue
        try:
            item = inbox.get(timeout=min(remaining, _POLL))
        except queue.Empty:
            continue
        if item is _END:
            return
        tracker.seen(item, datetime.now(timezone.utc))