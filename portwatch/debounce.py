"""Delayed forwarding of port events to smooth out short-lived fluctuations."""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Iterator, Optional, Union

from portwatch.ports import Port

Delay = Union[float, timedelta]


def _seconds(delay: Delay) -> float:
    return delay.total_seconds() if isinstance(delay, timedelta) else float(delay)


def _key(port: Port) -> str:
    return f"{port.protocol}:{port}"


@dataclass(frozen=True)
class DebounceEvent:
    """A port change and its direction."""

    port: Port
    opened: bool


class _Pending:
    __slots__ = ("event", "timer")

    def __init__(self, event: DebounceEvent) -> None:
        self.event = event
        self.timer: Optional[threading.Timer] = None


class Debouncer:
    """Holds events back and emits each one only after a quiet period.

    Emitted events are put on ``output``; after ``close`` a ``None`` marks the end.
    Iterating over the debouncer yields events until it is closed.
    """

    def __init__(self, delay: Delay) -> None:
        self.delay = _seconds(delay)
        self.output: "queue.Queue[Optional[DebounceEvent]]" = queue.Queue()
        self._lock = threading.Lock()
        self._pending: dict[str, _Pending] = {}
        self._closed = False

    def push(self, event: DebounceEvent) -> None:
        """Schedule ``event``; an opposite event for the same port cancels it."""
        key = _key(event.port)
        with self._lock:
            if self._closed:
                raise RuntimeError("debouncer is closed")
            existing = self._pending.get(key)
            if existing is not None:
                if existing.timer is not None:
                    existing.timer.cancel()
                if existing.event.opened != event.opened:
                    del self._pending[key]
                    return
                existing.timer = self._schedule(key, existing)
                return
            entry = _Pending(event)
            entry.timer = self._schedule(key, entry)
            self._pending[key] = entry

    def close(self) -> None:
        """Drop every pending event and mark the end of the output."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for entry in self._pending.values():
                if entry.timer is not None:
                    entry.timer.cancel()
            self._pending.clear()
        self.output.put(None)

    def __iter__(self) -> Iterator[DebounceEvent]:
        while True:
            item = self.output.get()
            if item is None:
                self.output.put(None)
                return
            yield item

    def _schedule(self, key: str, entry: _Pending) -> threading.Timer:
        timer = threading.Timer(self.delay, self._fire, args=(key, entry))
        timer.daemon = True
        timer.start()
        return timer

    def _fire(self, key: str, entry: _Pending) -> None:
        with self._lock:
            if self._closed or self._pending.get(key) is not entry:
                return
            if entry.timer is not threading.current_thread():
                return
            del self._pending[key]
        self.output.put(entry.event)


@dataclass(frozen=True)
class PortChange:
    """An open/close transition detected by the monitor."""

    port: Port
    opened: bool


class Pipeline:
    """Feeds raw port changes into a debouncer."""

    def __init__(self, delay: Delay, source: Iterable[PortChange]) -> None:
        self.debouncer = Debouncer(delay)
        self.source = source

    @property
    def output(self) -> "queue.Queue[Optional[DebounceEvent]]":
        """The debounced output queue."""
        return self.debouncer.output

    def run(self, stop: Optional[threading.Event] = None) -> None:
        """Push changes until the input ends or ``stop`` is set."""
        for change in self.source:
            if stop is not None and stop.is_set():
                return
            self.debouncer.push(DebounceEvent(port=change.port, opened=change.opened))

    def run_and_close(self, stop: Optional[threading.Event] = None) -> None:
        """Run the pipeline, then close the debouncer."""
        try:
            self.run(stop)
        finally:
            self.debouncer.close()