"""Polling monitor that reports ports opening and closing."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Optional, Protocol, Union

from portwatch.ports import Port

_log = logging.getLogger(__name__)


class Scanner(Protocol):
    """Anything that can report the currently open ports."""

    def scan(self) -> Iterable[Port]:
        ...


@dataclass(frozen=True)
class Change:
    """A detected port state change."""

    port: Port
    opened: bool


class Monitor:
    """Polls a scanner at a fixed interval and queues port changes."""

    def __init__(self, scanner: Scanner, interval: Union[float, timedelta]) -> None:
        self.scanner = scanner
        self.interval = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
        self.changes: "queue.Queue[Change]" = queue.Queue(maxsize=32)
        self._previous: dict[str, Port] = {}
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Begin polling in a background thread."""
        if self._thread is not None:
            raise RuntimeError("monitor already started")
        self._thread = threading.Thread(target=self._run, name="portwatch-monitor", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Signal the monitor to stop polling and wait briefly for it."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1.0)

    def _run(self) -> None:
        try:
            self.poll(True)
        except Exception as exc:  # scanner failures must not end the loop
            _log.error("portwatch monitor: initial scan error: %s", exc)
        while not self._stop.wait(self.interval):
            try:
                self.poll(False)
            except Exception as exc:
                _log.error("portwatch monitor: scan error: %s", exc)

    def poll(self, baseline: bool) -> None:
        """Scan once; unless ``baseline`` is set, queue a Change per difference."""
        ports = self.scanner.scan()
        current: dict[str, Port] = {}
        for port in ports:
            key = str(port)
            current[key] = port
            if not baseline and key not in self._previous:
                self.changes.put(Change(port=port, opened=True))
        if not baseline:
            for key, port in self._previous.items():
                if key not in current:
                    self.changes.put(Change(port=port, opened=False))
        self._previous = current