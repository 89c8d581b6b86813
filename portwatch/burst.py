"""Detection of rapid bursts of activity on a port."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Iterator, Optional, Union

from portwatch.monitor import Change
from portwatch.ports import Port

Window = Union[float, timedelta]


def _key(port: Port) -> str:
    return f"{port.protocol}:{port.number}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BurstEvent:
    """Emitted when a burst is detected."""

    port: Port
    count: int
    window: timedelta
    detected_at: datetime

    def __str__(self) -> str:
        return (
            f"burst detected on {self.port}: {self.count} events in "
            f"{self.window.total_seconds():g}s"
        )


class BurstDetector:
    """Fires when a port sees at least ``threshold`` events within ``window``."""

    def __init__(
        self,
        window: Window,
        threshold: int = 5,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.window = window if isinstance(window, timedelta) else timedelta(seconds=window)
        self.threshold = threshold if threshold > 0 else 5
        self.clock = clock or _utcnow
        self._lock = threading.Lock()
        self._events: dict[str, list[datetime]] = {}

    def record(self, port: Port) -> Optional[BurstEvent]:
        """Register activity on ``port``; return a BurstEvent if the threshold is reached."""
        with self._lock:
            now = self.clock()
            cutoff = now - self.window
            key = _key(port)
            stamps = [t for t in self._events.get(key, ()) if t > cutoff]
            stamps.append(now)
            self._events[key] = stamps
            if len(stamps) >= self.threshold:
                return BurstEvent(port=port, count=len(stamps), window=self.window, detected_at=now)
            return None

    def reset(self, port: Port) -> None:
        """Forget all recorded activity for ``port``."""
        with self._lock:
            self._events.pop(_key(port), None)


def burst_pipeline(
    detector: BurstDetector,
    changes: Iterable[Change],
    stop: Optional[threading.Event] = None,
) -> Iterator[BurstEvent]:
    """Feed each change's port to ``detector`` and yield any bursts."""
    for change in changes:
        if stop is not None and stop.is_set():
            return
        burst = detector.record(change.port)
        if burst is not None:
            yield burst