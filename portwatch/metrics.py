"""Runtime counters for scans and alerts."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from portwatch.ports import Port


def _stamp(moment: Optional[datetime]) -> Optional[str]:
    return moment.isoformat() if moment is not None else None


def _parse(text: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(text) if text else None


@dataclass(frozen=True)
class MetricsSnapshot:
    """A point-in-time view of the runtime counters."""

    scans_total: int = 0
    alerts_total: int = 0
    opened_total: int = 0
    closed_total: int = 0
    last_scan: Optional[datetime] = None
    last_alert: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "scans_total": self.scans_total,
            "alerts_total": self.alerts_total,
            "opened_total": self.opened_total,
            "closed_total": self.closed_total,
            "last_scan": _stamp(self.last_scan),
            "last_alert": _stamp(self.last_alert),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MetricsSnapshot":
        return cls(
            scans_total=int(data.get("scans_total", 0)),
            alerts_total=int(data.get("alerts_total", 0)),
            opened_total=int(data.get("opened_total", 0)),
            closed_total=int(data.get("closed_total", 0)),
            last_scan=_parse(data.get("last_scan")),
            last_alert=_parse(data.get("last_alert")),
        )


class Collector:
    """Thread-safe accumulator of runtime counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snap = MetricsSnapshot()

    def record_scan(self) -> None:
        with self._lock:
            self._snap = replace(
                self._snap,
                scans_total=self._snap.scans_total + 1,
                last_scan=datetime.now(timezone.utc),
            )

    def record_opened(self) -> None:
        with self._lock:
            self._snap = replace(
                self._snap,
                alerts_total=self._snap.alerts_total + 1,
                opened_total=self._snap.opened_total + 1,
                last_alert=datetime.now(timezone.utc),
            )

    def record_closed(self) -> None:
        with self._lock:
            self._snap = replace(
                self._snap,
                alerts_total=self._snap.alerts_total + 1,
                closed_total=self._snap.closed_total + 1,
                last_alert=datetime.now(timezone.utc),
            )

    def snapshot(self) -> MetricsSnapshot:
        """Return the current counters."""
        with self._lock:
            return self._snap

    def save(self, path: Union[str, Path]) -> None:
        """Write the current counters to ``path`` as JSON."""
        snap = self.snapshot()
        Path(path).write_text(json.dumps(snap.to_dict(), indent=2), encoding="utf-8")


def load(path: Union[str, Path]) -> MetricsSnapshot:
    """Read a snapshot saved by ``Collector.save``."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if data is None:
        return MetricsSnapshot()
    if not isinstance(data, dict):
        raise ValueError("metrics snapshot must be a JSON object")
    try:
        return MetricsSnapshot.from_dict(data)
    except TypeError as exc:
        raise ValueError(f"malformed metrics snapshot: {exc}") from exc


@dataclass(frozen=True)
class MetricsEvent:
    """The direction of a port change."""

    opened: bool
    port: Port


def metrics_pipeline(
    collector: Collector,
    events: Iterable[MetricsEvent],
    stop: Optional[threading.Event] = None,
) -> Iterator[MetricsEvent]:
    """Record each event in ``collector`` and yield it on unchanged."""
    for event in events:
        if stop is not None and stop.is_set():
            return
        if event.opened:
            collector.record_opened()
        else:
            collector.record_closed()
        yield event