"""Daemon health status, kept in memory and mirrored to a JSON file."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, Union


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _stamp(moment: Optional[datetime]) -> Optional[str]:
    return moment.isoformat() if moment is not None else None


def _parse(text: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(text) if text else None


@dataclass(frozen=True)
class HealthStatus:
    """The current health of the daemon."""

    healthy: bool = True
    last_scan: Optional[datetime] = None
    scan_count: int = 0
    alert_count: int = 0
    started_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.healthy,
            "last_scan": _stamp(self.last_scan),
            "scan_count": self.scan_count,
            "alert_count": self.alert_count,
            "started_at": _stamp(self.started_at),
            "updated_at": _stamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HealthStatus":
        return cls(
            healthy=bool(data.get("healthy", False)),
            last_scan=_parse(data.get("last_scan")),
            scan_count=int(data.get("scan_count", 0)),
            alert_count=int(data.get("alert_count", 0)),
            started_at=_parse(data.get("started_at")),
            updated_at=_parse(data.get("updated_at")),
        )


class HealthChecker:
    """Maintains the daemon health status and writes it to ``path`` on change."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._status = HealthStatus(healthy=True, started_at=_now())

    def record_scan(self) -> None:
        """Update the last scan time and count one more scan."""
        with self._lock:
            now = _now()
            self._status = replace(
                self._status,
                last_scan=now,
                scan_count=self._status.scan_count + 1,
                updated_at=now,
            )
            self._flush()

    def record_alert(self) -> None:
        """Count one more alert."""
        with self._lock:
            self._status = replace(
                self._status, alert_count=self._status.alert_count + 1, updated_at=_now()
            )
            self._flush()

    def set_healthy(self, ok: bool) -> None:
        """Mark the daemon healthy or unhealthy."""
        with self._lock:
            self._status = replace(self._status, healthy=bool(ok), updated_at=_now())
            self._flush()

    def get(self) -> HealthStatus:
        """Return the current status."""
        with self._lock:
            return self._status

    def _flush(self) -> None:
        try:
            self.path.write_text(json.dumps(self._status.to_dict(), indent=2), encoding="utf-8")
        except OSError:
            pass