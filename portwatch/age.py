"""How long each port has been open."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from portwatch.ports import Port


def _key(port: Port) -> str:
    return f"{port.protocol}:{port.number}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AgeEntry:
    """The first time a port was seen open."""

    port: Port
    first_seen: datetime

    def age(self, now: datetime) -> timedelta:
        """Return how long the port has been open at ``now``."""
        return now - self.first_seen

    def age_string(self, now: datetime) -> str:
        """Return the age as whole seconds, minutes or hours."""
        seconds = self.age(now).total_seconds()
        if seconds < 60:
            return f"{int(seconds)}s"
        if seconds < 3600:
            return f"{int(seconds / 60)}m"
        return f"{int(seconds / 3600)}h"


class AgeTracker:
    """Records when each port was first seen open."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.clock = clock or _utcnow
        self._lock = threading.Lock()
        self._entries: dict[str, AgeEntry] = {}

    def opened(self, port: Port) -> None:
        """Record the port as open, keeping an earlier first-seen time."""
        with self._lock:
            key = _key(port)
            if key not in self._entries:
                self._entries[key] = AgeEntry(port=port, first_seen=self.clock())

    def closed(self, port: Port) -> None:
        """Stop tracking the port."""
        with self._lock:
            self._entries.pop(_key(port), None)

    def get(self, port: Port) -> Optional[AgeEntry]:
        """Return the entry for the port, or None."""
        with self._lock:
            return self._entries.get(_key(port))

    def all(self) -> list[AgeEntry]:
        """Return all entries, oldest first."""
        with self._lock:
            return sorted(self._entries.values(), key=lambda e: e.first_seen)