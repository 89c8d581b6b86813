"""Persistent audit log of port events."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from portwatch.ports import Port


class EventKind(str, Enum):
    """Type of an audit event."""

    OPENED = "opened"
    CLOSED = "closed"
    ALERT = "alert"


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class AuditEvent:
    """A single audit log entry."""

    timestamp: datetime
    kind: EventKind
    port: Port
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind.value,
            "port": self.port.to_dict(),
        }
        if self.message:
            data["message"] = self.message
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuditEvent":
        return cls(
            timestamp=_aware(datetime.fromisoformat(data["timestamp"])),
            kind=EventKind(data["kind"]),
            port=Port.from_dict(data.get("port") or {}),
            message=str(data.get("message", "")),
        )


@dataclass(frozen=True)
class AuditFilter:
    """Optional constraints for querying audit events."""

    kind: Optional[EventKind] = None
    since: Optional[datetime] = None
    proto: str = ""


def _decode(text: str) -> list[AuditEvent]:
    data = json.loads(text)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("audit log must hold a list of events")
    try:
        return [AuditEvent.from_dict(item) for item in data]
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"malformed audit event: {exc}") from exc


class AuditLog:
    """An ordered list of audit events persisted as JSON."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._events: list[AuditEvent] = []
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return
        self._events = _decode(text)

    def append(self, kind: EventKind, port: Port, message: str = "") -> AuditEvent:
        """Add an event and write the whole log to disk."""
        event = AuditEvent(
            timestamp=datetime.now(timezone.utc),
            kind=EventKind(kind),
            port=port,
            message=message,
        )
        with self._lock:
            self._events.append(event)
            self._flush()
        return event

    def events(self) -> list[AuditEvent]:
        """Return a copy of all recorded events."""
        with self._lock:
            return list(self._events)

    def query(self, criteria: Optional[AuditFilter] = None) -> list[AuditEvent]:
        """Return the events matching every set field of ``criteria``."""
        criteria = criteria or AuditFilter()
        since = _aware(criteria.since) if criteria.since is not None else None
        with self._lock:
            return [
                ev
                for ev in self._events
                if (not criteria.kind or ev.kind == criteria.kind)
                and (since is None or ev.timestamp >= since)
                and (not criteria.proto or ev.port.protocol == criteria.proto)
            ]

    def _flush(self) -> None:
        payload = json.dumps([ev.to_dict() for ev in self._events], indent=2)
        self.path.write_text(payload, encoding="utf-8")


@dataclass(frozen=True)
class PortEvent:
    """A port change and its direction."""

    kind: EventKind
    port: Port


class Recorder:
    """Writes incoming port events to an audit log."""

    def __init__(self, log: AuditLog) -> None:
        self.log = log

    def watch(self, events: Iterable[PortEvent], stop: Optional[threading.Event] = None) -> None:
        """Record events until the input ends or ``stop`` is set."""
        for event in events:
            if stop is not None and stop.is_set():
                return
            try:
                self.log.append(event.kind, event.port, "")
            except OSError:
                pass