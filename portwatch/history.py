"""A persisted history of port open/close events."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from portwatch.ports import Port

_log = logging.getLogger(__name__)

Age = Union[float, timedelta]


def _as_timedelta(age: Age) -> timedelta:
    return age if isinstance(age, timedelta) else timedelta(seconds=age)


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


class EventType(str, Enum):
    """Whether a port was opened or closed."""

    OPENED = "opened"
    CLOSED = "closed"


@dataclass(frozen=True)
class HistoryEvent:
    """A single recorded port change."""

    timestamp: datetime
    event_type: EventType
    port: Port

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "type": self.event_type.value,
            "port": self.port.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistoryEvent":
        return cls(
            timestamp=_aware(datetime.fromisoformat(data["timestamp"])),
            event_type=EventType(data["type"]),
            port=Port.from_dict(data.get("port") or {}),
        )


@dataclass
class History:
    """An ordered list of port change events."""

    events: list[HistoryEvent] = field(default_factory=list)

    def append(self, event_type: EventType, port: Port) -> HistoryEvent:
        """Add an event stamped with the current time."""
        event = HistoryEvent(
            timestamp=datetime.now(timezone.utc), event_type=EventType(event_type), port=port
        )
        self.events.append(event)
        return event

    def to_dict(self) -> dict[str, Any]:
        return {"events": [e.to_dict() for e in self.events]}


def save(path: Union[str, Path], history: History) -> None:
    """Write the history to ``path`` as JSON."""
    Path(path).write_text(json.dumps(history.to_dict(), indent=2), encoding="utf-8")


def load(path: Union[str, Path]) -> History:
    """Read the history at ``path``; a missing file gives an empty history."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return History()
    try:
        data = json.loads(text)
        if data is None:
            return History()
        if not isinstance(data, dict):
            raise ValueError("history must be a JSON object")
        return History(events=[HistoryEvent.from_dict(item) for item in data.get("events") or ()])
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"history: unmarshal: {exc}") from exc


def prune(history: History, max_age: Age) -> History:
    """Return a new history without events older than ``max_age``."""
    cutoff = datetime.now(timezone.utc) - _as_timedelta(max_age)
    return History(events=[e for e in history.events if e.timestamp > cutoff])


@dataclass(frozen=True)
class ChangeEvent:
    """A port and whether it was opened or closed."""

    event_type: EventType
    port: Port


class HistoryRecorder:
    """Appends incoming change events to a history file, pruning old entries."""

    def __init__(self, path: Union[str, Path], max_age: Optional[Age], events: Iterable[ChangeEvent]) -> None:
        self.path = Path(path)
        self.max_age = _as_timedelta(max_age) if max_age else timedelta(0)
        self.events = events
        self._done = threading.Event()

    def run(self) -> None:
        """Record events until the input ends or ``stop`` is called."""
        for event in self.events:
            if self._done.is_set():
                return
            self._record(event)

    def stop(self) -> None:
        """Ask the recorder to stop processing events."""
        self._done.set()

    def _record(self, event: ChangeEvent) -> None:
        try:
            history = load(self.path)
        except (OSError, ValueError) as exc:
            _log.warning("history recorder: load: %s", exc)
            history = History()
        history.append(event.event_type, event.port)
        if self.max_age > timedelta(0):
            history = prune(history, self.max_age)
        try:
            save(self.path, history)
        except OSError as exc:
            _log.warning("history recorder: save: %s", exc)