"""Formatted notifications about port events."""

from __future__ import annotations

import re
import string
import sys
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, TextIO

from portwatch.ports import Port

DEFAULT_TEMPLATE = "[{timestamp:%Y-%m-%d %H:%M:%S}] {level} port={port}/{protocol} {message}\n"

_FIELDS = frozenset({"timestamp", "level", "message", "port", "protocol"})


class Severity(str, Enum):
    """Severity of a notification."""

    INFO = "INFO"
    WARN = "WARN"
    ALERT = "ALERT"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Notification:
    """The data for a single notification."""

    level: Severity
    message: str = ""
    port: int = 0
    protocol: str = ""
    timestamp: Optional[datetime] = None


class TemplateError(ValueError):
    """Raised when a template cannot be parsed or rendered."""


def _check_template(template: str) -> str:
    try:
        parsed = list(string.Formatter().parse(template))
    except ValueError as exc:
        raise TemplateError(f"notify: parse template: {exc}") from exc
    for _, field_name, _, _ in parsed:
        if field_name is None:
            continue
        root = re.split(r"[.\[]", field_name, maxsplit=1)[0]
        if root not in _FIELDS:
            raise TemplateError(f"notify: parse template: unknown field {field_name!r}")
    return template


def opened_event(port: Port) -> Notification:
    """Build an ALERT notification for a newly opened port."""
    return Notification(level=Severity.ALERT, message="port opened", port=port.number, protocol=port.protocol)


def closed_event(port: Port) -> Notification:
    """Build a WARN notification for a port that has closed."""
    return Notification(level=Severity.WARN, message="port closed", port=port.number, protocol=port.protocol)


def info_event(port: Port, message: str) -> Notification:
    """Build an INFO notification with a custom message."""
    return Notification(level=Severity.INFO, message=message, port=port.number, protocol=port.protocol)


class Notifier:
    """Writes notifications rendered through a ``str.format`` template.

    The template may use the fields ``timestamp``, ``level``, ``message``,
    ``port`` and ``protocol``.
    """

    def __init__(self, out: Optional[TextIO] = None, template: str = DEFAULT_TEMPLATE) -> None:
        self.out = out if out is not None else sys.stderr
        self.template = _check_template(template)

    def send(self, event: Notification) -> None:
        """Render and write one notification; a missing timestamp means now."""
        if event.timestamp is None:
            event = replace(event, timestamp=datetime.now())
        level = event.level.value if isinstance(event.level, Severity) else str(event.level)
        try:
            text = self.template.format(
                timestamp=event.timestamp,
                level=level,
                message=event.message,
                port=event.port,
                protocol=event.protocol,
            )
        except (ValueError, KeyError, IndexError, AttributeError, TypeError) as exc:
            raise TemplateError(f"notify: render event: {exc}") from exc
        self.out.write(text)

    def watch(self, events: Iterable[Notification]) -> None:
        """Send every notification until the input is exhausted."""
        for event in events:
            try:
                self.send(event)
            except TemplateError:
                pass