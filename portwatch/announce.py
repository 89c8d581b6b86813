"""Startup summary of currently open ports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional, TextIO

from portwatch.ports import Port


@dataclass(frozen=True)
class Announcement:
    """The state that was announced."""

    at: datetime
    ports: list[Port] = field(default_factory=list)


class Announcer:
    """Writes a startup port summary to a text stream."""

    def __init__(self, out: TextIO) -> None:
        self.out = out

    def announce(self, ports: Optional[Iterable[Port]]) -> Announcement:
        """Write the sorted list of open ports and return what was written."""
        now = datetime.now(timezone.utc)
        ordered = sorted(ports or (), key=lambda p: (p.protocol, p.number))
        self.out.write(f"portwatch startup — {now.strftime('%Y-%m-%dT%H:%M:%SZ')}\n")
        self.out.write(f"{len(ordered)} port(s) currently open:\n")
        for port in ordered:
            self.out.write(f"  {port.protocol.upper():<5} {port.number}\n")
        if not ordered:
            self.out.write("  (none)\n")
        return Announcement(at=now, ports=ordered)