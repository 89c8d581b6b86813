"""Differences between consecutive port scans."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from portwatch.ports import Port


def _to_map(ports: Iterable[Port]) -> dict[str, Port]:
    return {f"{p.protocol}:{p.number}": p for p in ports}


@dataclass(frozen=True)
class DiffSummary:
    """Ports opened and closed between two snapshots."""

    opened: list[Port] = field(default_factory=list)
    closed: list[Port] = field(default_factory=list)

    def is_empty(self) -> bool:
        """Return True when nothing changed."""
        return not self.opened and not self.closed

    def __str__(self) -> str:
        lines = [f"+ {p}" for p in self.opened] + [f"- {p}" for p in self.closed]
        return "\n".join(lines)


@dataclass(frozen=True)
class DiffEvent:
    """A diff produced from consecutive samples."""

    summary: DiffSummary


def compare(prev: Iterable[Port], current: Iterable[Port]) -> DiffSummary:
    """Return the ports that opened and closed going from ``prev`` to ``current``."""
    prev_map = _to_map(prev)
    next_map = _to_map(current)
    return DiffSummary(
        opened=[p for k, p in next_map.items() if k not in prev_map],
        closed=[p for k, p in prev_map.items() if k not in next_map],
    )


def diff_pipeline(
    samples: Iterable[Iterable[Port]],
    stop: Optional[threading.Event] = None,
) -> Iterator[DiffEvent]:
    """Yield a DiffEvent for every non-empty change between successive samples."""
    prev: Optional[list[Port]] = None
    for sample in samples:
        if stop is not None and stop.is_set():
            return
        ports = list(sample)
        if prev is not None:
            summary = compare(prev, ports)
            if not summary.is_empty():
                yield DiffEvent(summary=summary)
        prev = ports