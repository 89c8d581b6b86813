"""Partitioning ports into named groups."""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Optional

from portwatch.ports import Port


@dataclass(frozen=True)
class Group:
    """A named collection of ports sharing a label."""

    name: str
    ports: list[Port] = field(default_factory=list)


class Grouper:
    """Buckets ports by the label a key function gives them."""

    def __init__(self, key_fn: Callable[[Port], str]) -> None:
        self.key_fn = key_fn

    def group(self, ports: Optional[Iterable[Port]]) -> list[Group]:
        """Return the groups sorted by name, each with ports sorted by number."""
        buckets: dict[str, list[Port]] = defaultdict(list)
        for port in ports or ():
            buckets[self.key_fn(port)].append(port)
        return [
            Group(name=name, ports=sorted(members, key=lambda p: p.number))
            for name, members in sorted(buckets.items())
        ]


def by_protocol() -> Grouper:
    """Return a grouper that groups ports by protocol."""
    return Grouper(lambda port: port.protocol)


def _range_of(port: Port) -> str:
    if port.number < 1024:
        return "system (0-1023)"
    if port.number < 49152:
        return "registered (1024-49151)"
    return "dynamic (49152+)"


def by_port_range() -> Grouper:
    """Return a grouper that buckets ports into well-known ranges."""
    return Grouper(_range_of)


def summary(groups: Iterable[Group]) -> str:
    """Return one line per group with its port count."""
    return "".join(f"{g.name}: {len(g.ports)} port(s)\n" for g in groups)


@dataclass(frozen=True)
class GroupSample:
    """A snapshot of ports together with their groups."""

    ports: list[Port]
    groups: list[Group]


def group_pipeline(
    grouper: Grouper,
    samples: Iterable[Iterable[Port]],
    stop: Optional[threading.Event] = None,
) -> Iterator[GroupSample]:
    """Yield each sample together with its groups."""
    for sample in samples:
        if stop is not None and stop.is_set():
            return
        ports = list(sample)
        yield GroupSample(ports=ports, groups=grouper.group(ports))