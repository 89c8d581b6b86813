"""Human-readable service labels for well-known ports."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from portwatch.ports import Port

_WELL_KNOWN: dict[tuple[str, int], str] = {
    ("", 22): "ssh",
    ("", 25): "smtp",
    ("", 53): "dns",
    ("", 80): "http",
    ("", 110): "pop3",
    ("", 143): "imap",
    ("", 443): "https",
    ("", 3306): "mysql",
    ("", 5432): "postgres",
    ("", 6379): "redis",
    ("", 8080): "http-alt",
    ("", 8443): "https-alt",
    ("", 27017): "mongodb",
    ("tcp", 22): "ssh",
    ("tcp", 80): "http",
    ("tcp", 443): "https",
    ("udp", 53): "dns",
}


@dataclass(frozen=True)
class Annotated:
    """A port together with its service label."""

    port: Port
    label: str


def label(port: int, protocol: str) -> str:
    """Return the service name for a port, or an empty string if unknown."""
    return _WELL_KNOWN.get((protocol, port)) or _WELL_KNOWN.get(("", port), "")


def annotate(port: int, protocol: str) -> str:
    """Return the service label, or ``"unknown"``."""
    return label(port, protocol) or "unknown"


def annotate_ports(ports: Iterable[Port], stop: Optional[threading.Event] = None) -> Iterator[Annotated]:
    """Yield each port with its label until the input ends or ``stop`` is set."""
    for port in ports:
        if stop is not None and stop.is_set():
            return
        yield Annotated(port=port, label=annotate(port.number, port.protocol))