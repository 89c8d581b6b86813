"""Stable fingerprints for port scan results."""

from __future__ import annotations

import hashlib
from typing import Iterable, Optional

from portwatch.ports import Port


def digest(ports: Optional[Iterable[Port]]) -> str:
    """Return an order-independent SHA-256 hex digest of the ports."""
    keys = sorted(f"{p.protocol}:{p.number}" for p in (ports or ()))
    h = hashlib.sha256()
    for key in keys:
        h.update(f"{key}\n".encode())
    return h.hexdigest()


def equal(a: Optional[Iterable[Port]], b: Optional[Iterable[Port]]) -> bool:
    """Return True when both port lists have the same digest."""
    return digest(a) == digest(b)