"""Port values and their classification into service tiers."""

from __future__ import annotations

from collections import Counter as _Tally
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, TextIO


@dataclass(frozen=True)
class Port:
    """An open port seen by a scan."""

    number: int
    protocol: str = "tcp"
    address: str = ""

    def __str__(self) -> str:
        host = self.address or str(self.number)
        return f"{host}/{self.protocol}" if self.protocol else host

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping of this port."""
        return {"number": self.number, "protocol": self.protocol, "address": self.address}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Port":
        """Build a port from a mapping produced by ``to_dict``."""
        return cls(
            number=int(data.get("number", 0)),
            protocol=str(data.get("protocol", "tcp")),
            address=str(data.get("address", "")),
        )


class Tier(str, Enum):
    """Broad service category of a port number."""

    SYSTEM = "system"
    REGISTERED = "registered"
    DYNAMIC = "dynamic"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Classification:
    """Classification details for a single port."""

    port: Port
    tier: Tier
    service: str = ""


_WELL_KNOWN = {
    21: "ftp",
    22: "ssh",
    23: "telnet",
    25: "smtp",
    53: "dns",
    80: "http",
    110: "pop3",
    143: "imap",
    443: "https",
    3306: "mysql",
    5432: "postgres",
    6379: "redis",
    8080: "http-alt",
    8443: "https-alt",
    27017: "mongodb",
}


def _tier_of(number: int) -> Tier:
    if 1 <= number <= 1023:
        return Tier.SYSTEM
    if 1024 <= number <= 49151:
        return Tier.REGISTERED
    if number >= 49152:
        return Tier.DYNAMIC
    return Tier.UNKNOWN


def classify(port: Port) -> Classification:
    """Classify a single port."""
    return Classification(port=port, tier=_tier_of(port.number), service=_WELL_KNOWN.get(port.number, ""))


def classify_all(ports: Iterable[Port]) -> list[Classification]:
    """Classify every port in order."""
    return [classify(port) for port in ports]


def summary(classes: Iterable[Classification]) -> str:
    """Return a one-line summary of the tier distribution."""
    counts = _Tally(c.tier for c in classes)
    return (
        f"system={counts[Tier.SYSTEM]} "
        f"registered={counts[Tier.REGISTERED]} "
        f"dynamic={counts[Tier.DYNAMIC]}"
    )


def print_report(out: TextIO, classes: Iterable[Classification]) -> None:
    """Write a classification table, sorted by port number, to ``out``."""
    ordered = sorted(classes, key=lambda c: c.port.number)
    if not ordered:
        out.write("no ports to classify\n")
        return
    out.write(f"{'PORT':<8} {'PROTO':<6} {'TIER':<12} SERVICE\n")
    out.write("-" * 40 + "\n")
    for c in ordered:
        service = c.service or "-"
        out.write(f"{c.port.number:<8} {c.port.protocol:<6} {c.tier.value:<12} {service}\n")