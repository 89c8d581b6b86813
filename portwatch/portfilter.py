"""Rules for ignoring specific ports during monitoring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from portwatch.ports import Port

_DIGITS = frozenset("0123456789")


@dataclass(frozen=True)
class Rule:
    """Ignore a port number; an empty protocol matches every protocol."""

    port: int
    protocol: str = ""


class PortFilter:
    """A set of rules naming ports to ignore."""

    def __init__(self, rules: Optional[Iterable[Rule]] = None) -> None:
        self.rules: list[Rule] = list(rules or ())

    def ignored(self, port: Port) -> bool:
        """Return True if the port matches any rule."""
        return any(
            rule.port == port.number and rule.protocol in ("", port.protocol)
            for rule in self.rules
        )

    def apply(self, ports: Iterable[Port]) -> list[Port]:
        """Return the ports that are not ignored, in order."""
        if not self.rules:
            return list(ports)
        return [port for port in ports if not self.ignored(port)]


def parse_rule(entry: str) -> Rule:
    """Parse ``"port/protocol"`` or ``"port"`` into a Rule."""
    number_text, _, proto = entry.partition("/")
    if not all(ch in _DIGITS for ch in number_text):
        raise ValueError(f"invalid port in filter rule: {number_text!r}")
    number = int(number_text) if number_text else 0
    if not 1 <= number <= 65535:
        raise ValueError(f"port out of range in filter rule: {number_text!r}")
    if proto not in ("", "tcp", "udp"):
        raise ValueError(f"unknown protocol {proto!r} in filter rule")
    return Rule(port=number, protocol=proto)


def from_config(entries: Iterable[str]) -> PortFilter:
    """Build a filter from raw rule strings."""
    return PortFilter(parse_rule(entry) for entry in entries)