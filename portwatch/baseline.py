"""Saved sets of expected open ports and checks against them."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol, TextIO, Union

from portwatch.ports import Port


class NoBaselineError(Exception):
    """Raised when no baseline file exists."""

    def __init__(self, message: str = "baseline: no baseline file found") -> None:
        super().__init__(message)


class TargetScanner(Protocol):
    """Anything that can scan one target for open ports."""

    def scan(self, target: str) -> Iterable[Port]:
        ...


@dataclass
class Baseline:
    """A saved set of expected open ports."""

    created_at: Optional[datetime] = None
    ports: list[Port] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "ports": [p.to_dict() for p in self.ports],
        }


def save(path: Union[str, Path], ports: Iterable[Port]) -> Baseline:
    """Write ``ports`` as the current baseline to ``path``."""
    base = Baseline(created_at=datetime.now(timezone.utc), ports=list(ports))
    Path(path).write_text(json.dumps(base.to_dict(), indent=2), encoding="utf-8")
    return base


def load(path: Union[str, Path]) -> Baseline:
    """Read the baseline at ``path``; raise NoBaselineError if it is missing."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise NoBaselineError() from exc
    data = json.loads(text)
    if data is None:
        return Baseline()
    if not isinstance(data, dict):
        raise ValueError("baseline must be a JSON object")
    try:
        created = data.get("created_at")
        return Baseline(
            created_at=datetime.fromisoformat(created) if created else None,
            ports=[Port.from_dict(item) for item in data.get("ports") or ()],
        )
    except (TypeError, AttributeError) as exc:
        raise ValueError(f"malformed baseline: {exc}") from exc


def violations(base: Baseline, current: Iterable[Port]) -> tuple[list[Port], list[Port]]:
    """Return ports open but not in the baseline, and baseline ports no longer open."""
    current = list(current)
    base_keys = {str(p) for p in base.ports}
    current_keys = {str(p) for p in current}
    unexpected = [p for p in current if str(p) not in base_keys]
    missing = [p for p in base.ports if str(p) not in current_keys]
    return unexpected, missing


def capture(
    path: Union[str, Path],
    targets: Iterable[str],
    scanner: TargetScanner,
    out: Optional[TextIO] = None,
) -> list[Port]:
    """Scan every target and save the combined result as a new baseline."""
    out = out if out is not None else sys.stdout
    found: list[Port] = []
    for target in targets:
        try:
            found.extend(scanner.scan(target))
        except Exception as exc:
            raise RuntimeError(f"scan {target}: {exc}") from exc
    try:
        save(path, found)
    except OSError as exc:
        raise RuntimeError(f"save baseline: {exc}") from exc
    out.write(f"baseline captured: {len(found)} ports written to {path}\n")
    return found


def check(path: Union[str, Path], current: Iterable[Port], out: Optional[TextIO] = None) -> bool:
    """Compare ``current`` with the baseline at ``path`` and report violations."""
    out = out if out is not None else sys.stdout
    unexpected, missing = violations(load(path), current)
    if not unexpected and not missing:
        out.write("baseline check passed: no violations\n")
        return True
    for port in unexpected:
        out.write(f"UNEXPECTED port open: {port}\n")
    for port in missing:
        out.write(f"MISSING expected port: {port}\n")
    return False