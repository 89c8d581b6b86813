"""Configuration loading and validation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path
from typing import Any, Union


class ConfigError(ValueError):
    """Raised when configuration cannot be read or is invalid."""


def _format_duration(d: timedelta) -> str:
    return f"{d.total_seconds():g}s"


@dataclass
class Config:
    """The full portwatch configuration."""

    ports: list[int] = field(default_factory=list)
    protocols: list[str] = field(default_factory=lambda: ["tcp"])
    interval: timedelta = timedelta(seconds=30)
    alert_log: str = ""
    snapshot_dir: str = ".portwatch/snapshots"
    retain_days: int = 30

    def validate(self) -> None:
        """Raise ConfigError describing the first problem found."""
        if not self.protocols:
            raise ConfigError("config: at least one protocol must be specified")
        for proto in self.protocols:
            if proto not in ("tcp", "udp"):
                raise ConfigError(f'config: unsupported protocol "{proto}" (must be "tcp" or "udp")')
        if self.interval < timedelta(seconds=1):
            raise ConfigError(
                f"config: interval must be at least 1 second, got {_format_duration(self.interval)}"
            )
        if self.retain_days < 1:
            raise ConfigError(f"config: retain_days must be at least 1, got {self.retain_days}")


def default_config() -> Config:
    """Return a Config populated with defaults."""
    return Config()


def _typed(raw: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = raw.get(key)
    if value is None:
        return default
    if kind is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif kind is str:
        ok = isinstance(value, str)
    else:
        ok = isinstance(value, list)
    if not ok:
        raise TypeError(f"field {key!r} has the wrong type")
    return value


def _parse(raw: Any) -> dict[str, Any]:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise TypeError("top-level value must be an object")
    ports = _typed(raw, "ports", list, [])
    protocols = _typed(raw, "protocols", list, [])
    if not all(isinstance(n, int) and not isinstance(n, bool) for n in ports):
        raise TypeError("ports must be integers")
    if not all(isinstance(s, str) for s in protocols):
        raise TypeError("protocols must be strings")
    return {
        "ports": ports,
        "protocols": protocols,
        "interval_seconds": _typed(raw, "interval_seconds", int, 0),
        "alert_log": _typed(raw, "alert_log", str, ""),
        "snapshot_dir": _typed(raw, "snapshot_dir", str, ""),
        "retain_days": _typed(raw, "retain_days", int, 0),
    }


def load(path: Union[str, Path]) -> Config:
    """Read a JSON config file, merge it over the defaults and validate it."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"config: read {path}: {exc}") from exc
    try:
        raw = _parse(json.loads(text))
    except (ValueError, TypeError) as exc:
        raise ConfigError(f"config: parse {path}: {exc}") from exc

    cfg = default_config()
    updates: dict[str, Any] = {}
    if raw["ports"]:
        updates["ports"] = list(raw["ports"])
    if raw["protocols"]:
        updates["protocols"] = list(raw["protocols"])
    if raw["interval_seconds"] > 0:
        updates["interval"] = timedelta(seconds=raw["interval_seconds"])
    if raw["alert_log"]:
        updates["alert_log"] = raw["alert_log"]
    if raw["snapshot_dir"]:
        updates["snapshot_dir"] = raw["snapshot_dir"]
    if raw["retain_days"] > 0:
        updates["retain_days"] = raw["retain_days"]
    cfg = replace(cfg, **updates)
    cfg.validate()
    return cfg