"""Track open ports, detect changes and turn them into alerts, logs and reports."""

__version__ = "0.1.0"