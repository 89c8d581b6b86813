# portwatch

A library for keeping track of the open ports of a host and making sense of
what changes. You give it the results of port scans; it notices ports opening
and closing and turns that stream of changes into alerts, audit logs,
history, metrics and short reports.

## What it offers

- **Port model and classification** (`portwatch.ports`): the `Port` value
  (`number`, `protocol`, `address`), the `Tier` of a port number (system
  1–1023, registered 1024–49151, dynamic 49152+), `classify`,
  `classify_all`, `summary` and a tabular `print_report`.
- **Service labels** (`portwatch.labels`): `label` and `annotate` name
  well-known services such as `ssh`, `http` or `dns`; `annotate_ports`
  yields `Annotated` pairs for a stream of ports.
- **Fingerprints** (`portwatch.digest`): `digest` gives an order-independent
  SHA-256 hex digest of a port list; `equal` compares two lists by it.
- **Ignore rules** (`portwatch.portfilter`): rules such as `"22/tcp"` or
  `"53"` parsed with `parse_rule` or `from_config`, then applied with
  `PortFilter.ignored` and `PortFilter.apply`.
- **Configuration** (`portwatch.config`): `default_config` and `load`, which
  reads a JSON file over the defaults and validates it, raising
  `ConfigError` on unreadable files, malformed JSON or bad values.
- **Change detection**: a polling `Monitor` (`portwatch.monitor`) that puts
  `Change` events on its `changes` queue, `compare` and `diff_pipeline`
  (`portwatch.diff`) for successive snapshots, and `counting.Counter` for
  per-protocol counts.
- **Reporting and persistence**: one-line alerts (`portwatch.alert`),
  template-based notifications (`portwatch.notify`), a JSON audit log with
  queries (`portwatch.audit`), baselines of expected ports with `check` and
  `capture` (`portwatch.baseline`), change history with pruning
  (`portwatch.history`), a health status file (`portwatch.healthcheck`) and
  runtime counters (`portwatch.metrics`).
- **Analysis**: debouncing of flapping ports (`portwatch.debounce`), burst
  detection (`portwatch.burst`), how long ports have been open
  (`portwatch.age`), ports that closed soon after opening
  (`portwatch.evict`), ports not seen within a time-to-live
  (`portwatch.expiry`), appearance frequency (`portwatch.frequency`) and
  grouping by protocol or range (`portwatch.grouping`), plus a startup
  summary (`portwatch.announce`).

The stream-processing helpers (`annotate_ports`, `diff_pipeline`,
`metrics_pipeline`, `burst_pipeline`, `frequency_pipeline`,
`group_pipeline`, `expiry_pipeline`, `Recorder.watch`, `Pipeline.run`) take
any iterable and an optional `threading.Event`; setting the event makes them
stop.

## A short tour

```python
import sys

from portwatch.config import ConfigError, default_config, load
from portwatch.diff import compare
from portwatch.digest import digest, equal
from portwatch.labels import annotate
from portwatch.notify import Notifier, opened_event
from portwatch.portfilter import from_config
from portwatch.ports import Port, classify_all, print_report, summary

try:
    config = load("portwatch.json")
except ConfigError as exc:
    print(f"falling back to defaults: {exc}", file=sys.stderr)
    config = default_config()

ports = [Port(number=22, protocol="tcp"), Port(number=53, protocol="udp"),
         Port(number=8080, protocol="tcp")]

ignore = from_config(["22/tcp"])
watched = ignore.apply(ports)

classes = classify_all(watched)
print(summary(classes))          # system=1 registered=1 dynamic=0
print_report(sys.stdout, classes)

print(annotate(443, "tcp"))      # https
print(annotate(19999, "tcp"))    # unknown

print(digest(watched))
print(equal(watched, list(reversed(watched))))  # True

later = watched + [Port(number=443, protocol="tcp")]
print(compare(watched, later))   # + 443/tcp

Notifier(sys.stdout).send(opened_event(Port(number=443, protocol="tcp")))
```

### Watching for changes

`Monitor` works with any object that has a `scan()` method returning the
currently open ports. The first poll only records the starting state; later
polls put a `Change` on `monitor.changes` for each port that opened or
closed.

```python
from portwatch.alert import Alerter
from portwatch.monitor import Monitor
from portwatch.ports import Port


class FixedScanner:
    def __init__(self):
        self.open = [Port(number=22, protocol="tcp")]

    def scan(self):
        return list(self.open)


scanner = FixedScanner()
monitor = Monitor(scanner, interval=1.0)
monitor.start()
scanner.open.append(Port(number=8080, protocol="tcp"))

change = monitor.changes.get(timeout=5)
Alerter().notify(change)   # [<time>] [+] port 8080/tcp OPENED
monitor.stop()
```

## Configuration files

Configuration files are JSON. Every key is optional; anything left out keeps
its default:

```json
{
  "ports": [22, 80, 443],
  "protocols": ["tcp", "udp"],
  "interval_seconds": 30,
  "alert_log": "alerts.log",
  "snapshot_dir": ".portwatch/snapshots",
  "retain_days": 30
}
```

Protocols must be `tcp` or `udp`, the interval at least one second and
`retain_days` at least one.

## What it does not do

- It does not scan ports itself. `Monitor` and `baseline.capture` call the
  `scan` method of a scanner object that you supply.
- It has no command-line program or daemon; it is a library to build one
  with. The settings in `Config` (such as `alert_log` and `snapshot_dir`)
  are loaded and validated but not acted on by the package.

## Requirements

Python 3.10 or later. The package uses only the standard library; the tests
use pytest (`pip install .[test]`).