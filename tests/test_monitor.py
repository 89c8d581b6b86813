import queue
import threading
import time

import pytest

from portwatch.monitor import Change, Monitor
from portwatch.ports import Port


class FakeScanner:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0
        self.error = None
        self.scanned = threading.Event()

    def scan(self):
        self.calls += 1
        error = self.error
        result = list(self.results)
        self.scanned.set()
        if error is not None:
            raise error
        return result


def test_baseline_poll_emits_nothing():
    scanner = FakeScanner(Port(80, "tcp"))
    m = Monitor(scanner, 1)
    m.poll(True)
    assert m.changes.qsize() == 0


def test_poll_detects_opened_port():
    scanner = FakeScanner()
    m = Monitor(scanner, 1)
    m.poll(True)
    scanner.results = [Port(8080, "tcp")]
    m.poll(False)
    assert m.changes.get_nowait() == Change(Port(8080, "tcp"), True)
    assert m.changes.qsize() == 0


def test_poll_detects_closed_port():
    scanner = FakeScanner(Port(22, "tcp"), Port(80, "tcp"))
    m = Monitor(scanner, 1)
    m.poll(True)
    scanner.results = [Port(80, "tcp")]
    m.poll(False)
    assert m.changes.get_nowait() == Change(Port(22, "tcp"), False)
    assert m.changes.qsize() == 0


def test_unchanged_scan_emits_nothing():
    scanner = FakeScanner(Port(80, "tcp"))
    m = Monitor(scanner, 1)
    m.poll(True)
    m.poll(False)
    assert m.changes.qsize() == 0


def test_poll_propagates_scanner_error_and_keeps_previous():
    scanner = FakeScanner(Port(80, "tcp"))
    m = Monitor(scanner, 1)
    m.poll(True)
    scanner.error = OSError("boom")
    with pytest.raises(OSError):
        m.poll(False)
    scanner.error = None
    m.poll(False)
    assert m.changes.qsize() == 0


def test_background_monitor_detects_opened_port():
    scanner = FakeScanner()
    m = Monitor(scanner, 0.02)
    m.start()
    try:
        assert scanner.scanned.wait(1)
        scanner.results = [Port(9090, "tcp")]
        change = m.changes.get(timeout=1)
    finally:
        m.stop()
    assert change == Change(Port(9090, "tcp"), True)


def test_background_monitor_detects_closed_port():
    scanner = FakeScanner(Port(9091, "tcp"))
    m = Monitor(scanner, 0.02)
    m.start()
    try:
        assert scanner.scanned.wait(1)
        scanner.results = []
        change = m.changes.get(timeout=1)
    finally:
        m.stop()
    assert change.opened is False
    assert change.port.number == 9091


def test_stop_halts_polling():
    scanner = FakeScanner()
    m = Monitor(scanner, 0.01)
    m.start()
    assert scanner.scanned.wait(1)
    m.stop()
    calls = scanner.calls
    time.sleep(0.1)
    assert scanner.calls == calls


def test_start_twice_raises():
    m = Monitor(FakeScanner(), 0.05)
    m.start()
    try:
        with pytest.raises(RuntimeError):
            m.start()
    finally:
        m.stop()


def test_changes_queue_starts_empty():
    m = Monitor(FakeScanner(), 1)
    with pytest.raises(queue.Empty):
        m.changes.get_nowait()