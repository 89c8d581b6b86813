import json
from datetime import datetime, timezone

from portwatch.healthcheck import HealthChecker, HealthStatus


def temp_path(tmp_path):
    return tmp_path / "health.json"


def test_new_defaults(tmp_path):
    c = HealthChecker(temp_path(tmp_path))
    s = c.get()
    assert s.healthy is True
    assert s.scan_count == 0
    assert s.alert_count == 0
    assert s.started_at is not None and s.last_scan is None


def test_record_scan_increments_count(tmp_path):
    c = HealthChecker(temp_path(tmp_path))
    c.record_scan()
    c.record_scan()
    assert c.get().scan_count == 2


def test_record_alert_increments_count(tmp_path):
    c = HealthChecker(temp_path(tmp_path))
    c.record_alert()
    assert c.get().alert_count == 1


def test_set_healthy(tmp_path):
    c = HealthChecker(temp_path(tmp_path))
    c.set_healthy(False)
    assert c.get().healthy is False
    c.set_healthy(True)
    assert c.get().healthy is True


def test_flush_writes_json(tmp_path):
    p = temp_path(tmp_path)
    c = HealthChecker(p)
    c.record_scan()
    c.record_alert()
    data = json.loads(p.read_text())
    assert data["scan_count"] == 1
    assert data["alert_count"] == 1
    s = HealthStatus.from_dict(data)
    assert s == c.get()


def test_last_scan_updated(tmp_path):
    c = HealthChecker(temp_path(tmp_path))
    before = datetime.now(timezone.utc)
    c.record_scan()
    after = datetime.now(timezone.utc)
    ls = c.get().last_scan
    assert before <= ls <= after


def test_unwritable_path_still_updates_status(tmp_path):
    c = HealthChecker(tmp_path / "missing" / "health.json")
    c.record_scan()
    assert c.get().scan_count == 1
    assert not (tmp_path / "missing").exists()