import json
from datetime import datetime, timedelta, timezone

import pytest

from portwatch.history import (
    ChangeEvent,
    EventType,
    History,
    HistoryEvent,
    HistoryRecorder,
    load,
    prune,
    save,
)
from portwatch.ports import Port


def make_port(proto, num):
    return Port(number=num, protocol=proto)


def test_append_and_load(tmp_path):
    path = tmp_path / "history.json"
    h = History()
    h.append(EventType.OPENED, make_port("tcp", 8080))
    h.append(EventType.CLOSED, make_port("udp", 53))
    assert len(h.events) == 2

    save(path, h)
    loaded = load(path)
    assert len(loaded.events) == 2
    assert loaded.events[0].event_type == EventType.OPENED
    assert loaded.events[1].port.number == 53
    assert loaded == h


def test_load_missing_file_returns_empty():
    h = load("/nonexistent/path/history.json")
    assert h.events == []


def test_load_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("not json{")
    with pytest.raises(ValueError):
        load(path)


def test_prune_removes_old_events():
    now = datetime.now(timezone.utc)
    old = HistoryEvent(timestamp=now - timedelta(hours=2), event_type=EventType.OPENED, port=make_port("tcp", 22))
    recent = HistoryEvent(timestamp=now - timedelta(minutes=1), event_type=EventType.CLOSED, port=make_port("tcp", 443))
    h = History(events=[old, recent])
    trimmed = prune(h, timedelta(minutes=30))
    assert len(trimmed.events) == 1
    assert trimmed.events[0].port.number == 443
    assert len(h.events) == 2


def test_save_produces_valid_json(tmp_path):
    path = tmp_path / "history.json"
    h = History()
    h.append(EventType.OPENED, make_port("tcp", 9090))
    save(path, h)
    raw = json.loads(path.read_text())
    assert raw["events"][0]["type"] == "opened"
    assert raw["events"][0]["port"]["number"] == 9090


def test_recorder_writes_events(tmp_path):
    path = tmp_path / "history.json"
    events = [
        ChangeEvent(EventType.OPENED, make_port("tcp", 80)),
        ChangeEvent(EventType.CLOSED, make_port("tcp", 80)),
    ]
    HistoryRecorder(path, timedelta(hours=1), events).run()
    loaded = load(path)
    assert [e.event_type for e in loaded.events] == [EventType.OPENED, EventType.CLOSED]


def test_recorder_stop_prevents_recording(tmp_path):
    path = tmp_path / "history.json"
    rec = HistoryRecorder(path, None, [ChangeEvent(EventType.OPENED, make_port("tcp", 80))])
    rec.stop()
    rec.run()
    assert not path.exists()


def test_recorder_recovers_from_corrupt_file(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("garbage")
    HistoryRecorder(path, 0, [ChangeEvent(EventType.CLOSED, make_port("udp", 53))]).run()
    loaded = load(path)
    assert len(loaded.events) == 1
    assert loaded.events[0].port == make_port("udp", 53)