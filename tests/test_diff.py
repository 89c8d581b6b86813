import threading

from portwatch.diff import DiffSummary, compare, diff_pipeline
from portwatch.ports import Port


def test_compare_detects_opened():
    s = compare([Port(80, "tcp")], [Port(80, "tcp"), Port(443, "tcp")])
    assert [p.number for p in s.opened] == [443]
    assert s.closed == []


def test_compare_detects_closed():
    s = compare([Port(80, "tcp"), Port(8080, "tcp")], [Port(80, "tcp")])
    assert [p.number for p in s.closed] == [8080]
    assert s.opened == []


def test_summary_empty():
    s = compare([Port(80, "tcp")], [Port(80, "tcp")])
    assert s.is_empty() is True


def test_protocol_matters():
    s = compare([Port(53, "tcp")], [Port(53, "udp")])
    assert s.opened == [Port(53, "udp")]
    assert s.closed == [Port(53, "tcp")]


def test_summary_string():
    s = DiffSummary(opened=[Port(443, "tcp")], closed=[Port(8080, "tcp")])
    assert str(s) == "+ 443/tcp\n- 8080/tcp"


def test_pipeline_emits_diff():
    events = list(diff_pipeline([[Port(80, "tcp")], [Port(80, "tcp"), Port(443, "tcp")]]))
    assert len(events) == 1
    assert [p.number for p in events[0].summary.opened] == [443]


def test_pipeline_skips_unchanged_samples():
    samples = [[Port(80, "tcp")], [Port(80, "tcp")], [], []]
    events = list(diff_pipeline(samples))
    assert len(events) == 1
    assert events[0].summary.closed == [Port(80, "tcp")]


def test_pipeline_stops_when_stop_set():
    stop = threading.Event()
    stop.set()
    assert list(diff_pipeline([[Port(80, "tcp")], [Port(443, "tcp")]], stop)) == []