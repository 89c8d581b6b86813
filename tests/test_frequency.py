import io
import threading
from datetime import datetime, timedelta

from portwatch.frequency import FrequencyTracker, frequency_pipeline, print_top, summary
from portwatch.ports import Port


def p(proto, addr):
    return Port(number=0, protocol=proto, address=addr)


NOW = datetime(2024, 1, 1, 0, 0, 0)


def test_record_increments_count():
    tr = FrequencyTracker()
    tr.record(p("tcp", "0.0.0.0:80"), NOW)
    tr.record(p("tcp", "0.0.0.0:80"), NOW + timedelta(seconds=1))
    top = tr.top(10)
    assert len(top) == 1
    assert top[0].seen_count == 2


def test_top_limits_results():
    tr = FrequencyTracker()
    for _ in range(5):
        tr.record(p("tcp", "0.0.0.0:80"), NOW)
    tr.record(p("tcp", "0.0.0.0:443"), NOW)
    top = tr.top(1)
    assert len(top) == 1
    assert top[0].port.address == "0.0.0.0:80"


def test_top_sorted_by_count():
    tr = FrequencyTracker()
    tr.record(p("tcp", "0.0.0.0:22"), NOW)
    for _ in range(3):
        tr.record(p("tcp", "0.0.0.0:443"), NOW)
    top = tr.top(0)
    assert [e.port.address for e in top] == ["0.0.0.0:443", "0.0.0.0:22"]


def test_reset_clears_data():
    tr = FrequencyTracker()
    tr.record(p("tcp", "0.0.0.0:80"), NOW)
    tr.reset()
    assert tr.top(10) == []


def test_first_and_last_seen():
    tr = FrequencyTracker()
    t1 = NOW
    t2 = NOW + timedelta(minutes=1)
    tr.record(p("tcp", "0.0.0.0:80"), t1)
    tr.record(p("tcp", "0.0.0.0:80"), t2)
    e = tr.top(1)[0]
    assert e.first_seen == t1
    assert e.last_seen == t2


def test_protocol_distinguishes_entries():
    tr = FrequencyTracker()
    tr.record(p("tcp", "0.0.0.0:53"), NOW)
    tr.record(p("udp", "0.0.0.0:53"), NOW)
    assert len(tr.top(0)) == 2


def test_pipeline_records_and_forwards():
    tr = FrequencyTracker()
    out = list(frequency_pipeline(tr, [[p("tcp", "0.0.0.0:80"), p("tcp", "0.0.0.0:443")]]))
    assert len(out) == 1
    assert len(out[0]) == 2
    assert len(tr.top(10)) == 2


def test_pipeline_stops_on_stop_event():
    tr = FrequencyTracker()
    stop = threading.Event()
    stop.set()
    assert list(frequency_pipeline(tr, [[p("tcp", "0.0.0.0:80")]], stop)) == []
    assert tr.top(10) == []


def test_pipeline_stops_on_closed_input():
    tr = FrequencyTracker()
    assert list(frequency_pipeline(tr, [])) == []


def test_print_top_columns_aligned():
    tr = FrequencyTracker()
    tr.record(p("tcp", "0.0.0.0:80"), NOW)
    tr.record(p("tcp", "0.0.0.0:80"), NOW + timedelta(minutes=1))
    buf = io.StringIO()
    print_top(buf, tr, 5)
    header, row = buf.getvalue().splitlines()
    assert header.startswith("PROTO")
    assert row.startswith("tcp")
    assert row.index("0.0.0.0:80") == header.index("ADDR")
    assert row.index("2024-01-01 00:00:00") == header.index("FIRST SEEN")
    assert row.index("2024-01-01 00:01:00") == header.index("LAST SEEN")
    assert row.endswith("2024-01-01 00:01:00")


def test_print_top_empty_has_header_only():
    buf = io.StringIO()
    print_top(buf, FrequencyTracker(), 5)
    lines = buf.getvalue().splitlines()
    assert len(lines) == 1
    assert lines[0].split() == ["PROTO", "ADDR", "COUNT", "FIRST", "SEEN", "LAST", "SEEN"]


def test_summary():
    tr = FrequencyTracker()
    assert summary(tr) == "no frequency data"
    tr.record(p("tcp", "0.0.0.0:80"), NOW)
    tr.record(p("tcp", "0.0.0.0:80"), NOW)
    assert summary(tr) == "most frequent: tcp 0.0.0.0:80 (2 scans)"