from portwatch.counting import CountSnapshot, Counter
from portwatch.ports import Port


def ports(*protocols):
    return [Port(number=i + 1, protocol=proto, address="127.0.0.1") for i, proto in enumerate(protocols)]


def test_record_counts_total():
    snap = Counter().record(ports("tcp", "tcp", "udp"))
    assert snap.total == 3


def test_record_counts_tcp():
    snap = Counter().record(ports("tcp", "tcp"))
    assert snap.tcp == 2
    assert snap.udp == 0


def test_record_counts_udp():
    snap = Counter().record(ports("udp", "udp", "udp"))
    assert snap.udp == 3


def test_other_protocols_count_only_in_total():
    snap = Counter().record(ports("sctp", "tcp"))
    assert snap == CountSnapshot(total=2, tcp=1, udp=0)


def test_last_returns_latest():
    c = Counter()
    c.record(ports("tcp"))
    c.record(ports("tcp", "udp"))
    assert c.last().total == 2


def test_last_before_record_is_zero():
    assert Counter().last() == CountSnapshot(0, 0, 0)


def test_summary_contains_fields():
    c = Counter()
    c.record(ports("tcp", "udp"))
    assert c.summary() == "open ports: total=2 tcp=1 udp=1"


def test_empty_ports_returns_zero_snapshot():
    assert Counter().record(None) == CountSnapshot(total=0, tcp=0, udp=0)