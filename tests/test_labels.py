import threading

import pytest

from portwatch.labels import Annotated, annotate, annotate_ports, label
from portwatch.ports import Port


def test_label_known_port():
    assert label(80, "tcp") == "http"


def test_label_falls_back_to_generic():
    assert label(53, "") == "dns"


def test_label_protocol_specific_falls_back_to_generic():
    assert label(22, "udp") == "ssh"
    assert label(5432, "tcp") == "postgres"


def test_label_unknown_port():
    assert label(9999, "tcp") == ""


@pytest.mark.parametrize("number", [0, 1, 65535])
def test_label_unlisted_numbers_are_empty(number):
    assert label(number, "tcp") == ""


def test_annotate_known_port():
    assert annotate(443, "tcp") == "https"


def test_annotate_unknown_returns_unknown():
    assert annotate(19999, "tcp") == "unknown"


def test_annotate_ports_labels_each_port():
    ports = [Port(80, "tcp"), Port(53, "udp"), Port(19999, "tcp")]
    result = list(annotate_ports(ports))
    assert result == [
        Annotated(Port(80, "tcp"), "http"),
        Annotated(Port(53, "udp"), "dns"),
        Annotated(Port(19999, "tcp"), "unknown"),
    ]


def test_annotate_ports_stops_when_stop_set():
    stop = threading.Event()
    stop.set()
    assert list(annotate_ports([Port(80, "tcp")], stop)) == []


def test_annotate_ports_stops_midway():
    stop = threading.Event()
    gen = annotate_ports([Port(80, "tcp"), Port(443, "tcp")], stop)
    first = next(gen)
    stop.set()
    assert first.label == "http"
    assert list(gen) == []