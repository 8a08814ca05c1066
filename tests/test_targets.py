import socket

import pytest

from hostrecon import targets
from hostrecon.errors import InvalidTarget, ResolutionFailure
from hostrecon.targets import resolve_target


def test_ipv4_literal():
    t = resolve_target(" 10.0.0.5 ")
    assert t.ip == "10.0.0.5"
    assert t.target == "10.0.0.5"
    assert t.version == 4


def test_ipv6_literal_with_brackets():
    t = resolve_target("[::1]")
    assert t.ip == "::1"
    assert t.version == 6


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_empty_target(raw):
    with pytest.raises(InvalidTarget):
        resolve_target(raw)


@pytest.mark.parametrize("raw", ["10.0.0.0/24", "bad host", "-leading.example", "999.1.1.1", "a..b"])
def test_malformed_target(raw):
    with pytest.raises(InvalidTarget):
        resolve_target(raw)


def test_hostname_resolves(monkeypatch):
    def fake_getaddrinfo(host, port, proto=0):
        assert host == "scanme.example"
        return [
            (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("2001:db8::1", 0, 0, 0)),
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("93.184.216.34", 0)),
        ]

    monkeypatch.setattr(targets.socket, "getaddrinfo", fake_getaddrinfo)
    t = resolve_target("scanme.example")
    assert t.target == "scanme.example"
    assert t.ip == "93.184.216.34"
    assert t.version == 4


def test_resolution_failure(monkeypatch):
    def fail(host, port, proto=0):
        raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")

    monkeypatch.setattr(targets.socket, "getaddrinfo", fail)
    with pytest.raises(ResolutionFailure):
        resolve_target("nowhere.invalid")


def test_resolution_failure_is_an_invalid_target(monkeypatch):
    monkeypatch.setattr(targets.socket, "getaddrinfo", lambda host, port, proto=0: [])
    with pytest.raises(InvalidTarget):
        resolve_target("empty.example")
