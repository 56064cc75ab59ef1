"""
Unit tests for paramtweak/params/system.py.

Tests:
- Listen token splitting
- Address resolution through getaddrinfo
- Account lookups
"""

import os
import socket

import pytest

from paramtweak.params.system import (
    ResolvedAddress,
    SystemIdentity,
    resolve,
    split_address,
)


class TestSplitAddress:
    """Test host/port splitting of listen tokens."""

    @pytest.mark.parametrize("text,expected", [
        ("localhost:8080", ("localhost", "8080")),
        ("localhost 8080", ("localhost", "8080")),
        (":80", (None, "80")),
        ("localhost", ("localhost", None)),
        ("[::1]:80", ("::1", "80")),
        ("[::1]", ("::1", None)),
    ])
    def test_split(self, text, expected):
        assert split_address(text) == expected

    @pytest.mark.parametrize("text", ["[]:80", "[::1", "[::1]x80"])
    def test_malformed_brackets(self, text):
        assert split_address(text) is None


class TestResolve:
    """Test resolution with a patched getaddrinfo."""

    def test_uses_service_when_no_port(self, monkeypatch):
        calls = []

        def fake_getaddrinfo(host, port, family, socktype, proto, flags):
            calls.append((host, port, flags))
            return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", 80))]

        monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)
        addrs = resolve("localhost", "http")

        assert calls == [("localhost", "http", socket.AI_PASSIVE)]
        assert addrs == [ResolvedAddress(socket.AF_INET, socket.SOCK_STREAM, 6, ("127.0.0.1", 80))]
        assert str(addrs[0]) == "127.0.0.1:80"

    def test_port_overrides_service(self, monkeypatch):
        calls = []

        def fake_getaddrinfo(host, port, *args):
            calls.append((host, port))
            return []

        monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)
        assert resolve(":8080", "http") == []
        assert calls == [(None, "8080")]

    def test_failure_resolves_to_nothing(self, monkeypatch):
        def fake_getaddrinfo(*args):
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")

        monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)
        assert resolve("bad-token") == []

    def test_malformed_token_skips_lookup(self, monkeypatch):
        def fake_getaddrinfo(*args):
            raise AssertionError("should not resolve")

        monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)
        assert resolve("[::1") == []

    def test_ipv6_display(self):
        addr = ResolvedAddress(socket.AF_INET6, socket.SOCK_STREAM, 6, ("::1", 80, 0, 0))
        assert addr.host == "::1"
        assert addr.port == 80
        assert str(addr) == "[::1]:80"


@pytest.mark.skipif(not hasattr(os, "getuid"), reason="POSIX accounts only")
class TestSystemIdentity:
    """Test lookups against the local account database."""

    def test_root_user(self):
        assert SystemIdentity().lookup_user("root") == (0, "root")

    def test_unknown_user(self):
        assert SystemIdentity().lookup_user("no-such-user-xyz") is None

    def test_unknown_group(self):
        assert SystemIdentity().lookup_group("no-such-group-xyz") is None

    def test_real_ids(self):
        identity = SystemIdentity()
        assert identity.real_uid() == os.getuid()
        assert identity.real_gid() == os.getgid()
