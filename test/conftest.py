"""
Shared fixtures and configuration for paramtweak tests.
"""

import socket

import pytest

from paramtweak.params.buffer import OutputBuffer
from paramtweak.params.context import ParamBlock, TweakContext
from paramtweak.params.models import ParamSpec, StorageKind
from paramtweak.params.system import ResolvedAddress


# =============================================================================
# Collaborator Fakes
# =============================================================================

class FakeResolver:
    """Resolver over a fixed table of token -> addresses."""

    def __init__(self, table):
        self.table = table
        self.calls = []

    def __call__(self, text, service):
        self.calls.append((text, service))
        return list(self.table.get(text, []))


class FakeIdentity:
    """Account database with a handful of known users and groups."""

    def __init__(self):
        self.users = {"nobody": (65534, "nobody"), "www": (33, "www-data")}
        self.groups = {"nogroup": (65534, "nogroup"), "www": (33, "www-data")}

    def lookup_user(self, name):
        return self.users.get(name)

    def lookup_group(self, name):
        return self.groups.get(name)

    def real_uid(self):
        return 1000

    def real_gid(self):
        return 1001


def v4(host, port):
    return ResolvedAddress(socket.AF_INET, socket.SOCK_STREAM, 6, (host, port))


def v6(host, port):
    return ResolvedAddress(socket.AF_INET6, socket.SOCK_STREAM, 6, (host, port, 0, 0))


# =============================================================================
# Context Fixtures
# =============================================================================

@pytest.fixture
def resolver():
    """Resolver knowing a few hosts; everything else resolves to nothing."""
    return FakeResolver({
        "a.example:80": [v4("192.0.2.1", 80)],
        "b.example:8080": [v4("192.0.2.2", 8080), v6("2001:db8::2", 8080)],
        ":80": [v4("0.0.0.0", 80), v6("::", 80)],
        "localhost:8080": [v4("127.0.0.1", 8080)],
    })


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def ctx(resolver, identity):
    """Fresh tweak context with fake OS collaborators."""
    return TweakContext(params=ParamBlock(), resolver=resolver, identity=identity)


@pytest.fixture
def vsb():
    return OutputBuffer()


def make_spec(kind, name="param", **kwargs):
    """Build a descriptor whose slot key equals its name."""
    return ParamSpec(name=name, kind=kind, priv=name, **kwargs)


@pytest.fixture
def spec_factory():
    return make_spec


@pytest.fixture
def uint_spec():
    return make_spec(StorageKind.UINT, name="thread_pools", min=1, max=100)
