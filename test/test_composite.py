"""
Unit tests for identity and composite tweaks.

Tests:
- User/group identity, including the empty-text reset
- Listen address lists and their all-or-nothing replacement
- Pool sizing triples and the min_pool <= max_pool invariant
"""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from paramtweak.params.buffer import OutputBuffer
from paramtweak.params.codecs import UINT_MAX
from paramtweak.params.context import ListenSock
from paramtweak.params.models import Identity, PoolParam, StorageKind
from paramtweak.params.tweaks import (
    tweak_group,
    tweak_listen_address,
    tweak_poolparam,
    tweak_user,
)

from conftest import v4


def run(ctx, func, par, arg=None):
    vsb = OutputBuffer()
    ok = func(ctx, vsb, par, arg)
    return ok, vsb.getvalue()


# =============================================================================
# Identity Tests
# =============================================================================

class TestUser:
    """Test the user identity tweak."""

    @pytest.fixture
    def par(self, spec_factory):
        return spec_factory(StorageKind.IDENTITY, name="user", default="")

    def test_query_without_name(self, ctx, par):
        assert run(ctx, tweak_user, par) == (True, "UID 0")

    def test_set_known_user(self, ctx, par):
        assert run(ctx, tweak_user, par, "www") == (True, "")
        assert ctx.params.get("user") == Identity(name="www-data", id=33)
        assert run(ctx, tweak_user, par) == (True, "www-data (33)")

    def test_unknown_user_leaves_value(self, ctx, par):
        run(ctx, tweak_user, par, "nobody")
        ok, out = run(ctx, tweak_user, par, "mallory")
        assert ok is False
        assert out.strip() == "Unknown user"
        assert ctx.params.get("user") == Identity(name="nobody", id=65534)

    def test_empty_resets_to_real_uid(self, ctx, par):
        """Empty text never fails and keeps the cached name."""
        run(ctx, tweak_user, par, "nobody")
        assert run(ctx, tweak_user, par, "") == (True, "")
        assert ctx.params.get("user") == Identity(name="nobody", id=1000)

    def test_empty_on_fresh_slot(self, ctx, par):
        assert run(ctx, tweak_user, par, "")[0] is True
        assert run(ctx, tweak_user, par) == (True, "UID 1000")


class TestGroup:
    """Test the group identity tweak."""

    @pytest.fixture
    def par(self, spec_factory):
        return spec_factory(StorageKind.IDENTITY, name="group", default="")

    def test_set_and_query(self, ctx, par):
        assert run(ctx, tweak_group, par, "nogroup")[0] is True
        assert run(ctx, tweak_group, par) == (True, "nogroup (65534)")

    def test_unknown_group(self, ctx, par):
        ok, out = run(ctx, tweak_group, par, "wheel")
        assert ok is False
        assert "Unknown group" in out
        assert run(ctx, tweak_group, par) == (True, "GID 0")

    def test_empty_resets_to_real_gid(self, ctx, par):
        run(ctx, tweak_group, par, "")
        assert run(ctx, tweak_group, par) == (True, "GID 1001")


# =============================================================================
# Listen Address Tests
# =============================================================================

class TestListenAddress:
    """Test listen address resolution and replacement."""

    @pytest.fixture
    def par(self, spec_factory):
        return spec_factory(StorageKind.ADDRESS_LIST, name="listen_address")

    def test_set_builds_sockets(self, ctx, par):
        assert run(ctx, tweak_listen_address, par, "a.example:80,b.example:8080") == (True, "")
        heritage = ctx.heritage
        assert heritage.nsocks == 3
        assert [ls.name for ls in heritage.socks] == [
            "a.example:80", "b.example:8080", "b.example:8080",
        ]
        assert all(ls.sock is None for ls in heritage.socks)
        assert heritage.socks[0].addr == v4("192.0.2.1", 80)

    def test_query_reports_last_argument(self, ctx, par):
        run(ctx, tweak_listen_address, par, "a.example:80,b.example:8080")
        assert run(ctx, tweak_listen_address, par) == (True, "a.example:80,b.example:8080")

    def test_query_quotes_spaces(self, ctx, par):
        run(ctx, tweak_listen_address, par, "a.example:80 localhost:8080")
        ok, out = run(ctx, tweak_listen_address, par)
        assert out == '"a.example:80 localhost:8080"'
        assert run(ctx, tweak_listen_address, par, out)[0] is True
        assert ctx.heritage.nsocks == 2

    def test_quoted_argument_stored_unquoted(self, ctx, par):
        """Quoted input is kept in the form the query quotes back."""
        quoted = '"a.example:80 localhost:8080"'
        assert run(ctx, tweak_listen_address, par, quoted)[0] is True
        assert ctx.params.get("listen_address") == "a.example:80 localhost:8080"
        assert run(ctx, tweak_listen_address, par) == (True, quoted)
        assert ctx.heritage.nsocks == 2

    def test_uses_default_service(self, ctx, par, resolver):
        run(ctx, tweak_listen_address, par, ":80")
        assert resolver.calls == [(":80", "http")]

    def test_bad_token_leaves_live_list(self, ctx, par):
        """Partial resolution never becomes visible."""
        run(ctx, tweak_listen_address, par, ":80")
        socks = ctx.heritage.socks
        before = list(socks)

        ok, out = run(ctx, tweak_listen_address, par, "a.example:80,bad-token")

        assert ok is False
        assert "Invalid listen address bad-token" in out
        assert ctx.heritage.socks is socks
        assert ctx.heritage.socks == before
        assert ctx.heritage.nsocks == 2
        assert ctx.params.get("listen_address") == ":80"

    def test_old_sockets_released(self, ctx, par):
        run(ctx, tweak_listen_address, par, "a.example:80")
        old = ctx.heritage.socks
        handle = MagicMock()
        old[0].sock = handle

        assert run(ctx, tweak_listen_address, par, "localhost:8080")[0] is True

        handle.close.assert_called_once()
        assert old == []
        assert [ls.name for ls in ctx.heritage.socks] == ["localhost:8080"]
        assert ctx.heritage.nsocks == 1

    @pytest.mark.parametrize("text", ["", "   ", ","])
    def test_empty_listen_address(self, ctx, par, text):
        ok, out = run(ctx, tweak_listen_address, par, text)
        if text == ",":
            # A lone comma yields one empty token, which cannot resolve
            assert "Invalid listen address" in out
        else:
            assert "Empty listen address" in out
        assert ok is False
        assert ctx.heritage.nsocks == 0

    def test_parse_error(self, ctx, par):
        ok, out = run(ctx, tweak_listen_address, par, '"a.example:80')
        assert ok is False
        assert out.startswith("Parse error: Missing")


class TestListenSock:
    """Test listen-socket records."""

    def test_close_releases_handle_once(self):
        handle = MagicMock()
        ls = ListenSock(name=":80", addr=v4("0.0.0.0", 80), sock=handle)
        ls.close()
        ls.close()
        handle.close.assert_called_once()
        assert ls.sock is None


# =============================================================================
# Pool Parameter Tests
# =============================================================================

class TestPoolParam:
    """Test pool sizing triples."""

    @pytest.fixture
    def par(self, spec_factory):
        return spec_factory(StorageKind.POOL, name="pool_req", min=0, max=1000)

    def test_set_and_query(self, ctx, par):
        assert run(ctx, tweak_poolparam, par, "5,10,1.0") == (True, "")
        assert ctx.params.get("pool_req") == PoolParam(min_pool=5, max_pool=10, max_age=1.0)
        assert run(ctx, tweak_poolparam, par) == (True, "5,10,1.000000")

    def test_query_round_trips(self, ctx, par):
        run(ctx, tweak_poolparam, par, "1, 2, 0.25")
        text = run(ctx, tweak_poolparam, par)[1]
        value = ctx.params.get("pool_req")
        assert run(ctx, tweak_poolparam, par, text)[0] is True
        assert ctx.params.get("pool_req") == value

    def test_fine_max_age_round_trips(self, ctx, par):
        assert run(ctx, tweak_poolparam, par, "1,2,1.0000001")[0] is True
        text = run(ctx, tweak_poolparam, par)[1]
        assert text == "1,2,1.0000001"
        assert run(ctx, tweak_poolparam, par, text)[0] is True
        assert ctx.params.get("pool_req").max_age == 1.0000001

    def test_min_above_max(self, ctx, par):
        run(ctx, tweak_poolparam, par, "5,10,1.0")
        ok, out = run(ctx, tweak_poolparam, par, "10,5,1.0")
        assert ok is False
        assert "min_pool cannot be larger than max_pool" in out
        assert ctx.params.get("pool_req") == PoolParam(min_pool=5, max_pool=10, max_age=1.0)

    @pytest.mark.parametrize("text", ["1,2", "1,2,3,4", "1,,3", ""])
    def test_three_fields_required(self, ctx, par, text):
        ok, out = run(ctx, tweak_poolparam, par, text)
        assert ok is False
        assert "Three fields required: min_pool, max_pool and max_age" in out

    @pytest.mark.parametrize("text,message", [
        ("1,2000,1", "Must be no more than 1000"),
        ("x,2,1", "Not a number (x)"),
        ("1,2,-1", "Timeout must be greater or equal to 0"),
        ("1,2,2000000", "Timeout must be less than or equal to 1e+06"),
        ("1,2,soon", "Not a number(soon)"),
    ])
    def test_field_diagnostic(self, ctx, par, text, message):
        """The first failing field's own message is reported."""
        run(ctx, tweak_poolparam, par, "5,10,1.0")
        ok, out = run(ctx, tweak_poolparam, par, text)
        assert ok is False
        assert message in out
        assert ctx.params.get("pool_req").min_pool == 5

    def test_unlimited_max_pool(self, ctx, spec_factory):
        par = spec_factory(StorageKind.POOL, name="pool_sess", min=0, max=UINT_MAX)
        assert run(ctx, tweak_poolparam, par, "10,unlimited,10")[0] is True
        assert ctx.params.get("pool_sess").max_pool == UINT_MAX
        assert run(ctx, tweak_poolparam, par) == (True, "10,4294967295,10.000000")

    def test_model_enforces_invariant(self):
        with pytest.raises(ValidationError):
            PoolParam(min_pool=3, max_pool=2, max_age=0)
