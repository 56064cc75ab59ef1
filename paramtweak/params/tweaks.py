"""
Tweak operations for runtime parameters.

Every operation has the same shape::

    tweak(ctx, vsb, par, arg) -> bool

With ``arg=None`` the current value is written to ``vsb`` in a form that,
fed back as ``arg``, reproduces it. Otherwise ``arg`` is parsed and
validated; on success the live value is replaced in a single store and
nothing is written, on failure the reason is written and the live value
is left exactly as it was.
"""

import functools
import logging
import selectors
from typing import Callable, List, Optional

from paramtweak.params.buffer import OutputBuffer
from paramtweak.params.codecs import (
    SSIZE_MAX,
    UINT_MAX,
    fmt_bytes,
    fmt_double,
    parse_bytes,
    parse_double,
    parse_uint,
    quote,
    split_args,
    unquote,
)
from paramtweak.params.context import ListenSock, TweakContext, clean_listen_socks
from paramtweak.params.errors import (
    CapacityError,
    InvariantError,
    LookupFailure,
    ParseError,
    RangeError,
    StructuralError,
    TweakError,
    VocabularyError,
)
from paramtweak.params.models import Identity, ParamSpec, PoolParam, StorageKind

logger = logging.getLogger(__name__)


TweakFunc = Callable[[TweakContext, OutputBuffer, ParamSpec, Optional[str]], bool]


def reports_errors(func: TweakFunc) -> TweakFunc:
    """Turn a TweakError raised by a tweak into buffer text and a False return."""

    @functools.wraps(func)
    def wrapper(ctx, vsb, par, arg=None):
        try:
            return func(ctx, vsb, par, arg)
        except TweakError as e:
            vsb.write(e.message if e.message.endswith("\n") else e.message + "\n")
            logger.debug(f"Rejected {par.name}={arg!r} ({e.kind}): {e.message.strip()}")
            return False

    return wrapper


# =============================================================================
# Validators
# =============================================================================

def generic_timeout(arg: str) -> int:
    """Validate a whole-second timeout; anything unparsable counts as zero."""
    value = parse_uint(arg) or 0
    if value == 0:
        raise RangeError("Timeout must be greater than zero")
    if value > UINT_MAX:
        raise RangeError(f"Timeout must be no more than {UINT_MAX}")
    return value


def generic_timeout_double(arg: str, lo: float, hi: float) -> float:
    """Validate a fractional-second timeout within [lo, hi]."""
    value = parse_double(arg)
    if value is None:
        raise ParseError(f"Not a number({arg})")
    if value < lo:
        raise RangeError(f"Timeout must be greater or equal to {lo:g}")
    if value > hi:
        raise RangeError(f"Timeout must be less than or equal to {hi:g}")
    return value


def generic_double(arg: str, lo: float, hi: float) -> float:
    """Validate a real number within [lo, hi]."""
    value = parse_double(arg)
    if value is None:
        raise ParseError(f"Not a number ({arg})")
    if value < lo:
        raise RangeError(f"Must be greater or equal to {lo:g}")
    if value > hi:
        raise RangeError(f"Must be less than or equal to {hi:g}")
    return value


def generic_uint(arg: str, lo: int, hi: int) -> int:
    """Validate an unsigned count within [lo, hi]; ``unlimited`` is UINT_MAX."""
    if arg.lower() == "unlimited":
        value = UINT_MAX
    else:
        value = parse_uint(arg)
        if value is None:
            raise ParseError(f"Not a number ({arg})")
    if value < lo:
        raise RangeError(f"Must be at least {lo}")
    if value > hi:
        raise RangeError(f"Must be no more than {hi}")
    return value


def generic_bytes(arg: str, lo: float, hi: float) -> int:
    """
    Validate a byte count within [lo, hi].

    ``hi == 0`` means no upper bound. Bounds in messages are rendered with
    :func:`fmt_bytes`.
    """
    try:
        value = parse_bytes(arg)
    except ParseError as e:
        raise ParseError(
            "Could not convert to bytes.\n"
            f"{e.message}\n"
            "  Try something like '80k' or '120M'\n"
        ) from e
    if value > SSIZE_MAX:
        raise CapacityError(f"{fmt_bytes(value)} is too large for this architecture.\n")
    if hi != 0 and value > hi:
        raise RangeError(f"Must be no more than {fmt_bytes(int(hi))}\n")
    if value < lo:
        raise RangeError(f"Must be at least {fmt_bytes(int(lo))}\n")
    return value


def fmt_uint(value: int) -> str:
    return "unlimited" if value == UINT_MAX else str(value)


# =============================================================================
# Scalar Tweaks
# =============================================================================

@reports_errors
def tweak_timeout(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
                  arg: Optional[str] = None) -> bool:
    """Whole-second timeout, must be positive."""
    current = ctx.slot(par, StorageKind.UINT)
    if arg is None:
        vsb.write(f"{current}")
        return True
    ctx.commit(par, generic_timeout(arg))
    return True


@reports_errors
def tweak_timeout_double(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
                         arg: Optional[str] = None) -> bool:
    """Fractional-second timeout bounded by the descriptor."""
    current = ctx.slot(par, StorageKind.DOUBLE)
    if arg is None:
        vsb.write(fmt_double(current))
        return True
    ctx.commit(par, generic_timeout_double(arg, par.min, par.max))
    return True


@reports_errors
def tweak_generic_double(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
                         arg: Optional[str] = None) -> bool:
    current = ctx.slot(par, StorageKind.DOUBLE)
    if arg is None:
        vsb.write(fmt_double(current))
        return True
    ctx.commit(par, generic_double(arg, par.min, par.max))
    return True


_BOOL_SYNONYMS = {"disable": False, "no": False, "enable": True, "yes": True}
_ONOFF_WORDS = dict(_BOOL_SYNONYMS, off=False, on=True)
_TRUEFALSE_WORDS = dict(_BOOL_SYNONYMS, false=False, true=True)


@reports_errors
def tweak_bool(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
               arg: Optional[str] = None) -> bool:
    """
    Boolean switch.

    Parameters whose default is ``on`` or ``off`` speak ``on``/``off``;
    all others speak ``true``/``false``. Either way ``yes``/``no`` and
    ``enable``/``disable`` are accepted too, ignoring case.
    """
    onoff = par.default in ("on", "off")
    current = ctx.slot(par, StorageKind.BOOL)
    if arg is None:
        if onoff:
            vsb.write("on" if current else "off")
        else:
            vsb.write("true" if current else "false")
        return True

    words = _ONOFF_WORDS if onoff else _TRUEFALSE_WORDS
    value = words.get(arg.lower())
    if value is None:
        raise VocabularyError('use "on" or "off"' if onoff else 'use "true" or "false"')
    ctx.commit(par, value)
    return True


@reports_errors
def tweak_uint(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
               arg: Optional[str] = None) -> bool:
    """Unsigned count bounded by the descriptor; ``unlimited`` allowed."""
    current = ctx.slot(par, StorageKind.UINT)
    if arg is None:
        vsb.write(fmt_uint(current))
        return True
    ctx.commit(par, generic_uint(arg, int(par.min), int(par.max)))
    return True


@reports_errors
def tweak_bytes(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
                arg: Optional[str] = None) -> bool:
    """Byte count in a signed-size slot."""
    if par.min < 0:
        raise ValueError(f"Parameter {par.name} has a negative byte minimum")
    current = ctx.slot(par, StorageKind.SSIZE)
    if arg is None:
        vsb.write(fmt_bytes(current))
        return True
    ctx.commit(par, generic_bytes(arg, par.min, par.max))
    return True


@reports_errors
def tweak_bytes_u(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
                  arg: Optional[str] = None) -> bool:
    """Byte count in an unsigned slot; an open maximum is capped at UINT_MAX."""
    if par.min < 0 or par.max > UINT_MAX:
        raise ValueError(f"Parameter {par.name} has byte bounds outside the unsigned range")
    current = ctx.slot(par, StorageKind.UINT)
    if arg is None:
        vsb.write(fmt_bytes(current))
        return True
    ctx.commit(par, generic_bytes(arg, par.min, par.max or UINT_MAX))
    return True


@reports_errors
def tweak_string(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
                 arg: Optional[str] = None) -> bool:
    current = ctx.slot(par, StorageKind.STRING)
    if arg is None:
        vsb.quote(current)
        return True
    ctx.commit(par, unquote(arg))
    return True


def available_waiters() -> List[str]:
    """Event-loop back ends this platform provides, most preferred first."""
    candidates = [
        ("epoll", "EpollSelector"),
        ("kqueue", "KqueueSelector"),
        ("devpoll", "DevpollSelector"),
        ("poll", "PollSelector"),
        ("select", "SelectSelector"),
    ]
    return [name for name, cls in candidates if hasattr(selectors, cls)]


@reports_errors
def tweak_waiter(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
                 arg: Optional[str] = None) -> bool:
    """Event-loop back end; ``default`` picks the preferred one."""
    current = ctx.slot(par, StorageKind.STRING)
    if arg is None:
        vsb.write(current or "default")
        return True

    waiters = available_waiters()
    if arg == "default":
        ctx.commit(par, waiters[0])
        return True
    if arg not in waiters:
        raise VocabularyError(f"Unknown waiter (use one of: {', '.join(waiters)})")
    ctx.commit(par, arg)
    return True


# =============================================================================
# Identity Tweaks
# =============================================================================

def _tweak_identity(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
                    arg: Optional[str], lookup, real_id, what: str, label: str) -> bool:
    current = ctx.slot(par, StorageKind.IDENTITY)
    if arg is None:
        if current.name:
            vsb.write(f"{current.name} ({current.id})")
        else:
            vsb.write(f"{label} {current.id}")
        return True

    # Empty text must not fail: the configured account may not exist yet
    # when defaults are applied at startup.
    if arg == "":
        ctx.commit(par, Identity(name=current.name, id=real_id()))
        return True

    found = lookup(arg)
    if found is None:
        raise LookupFailure(f"Unknown {what}")
    numeric_id, name = found
    ctx.commit(par, Identity(name=name, id=numeric_id))
    return True


@reports_errors
def tweak_user(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
               arg: Optional[str] = None) -> bool:
    """Unprivileged user the serving side runs as."""
    return _tweak_identity(ctx, vsb, par, arg,
                           ctx.identity.lookup_user, ctx.identity.real_uid, "user", "UID")


@reports_errors
def tweak_group(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
                arg: Optional[str] = None) -> bool:
    """Unprivileged group the serving side runs as."""
    return _tweak_identity(ctx, vsb, par, arg,
                           ctx.identity.lookup_group, ctx.identity.real_gid, "group", "GID")


# =============================================================================
# Composite Tweaks
# =============================================================================

@reports_errors
def tweak_listen_address(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
                         arg: Optional[str] = None) -> bool:
    """
    Comma-separated listen addresses.

    Every token is resolved into a fresh list of listen sockets. Only when
    all tokens resolve does that list replace the heritage sockets; if any
    token fails, the fresh list is discarded and the live one is untouched.
    """
    current = ctx.slot(par, StorageKind.ADDRESS_LIST)
    if arg is None:
        vsb.quote(current)
        return True

    text = unquote(arg)
    try:
        tokens = split_args(text)
    except ParseError as e:
        raise ParseError(f"Parse error: {e.message}") from e
    if not tokens:
        raise StructuralError("Empty listen address")

    socks: List[ListenSock] = []
    for token in tokens:
        addrs = ctx.resolver(token, ctx.listen_service)
        if not addrs:
            clean_listen_socks(socks)
            raise LookupFailure(f"Invalid listen address {quote(token)}")
        socks.extend(ListenSock(name=token, addr=addr) for addr in addrs)

    old = ctx.heritage.socks
    # Store the unquoted form: query quotes it again, and a second layer of
    # quoting would read back as a single token.
    ctx.commit(par, text)
    ctx.heritage.socks = socks
    ctx.heritage.nsocks = len(socks)
    clean_listen_socks(old)

    logger.info(f"Listen address {text!r} resolved to {len(socks)} socket(s)")
    return True


@reports_errors
def tweak_poolparam(ctx: TweakContext, vsb: OutputBuffer, par: ParamSpec,
                    arg: Optional[str] = None) -> bool:
    """
    Pool sizing triple ``min_pool,max_pool,max_age``.

    Pool sizes are bounded by the descriptor, max_age by [0, 1000000]
    seconds, and min_pool may not exceed max_pool.
    """
    current = ctx.slot(par, StorageKind.POOL)
    if arg is None:
        vsb.write(current.to_text())
        return True

    try:
        fields = split_args(arg)
    except ParseError as e:
        raise ParseError(f"Parse error: {e.message}") from e
    if len(fields) != 3 or not all(fields):
        raise StructuralError("Three fields required: min_pool, max_pool and max_age\n")

    min_pool = generic_uint(fields[0], int(par.min), int(par.max))
    max_pool = generic_uint(fields[1], int(par.min), int(par.max))
    max_age = generic_timeout_double(fields[2], 0.0, 1e6)
    if min_pool > max_pool:
        raise InvariantError("min_pool cannot be larger than max_pool\n")

    ctx.commit(par, PoolParam(min_pool=min_pool, max_pool=max_pool, max_age=max_age))
    return True
