"""
Text codecs for parameter values.

Converts between the text an operator types and the values the tweak
operations store:

- Strict numeric tokens (real numbers, unsigned integers in any base)
- Byte sizes with binary unit suffixes (80k, 120M, 1.5G)
- Quoting and comma/whitespace argument splitting
"""

import math
import re
import sys
from fractions import Fraction
from typing import List, Optional, Tuple

from paramtweak.params.errors import ParseError


# =============================================================================
# Limits
# =============================================================================

# Largest value an unsigned parameter slot holds; doubles as "unlimited"
UINT_MAX: int = 2 ** 32 - 1

# Largest byte count a signed-size slot holds on this platform
SSIZE_MAX: int = sys.maxsize


# =============================================================================
# Numeric Tokens
# =============================================================================

_DOUBLE_TOKEN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_UINT_TOKEN = re.compile(r"\+?(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")


def parse_double(text: str) -> Optional[float]:
    """
    Parse a real number that makes up the whole of text.

    Returns:
        The value, or None if text is empty, has leading or trailing
        garbage, or is not finite.
    """
    if not _DOUBLE_TOKEN.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return value


def parse_uint(text: str) -> Optional[int]:
    """
    Parse a non-negative integer that makes up the whole of text.

    The base follows C conventions: ``0x`` prefix for hex, a leading ``0``
    for octal, decimal otherwise.
    """
    m = _UINT_TOKEN.fullmatch(text)
    if m is None:
        return None
    digits = m.group(1)
    if digits[:2].lower() == "0x":
        return int(digits, 16)
    if len(digits) > 1 and digits[0] == "0":
        return int(digits, 8)
    return int(digits)


def fmt_double(value: float) -> str:
    """
    Render a real number for a query.

    Six decimals when that reads back as the same value, otherwise the
    shortest form that does (``1e-07``, ``1.0000001``).
    """
    text = f"{value:f}"
    if float(text) == value:
        return text
    return repr(value)


# =============================================================================
# Byte Sizes
# =============================================================================

_BYTES_NUMBER = re.compile(r"(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# Binary multipliers, each 1024 times the previous
_BYTE_SCALES = "kmgtpezy"
_BYTE_SUFFIXES = "kMGTPEZY"


def parse_bytes(text: str, rel: int = 0) -> int:
    """
    Parse a byte count with an optional unit suffix.

    Accepts a number followed by an optional (single space separated)
    multiplier ``k, m, g, t, p, e, z, y`` in any case, then an optional
    ``b``/``B``. A trailing ``%`` instead scales against ``rel``.

    Args:
        text: Text such as ``"80k"``, ``"1.5G"``, ``"120 MB"``
        rel: Reference size for percentages (0 means none allowed)

    Returns:
        Byte count rounded to the nearest integer

    Raises:
        ParseError: With the grammar's message
    """
    if not text:
        raise ParseError("Missing number")

    m = _BYTES_NUMBER.match(text)
    if m is None:
        raise ParseError("Invalid number")

    value = Fraction(m.group())
    rest = text[m.end():]

    if rest == "%":
        if rel == 0:
            raise ParseError("Absolute number required")
        value = value * rel / 100
    elif rest:
        if rest[0] == " " and len(rest) > 1:
            rest = rest[1:]
        scale = _BYTE_SCALES.find(rest[0].lower())
        if scale >= 0:
            value *= 1 << (10 * (scale + 1))
            rest = rest[1:]
        # [bB] carries no meaning of its own
        if rest[:1] in ("b", "B"):
            rest = rest[1:]
        if rest:
            raise ParseError("Invalid suffix")

    return int(value + Fraction(1, 2))


def fmt_bytes(value: int) -> str:
    """
    Render a byte count in the shortest exact unit form.

    Counts that are not a multiple of 256 print as raw bytes (``1000b``).
    Otherwise the count is scaled down by 1024 per unit until it is either
    a quarter-unit fraction (``1.25k``) or has low-order bits set (``80k``).
    """
    if value == 0:
        return "0b"
    if value & 0xff:
        return f"{value}b"
    for suffix in _BYTE_SUFFIXES:
        if value & 0x300:
            # Low byte is clear, so the fraction is exactly .25, .50 or .75
            return f"{value // 1024}.{(value % 1024) * 100 // 1024:02d}{suffix}"
        value //= 1024
        if value & 0xff:
            return f"{value}{suffix}"
    return "(bogus number)"


# =============================================================================
# Quoting and Argument Splitting
# =============================================================================

_SIMPLE_ESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t"}
_QUOTE_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_HEX_ESCAPE = re.compile(r"[0-9a-fA-F]{1,2}")
_OCT_ESCAPE = re.compile(r"[0-7]{1,3}")


def _needs_quoting(ch: str) -> bool:
    return ch in _QUOTE_ESCAPES or ch.isspace() or not ch.isprintable()


def quote(text: str) -> str:
    """
    Render text so that :func:`split_args` reads it back as one token.

    Plain text is returned unchanged; anything with spaces, quotes,
    backslashes or control characters is wrapped in double quotes.
    """
    if text and not any(_needs_quoting(ch) for ch in text):
        return text

    out = ['"']
    for ch in text:
        if ch in _QUOTE_ESCAPES:
            out.append(_QUOTE_ESCAPES[ch])
        elif ch == " " or ch.isprintable() or ord(ch) > 0xff:
            out.append(ch)
        else:
            out.append(f"\\{ord(ch):03o}")
    out.append('"')
    return "".join(out)


def _backslash(text: str, pos: int) -> Tuple[str, int]:
    """Decode the escape sequence starting at text[pos]; return (char, length)."""
    nxt = text[pos + 1:pos + 2]
    if nxt and nxt in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[nxt], 2
    if nxt == "x":
        m = _HEX_ESCAPE.match(text, pos + 2)
        if m:
            return chr(int(m.group(), 16)), 2 + len(m.group())
    else:
        m = _OCT_ESCAPE.match(text, pos + 1)
        if m:
            return chr(int(m.group(), 8)), 1 + len(m.group())
    raise ParseError("Invalid backslash sequence")


def split_args(text: str, comma: bool = True) -> List[str]:
    """
    Split text into tokens on whitespace (and commas).

    Tokens may be double-quoted to include separators, and backslash
    escapes are decoded in both quoted and bare tokens. Consecutive commas
    produce empty tokens; a trailing comma does not.

    Raises:
        ParseError: On an unterminated quote or a bad escape
    """
    args: List[str] = []
    pos, end = 0, len(text)

    while pos < end:
        if text[pos].isspace():
            pos += 1
            continue

        quoted = text[pos] == '"'
        if quoted:
            pos += 1

        token = []
        while True:
            if pos >= end:
                if quoted:
                    raise ParseError("Missing '\"'")
                break
            ch = text[pos]
            if ch == "\\":
                decoded, length = _backslash(text, pos)
                token.append(decoded)
                pos += length
                continue
            if quoted:
                if ch == '"':
                    pos += 1
                    break
            elif ch.isspace() or (comma and ch == ","):
                break
            token.append(ch)
            pos += 1

        args.append("".join(token))

        while pos < end and text[pos].isspace():
            pos += 1
        if comma and pos < end and text[pos] == ",":
            pos += 1

    return args


def unquote(text: str) -> str:
    """
    Undo :func:`quote`.

    Text that is exactly the quoted rendering of some value is decoded back
    to that value; anything else is returned unchanged.
    """
    if not text.startswith('"'):
        return text
    try:
        tokens = split_args(text, comma=False)
    except ParseError:
        return text
    if len(tokens) == 1 and quote(tokens[0]) == text:
        return tokens[0]
    return text
