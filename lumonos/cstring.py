"""C-style character and string comparison and conversion routines."""

from __future__ import annotations

from itertools import islice, zip_longest

_ULONG_MASK = (1 << 64) - 1


def _terminated(s: str) -> str:
    """Return ``s`` up to, not including, its first NUL character."""
    return s.split("\0", 1)[0]


def islower(c: str) -> bool:
    """Return whether ``c`` is an ASCII lowercase letter."""
    return "a" <= c <= "z"


def toupper(c: str) -> str:
    """Return the uppercase form of an ASCII lowercase letter, else ``c``."""
    return chr(ord(c) - ord("a") + ord("A")) if islower(c) else c


def _sign(a: str, b: str) -> int:
    return (a > b) - (a < b)


def strcmp(s1: str | None, s2: str | None) -> int:
    """Compare two strings; return -1, 0 or 1. ``None`` sorts first."""
    if s1 is None or s2 is None:
        if s1 is None:
            return 0 if s2 is None else -1
        return 1
    return _sign(_terminated(s1), _terminated(s2))


def strncmp(s1: str, s2: str, n: int) -> int:
    """Compare at most ``n`` characters; return the difference of the first mismatch."""
    a, b = _terminated(s1), _terminated(s2)
    for x, y in zip_longest(a[:n], b[:n], fillvalue="\0"):
        if x != y:
            return ord(x) - ord(y)
    return 0


def strcasecmp(s1: str | None, s2: str | None) -> int:
    """Compare two strings ignoring ASCII case; return -1, 0 or 1."""
    if s1 is None or s2 is None:
        if s1 is None:
            return 0 if s2 is None else -1
        return 1
    a = "".join(map(toupper, _terminated(s1)))
    b = "".join(map(toupper, _terminated(s2)))
    return _sign(a, b)


def strncasecmp(s1: str, s2: str, n: int) -> int:
    """Compare at most ``n`` characters.

    Scanning stops at the first position where the characters differ exactly;
    the result is the difference of their uppercase forms there.
    """
    pairs = zip_longest(_terminated(s1), _terminated(s2), fillvalue="\0")
    for x, y in islice(pairs, n):
        if x == "\0" or x != y:
            return ord(toupper(x)) - ord(toupper(y))
    return 0


def strtoul(text: str | None, base: int) -> tuple[int, int]:
    """Parse an unsigned integer in ``base`` (2 to 10).

    Returns the value, wrapped to 64 bits as an unsigned long, and the index
    at which parsing stopped. A leading ``-`` negates the value modulo 2**64.
    """
    if text is None or base <= 1 or base > 10:
        raise ValueError(f"unsupported base {base}")
    text = _terminated(text)
    pos = 0
    negative = False
    if text[:1] == "-":
        negative, pos = True, 1
    elif text[:1] == "+":
        pos = 1

    value = 0
    while pos < len(text):
        digit = ord(toupper(text[pos])) - ord("0")
        if not 0 <= digit < base:
            break
        value = (value * base + digit) & _ULONG_MASK
        pos += 1

    if negative:
        value = -value & _ULONG_MASK
    return value, pos