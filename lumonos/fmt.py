"""printf-style formatting with the conversions the user library supports."""

from __future__ import annotations

import re
from typing import Any, Callable, Iterator

_SPEC = re.compile(r"%(\d*)(l*)([zj]?)(.?)|[^%]+", re.DOTALL)
_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1


def _take(arguments: Iterator[Any]) -> Any:
    try:
        return next(arguments)
    except StopIteration:
        raise ValueError("format string needs more arguments") from None


def _int_arg(value: Any) -> int:
    if not isinstance(value, int):
        raise TypeError(f"integer conversion got {type(value).__name__}")
    return int(value)


def _signed(value: int, bits: int) -> int:
    mask = (1 << bits) - 1
    value &= mask
    return value - (1 << bits) if value >> (bits - 1) else value


def _format_int(value: int, base: int, zpad: bool, width: int) -> str:
    digits = format(value, "x" if base == 16 else "d")
    return ("0" if zpad else " ") * (width - len(digits)) + digits


def _format_str(value: Any, width: int) -> str:
    if value is None:
        text = "(null)"
    elif isinstance(value, (bytes, bytearray)):
        text = bytes(value).decode("latin-1")
    elif isinstance(value, str):
        text = value
    else:
        raise TypeError(f"string conversion got {type(value).__name__}")
    return text.ljust(width)


def _char(value: Any) -> str:
    if isinstance(value, str) and len(value) == 1:
        return value
    return chr(_int_arg(value) & 0xFF)


def format_to(putc: Callable[[str], Any], fmt: str, *args: Any) -> int:
    """Format ``args`` by ``fmt``, passing each character to ``putc``.

    Returns the number of characters produced.
    """
    fmt = fmt.split("\0", 1)[0]
    arguments = iter(args)
    nout = 0

    def emit(text: str) -> None:
        nonlocal nout
        for ch in text:
            putc(ch)
        nout += len(text)

    for match in _SPEC.finditer(fmt):
        piece = match.group(0)
        if not piece.startswith("%"):
            emit(piece)
            continue

        digits, ells, size, conv = match.groups()
        zpad = digits.startswith("0")
        width = int(digits) if digits else 0
        wide = bool(ells) or bool(size)
        bits = 64 if wide else 32

        if conv == "d":
            value = _signed(_int_arg(_take(arguments)), bits)
            if value < 0:
                emit("-")
                value = -value
                width = max(width - 1, 0)
            emit(_format_int(value, 10, zpad, width))
        elif conv in ("u", "x"):
            value = _int_arg(_take(arguments)) & (_MASK64 if wide else _MASK32)
            emit(_format_int(value, 16 if conv == "x" else 10, zpad, width))
        elif conv == "s":
            emit(_format_str(_take(arguments), width))
        elif conv == "c":
            emit(_char(_take(arguments)))
        elif conv == "p":
            value = _int_arg(_take(arguments)) & _MASK64
            emit("0x")
            emit(_format_int(value, 16, zpad, width))
        else:
            printable = conv and 0x20 <= ord(conv) < 0x7F
            emit("%" + (conv if printable else "?"))

    return nout


def sformat(fmt: str, *args: Any) -> str:
    """Return the formatted text."""
    parts: list[str] = []
    format_to(parts.append, fmt, *args)
    return "".join(parts)


def snprintf(bufsz: int, fmt: str, *args: Any) -> tuple[str, int]:
    """Format into a buffer of ``bufsz`` bytes, terminator included.

    Returns the text that fits and the length the full output would have.
    """
    if bufsz < 0:
        raise ValueError("buffer size must not be negative")
    text = sformat(fmt, *args)
    return text[:max(bufsz - 1, 0)], len(text)