"""User programs: cat, date, echo, hello, ls, rm, touch, wc and xargs."""

from __future__ import annotations

import re
from typing import Callable, Iterator, Sequence

from .console import STDIN, STDOUT, Console
from .errors import SysError
from .fmt import snprintf
from .sysapi import Process

BUF_SIZE = 1024
XARGS_MAX_ARGS = 50
PATH_BUFSZ = 100
NS_PER_SEC = 1_000_000_000
RTC_DEVICE = "dev/rtc0"

MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
_MONTH_LENGTHS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
_WORD = re.compile(r"[^ \t\r\n]+")

Runner = Callable[[Process, str, list], object]


def _is_leap(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def _cstr(data: bytes) -> str:
    return data.decode("latin-1").split("\0", 1)[0]


def format_date(seconds: int) -> str:
    """Render seconds since 1970 (UTC) as ``DD Mon YYYY HH:MM:SS``."""
    if seconds < 0:
        raise ValueError("time must not be negative")
    days, sod = divmod(seconds, 86400)
    hour, rest = divmod(sod, 3600)
    minute, second = divmod(rest, 60)

    year = 1970
    while True:
        diy = 366 if _is_leap(year) else 365
        if days < diy:
            break
        days -= diy
        year += 1

    lengths = list(_MONTH_LENGTHS)
    lengths[1] += _is_leap(year)
    month = 0
    for length in lengths:
        if days < length:
            break
        days -= length
        month += 1

    day = days + 1
    return (f"{day:02d} {MONTH_NAMES[month]} {year} "
            f"{hour:02d}:{minute:02d}:{second:02d}")


def count(data: bytes) -> tuple[int, int, int]:
    """Return (lines, words, bytes); every space or newline ends a word."""
    lines = data.count(b"\n")
    return lines, lines + data.count(b" "), len(data)


def split_input(text: str, limit: int) -> list[str]:
    """Split text on spaces, tabs, CR and LF into at most ``limit`` words."""
    return _WORD.findall(text.split("\0", 1)[0])[:max(limit, 0)]


def _chunks(proc: Process, fd: int) -> Iterator[bytes]:
    """Yield blocks read from ``fd`` until end of input or an error."""
    while True:
        try:
            chunk = proc.read(fd, BUF_SIZE)
        except SysError:
            return
        if not chunk:
            return
        yield chunk


def _copy_to_stdout(proc: Process, fd: int) -> None:
    for chunk in _chunks(proc, fd):
        while chunk:
            try:
                written = proc.write(STDOUT, chunk)
            except SysError:
                return
            if written <= 0:
                return
            chunk = chunk[written:]


def cat(proc: Process, argv: Sequence[str]) -> None:
    """Copy the named files, or standard input, to standard output."""
    if len(argv) <= 1:
        _copy_to_stdout(proc, STDIN)
        return
    for path in argv[1:]:
        try:
            fd = proc.open(-1, path)
        except SysError:
            continue
        try:
            _copy_to_stdout(proc, fd)
        finally:
            proc.close(fd)


def date(proc: Process, argv: Sequence[str]) -> None:
    """Print the time read from the real-time clock device."""
    console = Console(proc)
    try:
        fd = proc.open(-1, RTC_DEVICE)
    except SysError:
        console.printf("Date: cannot open dev/rtc0 \r\n")
        return
    try:
        raw = proc.read(fd, 8)
    except SysError:
        console.printf("Could not get time from dev/rtc0 \r\n")
        return
    finally:
        proc.close(fd)
    time_ns = int.from_bytes(raw.ljust(8, b"\0")[:8], "little")
    console.dprintf(STDOUT, "%s\r", format_date(time_ns // NS_PER_SEC))


def echo(proc: Process, argv: Sequence[str]) -> None:
    """Write the arguments, separated by spaces, to standard output."""
    try:
        proc.write(STDOUT, " ".join(argv[1:]))
        proc.write(STDOUT, "\r\n")
    except SysError:
        pass


def hello(proc: Process, argv: Sequence[str]) -> None:
    """Greet on standard output."""
    Console(proc).dprintf(STDOUT, "Hello, world!\n")


def ls(proc: Process, argv: Sequence[str]) -> None:
    """List the root, or each named directory."""
    console = Console(proc)
    if len(argv) <= 1:
        try:
            fd = proc.open(-1, "")
        except SysError:
            console.printf("ls cannot access root\r")
            return
        for chunk in _chunks(proc, fd):
            console.dprintf(STDOUT, "%s\n", _cstr(chunk))
        proc.close(fd)
        return

    for path in argv[1:]:
        try:
            fd = proc.open(-1, path)
        except SysError:
            continue
        # The file store listing already ends each name with a newline.
        trim_last = path in ("c", "c/")
        for chunk in _chunks(proc, fd):
            console.dprintf(STDOUT, "%s\n", _cstr(chunk[:-1] if trim_last else chunk))
        proc.close(fd)


def rm(proc: Process, argv: Sequence[str]) -> None:
    """Delete the named files."""
    console = Console(proc)
    for path in argv[1:]:
        try:
            proc.fsdelete(path)
        except SysError:
            console.printf("failed to remove %s\n", path)


def touch(proc: Process, argv: Sequence[str]) -> None:
    """Create the named files."""
    console = Console(proc)
    for path in argv[1:]:
        try:
            proc.fscreate(path)
        except SysError:
            console.printf("failed to create write %s\n", path)


def _count_fd(proc: Process, console: Console, fd: int) -> None:
    data = bytearray()
    while True:
        try:
            chunk = proc.read(fd, BUF_SIZE)
        except SysError:
            return
        if not chunk:
            break
        data += chunk
    console.dprintf(STDOUT, "%d\t%d\t%d\r", *count(bytes(data)))


def wc(proc: Process, argv: Sequence[str]) -> None:
    """Print line, word and byte counts of standard input or each named file."""
    console = Console(proc)
    if len(argv) <= 1:
        _count_fd(proc, console, STDIN)
    for path in argv[1:]:
        try:
            fd = proc.open(-1, path)
        except SysError:
            continue
        _count_fd(proc, console, fd)
        proc.close(fd)


def command_path(name: str) -> str:
    """Return the executable path for a command name."""
    text, _ = snprintf(PATH_BUFSZ, "%s" if "/" in name else "c/%s", name)
    return text


def _xargs_child(child: Process, argv: Sequence[str], run: Runner) -> None:
    console = Console(child)
    xargv = list(argv[1:XARGS_MAX_ARGS + 1])
    remaining = XARGS_MAX_ARGS - len(xargv)

    try:
        data = child.read(STDIN, BUF_SIZE)
    except SysError:
        data = b""
    if data:
        xargv += split_input(_cstr(data), remaining)
    if not xargv:
        return

    path = command_path(xargv[0])
    try:
        run(child, path, xargv)
    except SysError as error:
        console.printf("bad cmd file %s with error code %d \n", path, error.retval)


def xargs(proc: Process, argv: Sequence[str], run: Runner) -> None:
    """Run a command with arguments extended by words read from standard input.

    ``run(process, path, argv)`` executes a program and raises SysError if
    it cannot be loaded.
    """
    with proc.fork() as child:
        _xargs_child(child, argv, run)