"""Uniform I/O endpoints: reference counting, character helpers and a terminal wrapper."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, BinaryIO

from .errors import Errno, SysError
from .fmt import format_to

_CR = 0x0D
_LF = 0x0A
# Octal 133: a bracket byte dropped from terminal input, ending any pending CR.
_ESCAPE = "\x5b"


class Fcntl(IntEnum):
    """Control operations understood by uio endpoints."""

    GETEND = 0
    SETEND = 1
    GETPOS = 2
    SETPOS = 3
    MMAP = 4


def _to_bytes(data: bytes | bytearray | str) -> bytes:
    if isinstance(data, str):
        return data.encode("latin-1")
    return bytes(data)


def _to_byte(c: str | int) -> bytes:
    if isinstance(c, str):
        if len(c) != 1:
            raise ValueError("expected a single character")
        return c.encode("latin-1")
    return bytes([c & 0xFF])


class Uio:
    """An I/O endpoint; subclasses provide the operations they support."""

    def __init__(self) -> None:
        self.refcnt = 1
        self.closed = False

    # Hooks overridden by backing endpoints.

    def _read(self, size: int) -> bytes:
        raise SysError(Errno.ENOTSUP)

    def _write(self, data: bytes) -> int:
        raise SysError(Errno.ENOTSUP)

    def _cntl(self, op: int, arg: Any) -> Any:
        raise SysError(Errno.ENOTSUP)

    def _close(self) -> None:
        pass

    # Public interface.

    def addref(self) -> int:
        """Take another reference and return the new count."""
        self.refcnt += 1
        return self.refcnt

    def close(self) -> None:
        """Drop a reference; the endpoint is closed when none remain."""
        if self.refcnt > 0:
            self.refcnt -= 1
        if self.refcnt == 0 and not self.closed:
            self.closed = True
            self._close()

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes."""
        if size < 0:
            raise SysError(Errno.EINVAL)
        return self._read(size)

    def write(self, data: bytes | bytearray | str) -> int:
        """Write ``data`` and return the number of bytes accepted."""
        return self._write(_to_bytes(data))

    def cntl(self, op: int, arg: Any = None) -> Any:
        """Perform a control operation."""
        return self._cntl(op, arg)

    def putc(self, c: str | int) -> None:
        """Write one character."""
        if self.write(_to_byte(c)) == 0:
            raise SysError(Errno.EIO)

    def getc(self) -> str:
        """Read one character."""
        data = self.read(1)
        if not data:
            raise SysError(Errno.EIO)
        return data[:1].decode("latin-1")

    def puts(self, s: str) -> None:
        """Write ``s`` followed by a newline."""
        self.write(s)
        self.write("\n")

    def printf(self, fmt: str, *args: Any) -> int:
        """Write formatted text one character at a time; return its length."""
        return format_to(self.putc, fmt, *args)


class MemoryUio(Uio):
    """A seekable endpoint over an in-memory byte buffer."""

    def __init__(self, data: bytes | bytearray | str = b"") -> None:
        super().__init__()
        self._buffer = bytearray(_to_bytes(data))
        self.pos = 0

    def getvalue(self) -> bytes:
        """Return the whole buffer."""
        return bytes(self._buffer)

    def _read(self, size: int) -> bytes:
        chunk = bytes(self._buffer[self.pos:self.pos + size])
        self.pos += len(chunk)
        return chunk

    def _write(self, data: bytes) -> int:
        self._buffer[self.pos:self.pos + len(data)] = data
        self.pos += len(data)
        return len(data)

    def _cntl(self, op: int, arg: Any) -> Any:
        if op == Fcntl.GETEND:
            return len(self._buffer)
        if op == Fcntl.GETPOS:
            return self.pos
        if op == Fcntl.SETPOS:
            if not isinstance(arg, int) or not 0 <= arg <= len(self._buffer):
                raise SysError(Errno.EINVAL)
            self.pos = arg
            return 0
        if op == Fcntl.SETEND:
            if not isinstance(arg, int) or arg < 0:
                raise SysError(Errno.EINVAL)
            if arg < len(self._buffer):
                del self._buffer[arg:]
            else:
                self._buffer.extend(bytes(arg - len(self._buffer)))
            self.pos = min(self.pos, arg)
            return 0
        raise SysError(Errno.ENOTSUP)


class StreamUio(Uio):
    """An endpoint over binary file objects; either side may be absent."""

    def __init__(self, reader: BinaryIO | None, writer: BinaryIO | None) -> None:
        super().__init__()
        self.reader = reader
        self.writer = writer

    def _read(self, size: int) -> bytes:
        if self.reader is None:
            raise SysError(Errno.ENOTSUP)
        return bytes(self.reader.read(size) or b"")

    def _write(self, data: bytes) -> int:
        if self.writer is None:
            raise SysError(Errno.ENOTSUP)
        written = self.writer.write(data)
        flush = getattr(self.writer, "flush", None)
        if flush is not None:
            flush()
        return len(data) if written is None else written


class UioTerm(Uio):
    """Terminal wrapper: CRLF normalization both ways and line editing."""

    def __init__(self, raw: Uio) -> None:
        super().__init__()
        self.raw = raw
        self.cr_out = False
        self.cr_in = False

    def _close(self) -> None:
        self.raw.close()

    def _read(self, size: int) -> bytes:
        while True:
            chunk = self.raw.read(size)
            if not chunk:
                return b""
            out = bytearray()
            for ch in chunk:
                if self.cr_in:
                    if ch == _CR:
                        out.append(_LF)
                    elif ch == _LF:
                        self.cr_in = False
                    else:
                        self.cr_in = False
                        out.append(ch)
                elif ch == _CR:
                    self.cr_in = True
                    out.append(_LF)
                else:
                    out.append(ch)
            # A chunk holding only a skipped '\n' yields nothing; read again.
            if out:
                return bytes(out)

    def _write(self, data: bytes) -> int:
        acc = 0
        wp = rp = 0
        end = len(data)

        while rp < end:
            ch = data[rp]
            rp += 1
            if ch == _CR:
                if rp < end and data[rp] == _LF:
                    self.cr_out = False
                    rp += 1
                else:
                    cnt = self.raw.write(data[wp:rp])
                    if cnt == 0:
                        return acc
                    acc += cnt
                    wp += cnt
                    self.raw.putc("\n")
                    self.cr_out = True
            elif ch == _LF:
                if self.cr_out:
                    # The '\r' before it already produced "\r\n".
                    self.cr_out = False
                    wp += 1
                    acc += 1
                    continue
                if wp != rp - 1:
                    cnt = self.raw.write(data[wp:rp - 1])
                    if cnt == 0:
                        return acc
                    acc += cnt
                    wp += cnt
                self.raw.putc("\r")
                self.cr_out = False
            else:
                self.cr_out = False

        if rp != wp:
            cnt = self.raw.write(data[wp:rp])
            if cnt == 0:
                return acc
            acc += cnt
        return acc

    def _cntl(self, op: int, arg: Any) -> Any:
        # Seeking would invalidate the line-ending state.
        if op == Fcntl.SETPOS:
            raise SysError(Errno.ENOTSUP)
        return self.raw.cntl(op, arg)

    def getsn(self, n: int) -> str:
        """Read an edited line of at most ``n - 1`` characters, echoing input."""
        line: list[str] = []
        room = n
        while True:
            c = self.getc()
            if c == _ESCAPE:
                self.cr_in = False
            elif c in ("\r", "\n"):
                self.raw.putc("\r")
                self.raw.putc("\n")
                return "".join(line)
            elif c in ("\b", "\x7f"):
                if line:
                    line.pop()
                    room += 1
                    self.raw.putc("\b")
                    self.raw.putc(" ")
                    self.raw.putc("\b")
                else:
                    self.raw.putc("\a")
            elif room > 1:
                self.raw.putc(c)
                line.append(c)
                room -= 1
            else:
                self.raw.putc("\a")