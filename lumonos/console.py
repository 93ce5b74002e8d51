"""Character and line I/O over process descriptors, with CR/LF handling."""

from __future__ import annotations

from typing import Any

from .fmt import format_to
from .sysapi import Process

# Shell redirection and pipe characters.
FIN = "<"
FOUT = ">"
PIPE = "|"

# Standard file descriptors.
STDIN = 0
STDOUT = 1
CONSOLEOUT = 2


class Console:
    """Terminal-style I/O on a process's descriptors.

    Output turns a lone ``\\n`` into ``\\r\\n`` and ``\\r`` into ``\\r\\n``;
    input turns ``\\r`` and ``\\r\\n`` into ``\\n``. State is kept per descriptor.
    """

    def __init__(self, process: Process) -> None:
        self.process = process
        self._put_prev: dict[int, str] = {}
        self._get_prev: dict[int, str] = {}

    def dputc(self, fd: int, c: str) -> None:
        """Write one character to ``fd``."""
        write = self.process.write
        if c == "\r":
            write(fd, "\r")
            write(fd, "\n")
        elif c == "\n":
            if self._put_prev.get(fd) != "\r":
                write(fd, "\r")
            write(fd, "\n")
        else:
            write(fd, c)
        self._put_prev[fd] = c

    def dgetc(self, fd: int) -> str:
        """Read one character from ``fd``; raise EOFError at end of input."""
        while True:
            data = self.process.read(fd, 1)
            if not data:
                raise EOFError
            c = data.decode("latin-1")
            if not (c == "\n" and self._get_prev.get(fd) == "\r"):
                break
        self._get_prev[fd] = c
        return "\n" if c == "\r" else c

    def dputs(self, fd: int, s: str) -> None:
        """Write ``s`` and a newline to ``fd``."""
        for c in s.split("\0", 1)[0]:
            self.dputc(fd, c)
        self.dputc(fd, "\n")

    def dgetsn(self, fd: int, n: int) -> str:
        """Read a line of at most ``n - 1`` characters without echo.

        The line ends at a newline or NUL; characters past the limit are
        dropped. At end of input the text read so far is returned, and
        EOFError is raised if there is none.
        """
        chars: list[str] = []
        room = n
        while True:
            try:
                c = self.dgetc(fd)
            except EOFError:
                if chars:
                    return "".join(chars)
                raise
            if c in ("\0", "\n"):
                return "".join(chars)
            if room > 1:
                chars.append(c)
                room -= 1

    def dprintf(self, fd: int, fmt: str, *args: Any) -> int:
        """Write formatted text to ``fd``; return its length."""
        return format_to(lambda c: self.dputc(fd, c), fmt, *args)

    def putc(self, c: str) -> None:
        """Write one character to the console."""
        self.dputc(CONSOLEOUT, c)

    def getc(self) -> str:
        """Read one character from the console."""
        return self.dgetc(CONSOLEOUT)

    def puts(self, s: str) -> None:
        """Write ``s`` and a newline to the console."""
        self.dputs(CONSOLEOUT, s)

    def getsn(self, n: int) -> str:
        """Read an edited line of at most ``n - 1`` characters, echoing input.

        At end of input the text read so far is returned, and EOFError is
        raised if there is none.
        """
        chars: list[str] = []
        room = n
        while True:
            try:
                c = self.getc()
            except EOFError:
                if chars:
                    return "".join(chars)
                raise
            if c == "\r":
                continue
            if c == "\n":
                self.putc("\n")
                return "".join(chars)
            if c in ("\b", "\x7f"):
                if chars:
                    self.putc("\b")
                    self.putc(" ")
                    self.putc("\b")
                    chars.pop()
                    room += 1
            elif room > 1:
                self.putc(c)
                chars.append(c)
                room -= 1
            else:
                self.putc("\a")

    def printf(self, fmt: str, *args: Any) -> int:
        """Write formatted text to the console; return its length."""
        return self.dprintf(CONSOLEOUT, fmt, *args)