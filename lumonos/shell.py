"""Command shell with redirection and pipelines."""

from __future__ import annotations

import re
import sys
import time
from contextlib import suppress
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, MutableMapping, Sequence

from .console import CONSOLEOUT, FIN, FOUT, PIPE, STDIN, STDOUT, Console
from .errors import Errno, SysError
from .progs import cat, command_path, date, echo, hello, ls, rm, touch, wc, xargs
from .sysapi import FileSystem, Process
from .uio import MemoryUio, StreamUio

BUFSIZE = 1024
MAXARGS = 8
CONSOLE_DEVICE = "dev/uart1"
PROMPT = "LUMON OS> "

Program = Callable[[Process, list], object]

_TERMINATOR = re.compile(r"[ <>|\0]")


@dataclass
class Command:
    """One parsed command: arguments and optional redirections."""

    argv: list[str] = field(default_factory=list)
    infile: str | None = None
    outfile: str | None = None
    text: str = ""


def find_terminator(text: str, start: int) -> int:
    """Return the index of the first space, redirection or pipe at or after ``start``."""
    match = _TERMINATOR.search(text, start)
    return match.start() if match else len(text)


def parse(line: str) -> tuple[Command, str | None]:
    """Parse one command; return it and the text after a pipe, if any."""
    text = line.split("\0", 1)[0]
    size = len(text)
    command = Command(text=text)

    def at(i: int) -> str:
        return text[i] if i < size else "\0"

    head = 0
    while True:
        while at(head) == " ":
            head += 1
        if at(head) in ("\0", "\n"):
            break
        if len(command.argv) >= MAXARGS:
            break
        end = find_terminator(text, head)
        command.argv.append(text[head:end])
        temp = at(end)
        head = end + 1

        while True:
            if temp == " ":
                while at(head) == " ":
                    head += 1
                temp = at(head)
                continue
            if temp == "\0":
                return command, None
            if temp in (FIN, FOUT):
                while at(head) == " ":
                    head += 1
                if at(head) == "\0":
                    break
                end = find_terminator(text, head)
                if temp == FIN:
                    command.infile = text[head:end]
                else:
                    command.outfile = text[head:end]
                temp = at(end)
                head = end + 1
                continue
            if temp == PIPE:
                if at(head) == PIPE:
                    head += 1
                return command, text[head:]
            break

    return command, None


def parse_pipeline(line: str) -> list[Command]:
    """Parse every command of a pipeline."""
    commands: list[Command] = []
    rest: str | None = line
    while rest is not None:
        command, rest = parse(rest)
        if not command.argv:
            break
        commands.append(command)
    return commands


def describe(command: Command) -> str:
    """Return a readable dump of a parsed command."""
    lines = [
        "Parsed Command:",
        f"  buf: '{command.text}'",
        f" argc: {len(command.argv)} ",
        "  argv:",
    ]
    for i, arg in enumerate([*command.argv, None]):
        lines.append(f"    argv[{i}]: '{'(null)' if arg is None else arg}'")
    for label, target in (("Input", command.infile), ("Output", command.outfile)):
        shown = "None" if target is None else f"'{target}'"
        lines.append(f"  {label} Redirection: {shown}")
    return "\n".join(lines) + "\n"


def _quiet_close(proc: Process, fd: int | None) -> None:
    if fd is None:
        return
    with suppress(SysError):
        proc.close(fd)


class Shell:
    """An interactive shell running programs from a name-to-callable table."""

    def __init__(self, process: Process, programs: MutableMapping[str, Program]) -> None:
        self.process = process
        self.programs = programs
        self.console = Console(process)

    def _resolve(self, path: str) -> Program:
        name = path[2:] if path.startswith("c/") else path
        program = self.programs.get(name)
        if program is None:
            raise SysError(Errno.ENOENT, f"no such program: {path}")
        return program

    @staticmethod
    def _run(program: Program, proc: Process, argv: Sequence[str]) -> None:
        # A program failing on a system call simply terminates.
        with suppress(SysError, EOFError):
            program(proc, list(argv))

    def _exec(self, proc: Process, path: str, argv: Sequence[str]) -> None:
        self._run(self._resolve(path), proc, argv)

    def _start_child(self, child: Process, command: Command,
                     pipe_fds: tuple[int, int] | None, pipe_in: int | None) -> None:
        console = Console(child)
        name = command_path(command.argv[0])

        if command.infile is not None:
            _quiet_close(child, STDIN)
            try:
                child.open(STDIN, command.infile)
            except SysError as error:
                console.printf("bad input file %s with error code %d \n",
                               command.infile, error.retval)
                return

        if command.outfile is not None:
            _quiet_close(child, STDOUT)
            with suppress(SysError):
                child.fsdelete(command.outfile)
            try:
                child.fscreate(command.outfile)
            except SysError as error:
                console.printf("bad output file create %s with error code %d \n",
                               command.outfile, error.retval)
                return
            try:
                child.open(STDOUT, command.outfile)
            except SysError as error:
                console.printf("bad output file open %s with error code %d \n",
                               command.outfile, error.retval)
                return

        if pipe_fds is not None:
            wfd, rfd = pipe_fds
            _quiet_close(child, rfd)
            _quiet_close(child, STDOUT)
            with suppress(SysError):
                child.uiodup(wfd, STDOUT)
            _quiet_close(child, wfd)

        if pipe_in is not None:
            _quiet_close(child, STDIN)
            with suppress(SysError):
                child.uiodup(pipe_in, STDIN)
            _quiet_close(child, pipe_in)

        try:
            program = self._resolve(name)
        except SysError as error:
            console.printf("bad cmd file %s with error code %d \n", name, error.retval)
            return
        self._run(program, child, command.argv)

    def run_line(self, line: str) -> int:
        """Run one command line; return the number of commands started."""
        started = 0
        pipe_in: int | None = None
        rest: str | None = line

        while rest is not None:
            command, rest = parse(rest)
            if not command.argv:
                break

            pipe_fds: tuple[int, int] | None = None
            if rest is not None:
                try:
                    pipe_fds = self.process.pipe()
                except SysError:
                    self.console.printf("failed to make pipe\n")
                    break

            with self.process.fork() as child:
                self._start_child(child, command, pipe_fds, pipe_in)
            started += 1

            _quiet_close(self.process, pipe_in)
            if pipe_fds is not None:
                wfd, rfd = pipe_fds
                pipe_in = rfd
                _quiet_close(self.process, wfd)
            else:
                pipe_in = None

        _quiet_close(self.process, pipe_in)
        return started

    def run(self) -> None:
        """Attach to the console device and read commands until ``exit`` or end of input."""
        proc = self.process
        with suppress(SysError):
            proc.open(CONSOLEOUT, CONSOLE_DEVICE)
        for fd in (STDIN, STDOUT):
            _quiet_close(proc, fd)
            with suppress(SysError):
                proc.uiodup(CONSOLEOUT, fd)

        self.console.printf("Starting 391 Shell\n")
        while True:
            self.console.printf(PROMPT)
            try:
                line = self.console.getsn(BUFSIZE - 1)
            except EOFError:
                return
            if line == "exit":
                return
            self.run_line(line)


def main(argv: Sequence[str] | None = None) -> int:
    """Start the shell on the terminal."""
    fs = FileSystem()
    fs.add_device("uart1", lambda: StreamUio(sys.stdin.buffer, sys.stdout.buffer))
    fs.add_device("rtc0", lambda: MemoryUio(time.time_ns().to_bytes(8, "little")))
    programs: dict[str, Program] = {
        "cat": cat,
        "date": date,
        "echo": echo,
        "hello": hello,
        "ls": ls,
        "rm": rm,
        "touch": touch,
        "wc": wc,
    }
    with Process(fs) as proc:
        shell = Shell(proc, programs)
        programs["xargs"] = partial(xargs, run=shell._exec)
        shell.run()
    return 0