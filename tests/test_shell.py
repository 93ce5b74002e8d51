import io

from lumonos.console import CONSOLEOUT, STDIN, STDOUT
from lumonos.errors import Errno
from lumonos.progs import cat, count, echo, wc
from lumonos.shell import (
    MAXARGS, Shell, describe, find_terminator, parse, parse_pipeline,
)
from lumonos.sysapi import FileSystem, Process
from lumonos.uio import StreamUio


def make_shell(stdin=b"", wired=True):
    fs = FileSystem()
    term = StreamUio(io.BytesIO(stdin), io.BytesIO())
    fs.add_device("uart1", lambda: term)
    proc = Process(fs)
    if wired:
        proc.open(CONSOLEOUT, "dev/uart1")
        proc.uiodup(CONSOLEOUT, STDIN)
        proc.uiodup(CONSOLEOUT, STDOUT)
    shell = Shell(proc, {"echo": echo, "cat": cat, "wc": wc})
    return shell, proc, term.writer


def read_file(proc, name):
    fd = proc.open(-1, name)
    try:
        return proc.read(fd, 4096)
    finally:
        proc.close(fd)


def test_find_terminator():
    assert find_terminator("ab cd", 0) == 2
    assert find_terminator("abc", 0) == 3
    assert find_terminator("a>b", 0) == 1
    assert find_terminator("x|y", 0) == 1
    assert find_terminator("ab cd", 3) == 5


def test_parse_arguments():
    command, rest = parse("cat a b")
    assert command.argv == ["cat", "a", "b"]
    assert command.infile is None and command.outfile is None
    assert rest is None


def test_parse_redirections():
    command, rest = parse("cat < in > out")
    assert command.argv == ["cat"]
    assert command.infile == "in"
    assert command.outfile == "out"
    assert rest is None


def test_parse_redirection_without_spaces():
    command, _ = parse("cat>out")
    assert command.argv == ["cat"]
    assert command.outfile == "out"


def test_parse_pipe():
    command, rest = parse("ls | wc")
    assert command.argv == ["ls"]
    assert rest.strip() == "wc"
    command, rest = parse("ls||wc")
    assert command.argv == ["ls"]
    assert rest == "wc"


def test_parse_argument_limit():
    command, _ = parse("a b c d e f g h i j")
    assert len(command.argv) == MAXARGS


def test_parse_blank():
    command, rest = parse("   ")
    assert command.argv == []
    assert rest is None


def test_parse_pipeline():
    commands = parse_pipeline("ls | wc -l > n")
    assert [c.argv for c in commands] == [["ls"], ["wc", "-l"]]
    assert commands[1].outfile == "n"


def test_describe():
    text = describe(parse("cat < in")[0])
    assert text.startswith("Parsed Command:\n")
    assert "    argv[0]: 'cat'" in text
    assert "    argv[1]: '(null)'" in text
    assert "  Input Redirection: 'in'" in text
    assert "  Output Redirection: None" in text


def test_run_line_echo():
    shell, _, out = make_shell()
    assert shell.run_line("echo hi") == 1
    assert out.getvalue() == b"hi\r\n"


def test_run_line_output_redirect_overwrites():
    shell, proc, out = make_shell()
    shell.run_line("echo a > f")
    shell.run_line("echo b > f")
    assert read_file(proc, "f") == b"b\r\n"
    assert out.getvalue() == b""


def test_run_line_input_redirect():
    shell, proc, out = make_shell()
    proc.fscreate("f")
    fd = proc.open(-1, "f")
    proc.write(fd, b"data")
    proc.close(fd)
    shell.run_line("cat<f")
    assert out.getvalue() == b"data"


def test_run_line_pipe():
    shell, _, out = make_shell()
    assert shell.run_line("echo a b | wc") == 2
    assert out.getvalue() == ("%d\t%d\t%d\r\n" % count(b"a b\r\n")).encode()


def test_run_line_unknown_command():
    shell, _, out = make_shell()
    shell.run_line("nosuch")
    expected = f"bad cmd file c/nosuch with error code {-int(Errno.ENOENT)} \r\n"
    assert out.getvalue() == expected.encode()


def test_run_line_missing_input_file():
    shell, _, out = make_shell()
    shell.run_line("cat < missing")
    assert out.getvalue().startswith(b"bad input file missing with error code")


def test_run_session():
    shell, _, out = make_shell(stdin=b"echo hi\nexit\n", wired=False)
    shell.run()
    output = out.getvalue()
    assert output.startswith(b"Starting 391 Shell\r\n")
    assert output.count(b"LUMON OS> ") == 2
    assert b"echo hi\r\nhi\r\n" in output


def test_run_stops_at_end_of_input():
    shell, _, out = make_shell(stdin=b"", wired=False)
    shell.run()
    assert out.getvalue().count(b"LUMON OS> ") == 1