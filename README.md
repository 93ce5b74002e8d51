# lumonos

A small, self-contained user environment: an interactive shell with
pipes and redirection, a handful of core utilities, and the I/O
plumbing underneath them, all running against an in-memory file system
and process model.

## What is inside

- `lumonos.shell` — the command-line parser (`parse`, `parse_pipeline`,
  `find_terminator`, `describe`, the `Command` dataclass) and the
  `Shell`, which runs lines such as `cat notes | wc > counts`.
  `<` redirects input, `>` redirects output (the file is deleted and
  created afresh), and `|` joins commands. A command takes at most 8
  arguments. `Shell.run_line` runs one line; `Shell.run` reads lines
  until `exit` or end of input. `main` starts a shell on the terminal.
- `lumonos.progs` — the utilities the shell runs: `cat`, `date`, `echo`,
  `hello`, `ls`, `rm`, `touch`, `wc` and `xargs`, each called as
  `program(process, argv)` (`xargs` also takes a `run` callable), plus
  the helpers `format_date`, `count` and `split_input`.
- `lumonos.uio` — uniform I/O endpoints: `Uio` with reference counting
  (`addref`, `close`) and `read`, `write`, `cntl`, `putc`, `getc`,
  `puts`, `printf`; `MemoryUio` over a byte buffer, seekable through
  the `Fcntl` operations; `StreamUio` over binary file objects; and
  `UioTerm`, a terminal wrapper that normalises CR/LF both ways and
  offers line editing through `getsn`.
- `lumonos.sysapi` — the simulated system interface: `FileSystem`
  (a flat file store under `c` and devices under `dev`), `Process`
  (a 16-entry descriptor table with `open`, `close`, `read`, `write`,
  `fcntl`, `pipe`, `uiodup`, `fscreate`, `fsdelete`, `fork`), `Pipe`,
  and the `Syscall` numbers.
- `lumonos.console` — `Console`, character and line I/O on a process's
  descriptors (`dputc`, `dgetc`, `dputs`, `dgetsn`, `dprintf`, and the
  console versions `putc`, `getc`, `puts`, `getsn`, `printf`).
- `lumonos.fmt` — the small printf dialect (`format_to`, `sformat`,
  `snprintf`) supporting `%d %u %x %s %c %p`, a width with optional zero
  padding, and the `l`/`ll`/`z`/`j` size prefixes.
- `lumonos.cstring` — C-style comparisons and conversion (`strcmp`,
  `strncmp`, `strcasecmp`, `strncasecmp`, `strtoul`, `islower`,
  `toupper`).
- `lumonos.heap` — `BumpHeap`, a non-freeing allocator over a private
  region, raising `HeapError` on overflow.
- `lumonos.errors` — the `Errno` numbers, `error_name`, and `SysError`,
  the exception every failing operation raises.

## Installing

```
pip install .
```

## Running the shell

```
lumonos
```

The shell prints `Starting 391 Shell` and the prompt `LUMON OS> `.
Type commands such as

```
touch notes
echo hello world > notes
cat notes | wc
ls
exit
```

`exit`, or end of input, leaves the shell. `date` reads the host clock.

## Using it from Python

```python
from lumonos.fmt import sformat, snprintf
from lumonos.progs import format_date

print(sformat("%05d|%x|%4s|", 42, 255, "ok"))   # 00042|ff|ok  |
print(snprintf(4, "%d", 12345))                 # ('123', 5)
print(format_date(0))                           # 01 Jan 1970 00:00:00
```

## What it does not do

- The file system lives in memory only: it starts empty and nothing is
  kept after the shell exits. There are no directories beyond `c` and
  `dev`.
- Commands are not loaded from files. The shell runs only the programs
  in its table (`cat`, `date`, `echo`, `hello`, `ls`, `rm`, `touch`,
  `wc`, `xargs`); processes are simulated and run one after another.
- Reading an empty pipe whose writer is still open fails with `EBUSY`
  instead of waiting.
- The shell echoes what it reads itself, so on a terminal that also
  echoes, typed text may appear twice.

## Running the tests

```
pip install .[test]
pytest
```