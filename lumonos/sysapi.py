"""System call layer: file store, devices, pipes and per-process descriptors."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Callable

from .errors import Errno, SysError
from .uio import MemoryUio, Uio

UIO_MAX = 16
FILES_MOUNT = "c"
DEVICES_MOUNT = "dev"


class Syscall(IntEnum):
    """System call numbers."""

    EXIT = 0
    EXEC = 1
    FORK = 2
    WAIT = 3
    PRINT = 4
    USLEEP = 5
    FSCREATE = 10
    FSDELETE = 11
    OPEN = 15
    CLOSE = 16
    READ = 17
    WRITE = 18
    FCNTL = 19
    PIPE = 20
    UIODUP = 21


class _PipeReader(Uio):
    def __init__(self, pipe: Pipe) -> None:
        super().__init__()
        self._pipe = pipe

    def _read(self, size: int) -> bytes:
        buffer = self._pipe._buffer
        if size == 0:
            return b""
        if buffer:
            chunk = bytes(buffer[:size])
            del buffer[:size]
            return chunk
        if self._pipe._writer.closed:
            return b""
        raise SysError(Errno.EBUSY, "pipe is empty")

    def _close(self) -> None:
        self._pipe._buffer.clear()


class _PipeWriter(Uio):
    def __init__(self, pipe: Pipe) -> None:
        super().__init__()
        self._pipe = pipe

    def _write(self, data: bytes) -> int:
        if self._pipe._reader.closed:
            raise SysError(Errno.EPIPE)
        self._pipe._buffer.extend(data)
        return len(data)


class Pipe:
    """A one-way byte channel with separate read and write endpoints.

    Reading an empty pipe returns end of input once the writer is closed;
    while the writer is still open it raises ``EBUSY`` rather than blocking.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._reader = _PipeReader(self)
        self._writer = _PipeWriter(self)

    def reader(self) -> Uio:
        """Return the read endpoint."""
        return self._reader

    def writer(self) -> Uio:
        """Return the write endpoint."""
        return self._writer


class _FileUio(MemoryUio):
    """An open file whose contents live in the file store."""

    def __init__(self, fs: FileSystem, name: str, data: bytearray) -> None:
        super().__init__()
        self._buffer = data
        self._fs = fs
        self._name = name

    def _close(self) -> None:
        self._fs._open_files.discard(self._name)


class _ListingUio(MemoryUio):
    """A read-only directory listing."""

    def _write(self, data: bytes) -> int:
        raise SysError(Errno.ENOTSUP)


def _split(path: str) -> tuple[str, str]:
    path = path.strip("/")
    if not path:
        return "", ""
    head, _, tail = path.partition("/")
    if head in (FILES_MOUNT, DEVICES_MOUNT):
        return head, tail
    return FILES_MOUNT, path


class FileSystem:
    """A flat file store mounted at ``c`` and a device directory at ``dev``.

    Paths without a mount prefix refer to the file store.
    """

    def __init__(self) -> None:
        self._files: dict[str, bytearray] = {}
        self._open_files: set[str] = set()
        self._devices: dict[str, Callable[[], Uio]] = {}

    def _file_name(self, path: str) -> str:
        mount, name = _split(path)
        if mount != FILES_MOUNT or not name:
            raise SysError(Errno.EINVAL, f"not a file path: {path!r}")
        return name

    def create(self, path: str) -> None:
        """Create an empty file."""
        name = self._file_name(path)
        if name in self._files:
            raise SysError(Errno.EINVAL, f"file exists: {name}")
        self._files[name] = bytearray()

    def delete(self, path: str) -> None:
        """Remove a file that is not open."""
        name = self._file_name(path)
        if name not in self._files:
            raise SysError(Errno.ENOENT)
        if name in self._open_files:
            raise SysError(Errno.EBUSY)
        del self._files[name]

    def add_device(self, name: str, factory: Callable[[], Uio]) -> None:
        """Register a device; ``factory`` makes an endpoint each time it is opened."""
        self._devices[name] = factory

    def listing(self, path: str) -> list[str]:
        """Return the names in a directory: the root, ``c`` or ``dev``."""
        mount, name = _split(path)
        if name:
            raise SysError(Errno.EINVAL, f"not a directory: {path!r}")
        if mount == "":
            return [FILES_MOUNT, DEVICES_MOUNT]
        if mount == FILES_MOUNT:
            return list(self._files)
        return list(self._devices)

    def open(self, path: str) -> Uio:
        """Open a file, a device or a directory listing."""
        mount, name = _split(path)
        if not name:
            names = self.listing(path)
            if mount == FILES_MOUNT:
                text = "".join(f"{n}\n" for n in names)
            else:
                text = "\n".join(names)
            return _ListingUio(text)
        if mount == DEVICES_MOUNT:
            factory = self._devices.get(name)
            if factory is None:
                raise SysError(Errno.ENOENT)
            return factory()
        data = self._files.get(name)
        if data is None:
            raise SysError(Errno.ENOENT)
        if name in self._open_files:
            raise SysError(Errno.EBUSY)
        self._open_files.add(name)
        return _FileUio(self, name, data)


class Process:
    """A process's descriptor table over a shared file system.

    Used as a context manager, every descriptor still open is closed on exit.
    """

    def __init__(self, fs: FileSystem) -> None:
        self.fs = fs
        self._fds: list[Uio | None] = [None] * UIO_MAX

    def __enter__(self) -> Process:
        return self

    def __exit__(self, *exc: Any) -> None:
        for fd, uio in enumerate(self._fds):
            if uio is not None:
                self._fds[fd] = None
                uio.close()

    def _get(self, fd: int) -> Uio:
        if not 0 <= fd < UIO_MAX or self._fds[fd] is None:
            raise SysError(Errno.EBADFD)
        uio = self._fds[fd]
        assert uio is not None
        return uio

    def _choose(self, fd: int) -> int:
        if fd < 0:
            for candidate, uio in enumerate(self._fds):
                if uio is None:
                    return candidate
            raise SysError(Errno.EMFILE)
        if fd >= UIO_MAX or self._fds[fd] is not None:
            raise SysError(Errno.EBADFD)
        return fd

    def open(self, fd: int, path: str) -> int:
        """Open ``path`` at ``fd``, or at the lowest free descriptor if ``fd`` is negative."""
        fd = self._choose(fd)
        self._fds[fd] = self.fs.open(path)
        return fd

    def close(self, fd: int) -> None:
        """Release a descriptor."""
        uio = self._get(fd)
        self._fds[fd] = None
        uio.close()

    def read(self, fd: int, size: int) -> bytes:
        """Read up to ``size`` bytes."""
        return self._get(fd).read(size)

    def write(self, fd: int, data: bytes | str) -> int:
        """Write ``data`` and return the number of bytes written."""
        return self._get(fd).write(data)

    def fcntl(self, fd: int, cmd: int, arg: Any = None) -> Any:
        """Perform a control operation on a descriptor."""
        return self._get(fd).cntl(cmd, arg)

    def pipe(self) -> tuple[int, int]:
        """Create a pipe; return its write and read descriptors."""
        channel = Pipe()
        wfd = self._choose(-1)
        self._fds[wfd] = channel.writer()
        try:
            rfd = self._choose(-1)
        except SysError:
            self._fds[wfd] = None
            raise
        self._fds[rfd] = channel.reader()
        return wfd, rfd

    def uiodup(self, oldfd: int, newfd: int) -> int:
        """Make ``newfd`` (or the lowest free descriptor) refer to ``oldfd``'s endpoint."""
        uio = self._get(oldfd)
        newfd = self._choose(newfd)
        uio.addref()
        self._fds[newfd] = uio
        return newfd

    def fscreate(self, path: str) -> None:
        """Create a file."""
        self.fs.create(path)

    def fsdelete(self, path: str) -> None:
        """Delete a file."""
        self.fs.delete(path)

    def fork(self) -> Process:
        """Return a child process sharing every open endpoint."""
        child = Process(self.fs)
        for fd, uio in enumerate(self._fds):
            if uio is not None:
                uio.addref()
                child._fds[fd] = uio
        return child