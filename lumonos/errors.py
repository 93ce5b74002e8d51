"""Error numbers shared by the system call layer and user programs."""

from __future__ import annotations

from enum import IntEnum


class Errno(IntEnum):
    """Error numbers; system calls report them negated."""

    EINVAL = 1
    EBUSY = 2
    ENOTSUP = 3
    ENODEV = 4
    EIO = 5
    EBADFMT = 6
    ENOENT = 7
    EACCESS = 8
    EBADFD = 9
    EMFILE = 10
    EMPROC = 11
    EMTHR = 12
    ECHILD = 13
    ENOMEM = 14
    EPIPE = 15
    ENODATABLKS = 16
    ENOINODEBLKS = 17

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    Errno.EINVAL: "Invalid argument",
    Errno.EBUSY: "Device or resource busy",
    Errno.ENOTSUP: "Operation not supported",
    Errno.ENODEV: "No such device",
    Errno.EIO: "I/O error",
    Errno.EBADFMT: "Bad format",
    Errno.ENOENT: "No such file or directory",
    Errno.EACCESS: "Permission denied",
    Errno.EBADFD: "File descriptor in bad state",
    Errno.EMFILE: "Too many open files",
    Errno.EMPROC: "Too many processes",
    Errno.EMTHR: "Too many threads",
    Errno.ECHILD: "No child process",
    Errno.ENOMEM: "Out of memory",
    Errno.EPIPE: "Broken pipe",
    Errno.ENODATABLKS: "No data blocks",
    Errno.ENOINODEBLKS: "No Inode blocks",
}


def _lookup(code: int) -> Errno | None:
    try:
        return Errno(abs(int(code)))
    except ValueError:
        return None


def error_name(code: int) -> str:
    """Return the symbolic name of an error number, positive or negated."""
    errno = _lookup(code)
    return errno.name if errno is not None else "EUNKNOWN"


class SysError(Exception):
    """An operation failed with one of the system error numbers."""

    def __init__(self, code: int, message: str | None = None) -> None:
        errno = _lookup(code)
        self.code: Errno | int = errno if errno is not None else abs(int(code))
        if message is None:
            message = errno.description if errno is not None else f"error {self.code}"
        self.message = message
        super().__init__(f"{error_name(self.code)}: {message}")

    @property
    def retval(self) -> int:
        """The negated error number, as a system call would return it."""
        return -int(self.code)