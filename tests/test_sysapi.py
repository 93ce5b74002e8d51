import pytest

from lumonos.errors import Errno, SysError
from lumonos.sysapi import FileSystem, Pipe, Process
from lumonos.uio import Fcntl, MemoryUio


@pytest.fixture
def fs():
    files = FileSystem()
    files.create("c/alpha")
    files.create("beta")
    return files


def test_pipe_round_trip():
    pipe = Pipe()
    assert pipe.writer().write(b"hello") == 5
    assert pipe.reader().read(10) == b"hello"


def test_pipe_empty_with_writer_open():
    pipe = Pipe()
    with pytest.raises(SysError) as info:
        pipe.reader().read(4)
    assert info.value.code == Errno.EBUSY


def test_pipe_end_of_input_after_writer_closed():
    pipe = Pipe()
    pipe.writer().write(b"ab")
    pipe.writer().close()
    assert pipe.reader().read(1) == b"a"
    assert pipe.reader().read(10) == b"b"
    assert pipe.reader().read(10) == b""


def test_pipe_write_without_reader():
    pipe = Pipe()
    pipe.reader().close()
    with pytest.raises(SysError) as info:
        pipe.writer().write(b"x")
    assert info.value.code == Errno.EPIPE


def test_file_contents_persist(fs):
    uio = fs.open("c/alpha")
    uio.write(b"some data")
    uio.close()
    again = fs.open("alpha")
    assert again.read(100) == b"some data"
    assert again.cntl(Fcntl.GETEND) == len(b"some data")


def test_create_existing_fails(fs):
    with pytest.raises(SysError) as info:
        fs.create("c/alpha")
    assert info.value.code == Errno.EINVAL


def test_create_on_device_mount_fails(fs):
    with pytest.raises(SysError) as info:
        fs.create("dev/thing")
    assert info.value.code == Errno.EINVAL


def test_open_missing(fs):
    with pytest.raises(SysError) as info:
        fs.open("c/missing")
    assert info.value.code == Errno.ENOENT


def test_open_twice_is_busy(fs):
    first = fs.open("c/alpha")
    with pytest.raises(SysError) as info:
        fs.open("c/alpha")
    assert info.value.code == Errno.EBUSY
    first.close()
    second = fs.open("c/alpha")
    assert second.read(10) == b""


def test_delete(fs):
    fs.delete("c/beta")
    assert fs.listing("c") == ["alpha"]
    with pytest.raises(SysError) as info:
        fs.delete("c/beta")
    assert info.value.code == Errno.ENOENT


def test_delete_open_file_is_busy(fs):
    fs.open("c/alpha")
    with pytest.raises(SysError) as info:
        fs.delete("c/alpha")
    assert info.value.code == Errno.EBUSY


def test_listings(fs):
    fs.add_device("rtc0", MemoryUio)
    assert fs.listing("") == ["c", "dev"]
    assert fs.listing("c/") == ["alpha", "beta"]
    assert fs.listing("dev") == ["rtc0"]


def test_open_listing(fs):
    assert fs.open("c").read(100) == b"alpha\nbeta\n"
    assert fs.open("").read(100) == b"c\ndev"


def test_listing_is_read_only(fs):
    with pytest.raises(SysError) as info:
        fs.open("c").write(b"x")
    assert info.value.code == Errno.ENOTSUP


def test_device_open_uses_factory(fs):
    device = MemoryUio(b"tick")
    fs.add_device("clock0", lambda: device)
    assert fs.open("dev/clock0") is device
    with pytest.raises(SysError) as info:
        fs.open("dev/none0")
    assert info.value.code == Errno.ENOENT


def test_process_open_lowest_free(fs):
    proc = Process(fs)
    assert proc.open(-1, "c/alpha") == 0
    assert proc.open(5, "c/beta") == 5
    assert proc.open(-1, "c") == 1


def test_process_open_occupied_fd(fs):
    proc = Process(fs)
    proc.open(0, "c/alpha")
    with pytest.raises(SysError) as info:
        proc.open(0, "c/beta")
    assert info.value.code == Errno.EBADFD


def test_process_too_many_open(fs):
    fs.add_device("null0", MemoryUio)
    proc = Process(fs)
    fds = [proc.open(-1, "dev/null0") for _ in range(16)]
    assert fds == list(range(16))
    with pytest.raises(SysError) as info:
        proc.open(-1, "dev/null0")
    assert info.value.code == Errno.EMFILE


def test_process_close_empty(fs):
    proc = Process(fs)
    with pytest.raises(SysError) as info:
        proc.close(3)
    assert info.value.code == Errno.EBADFD


def test_process_read_write_and_fcntl(fs):
    proc = Process(fs)
    fd = proc.open(-1, "c/alpha")
    assert proc.write(fd, "hello") == 5
    assert proc.fcntl(fd, Fcntl.GETPOS) == 5
    proc.fcntl(fd, Fcntl.SETPOS, 0)
    assert proc.read(fd, 10) == b"hello"


def test_process_pipe(fs):
    proc = Process(fs)
    wfd, rfd = proc.pipe()
    assert {wfd, rfd} == {0, 1}
    proc.write(wfd, b"data")
    assert proc.read(rfd, 10) == b"data"
    proc.close(wfd)
    assert proc.read(rfd, 10) == b""


def test_uiodup_keeps_file_open(fs):
    proc = Process(fs)
    fd = proc.open(-1, "c/alpha")
    dup = proc.uiodup(fd, 7)
    assert dup == 7
    proc.close(fd)
    with pytest.raises(SysError) as info:
        fs.open("c/alpha")
    assert info.value.code == Errno.EBUSY
    proc.write(dup, b"x")
    proc.close(dup)
    assert fs.open("c/alpha").read(5) == b"x"


def test_uiodup_bad_old_fd(fs):
    proc = Process(fs)
    with pytest.raises(SysError) as info:
        proc.uiodup(4, -1)
    assert info.value.code == Errno.EBADFD


def test_fork_shares_endpoints(fs):
    proc = Process(fs)
    fd = proc.open(-1, "c/alpha")
    proc.write(fd, b"shared")
    child = proc.fork()
    proc.close(fd)
    child.fcntl(fd, Fcntl.SETPOS, 0)
    assert child.read(fd, 10) == b"shared"


def test_fscreate_and_fsdelete(fs):
    proc = Process(fs)
    proc.fscreate("c/gamma")
    assert "gamma" in fs.listing("c")
    proc.fsdelete("c/gamma")
    assert "gamma" not in fs.listing("c")


def test_context_manager_closes_descriptors(fs):
    with Process(fs) as proc:
        proc.open(-1, "c/alpha")
    reopened = fs.open("c/alpha")
    assert reopened.read(1) == b""