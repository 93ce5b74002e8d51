"""Simple non-freeing bump allocator over a private memory region."""

from __future__ import annotations


class HeapError(Exception):
    """The heap cannot be set up or cannot satisfy a request."""


class BumpHeap:
    """A heap that hands out memory from the low end and never reuses it."""

    def __init__(self, start: int, end: int) -> None:
        if start > end:
            raise HeapError("Heap Uninitialized")
        self.start = start
        self.end = end
        self._low = start
        self._memory = bytearray(end - start)

    @property
    def used(self) -> int:
        return self._low - self.start

    @property
    def remaining(self) -> int:
        return self.end - self._low

    def malloc(self, size: int) -> int | None:
        """Reserve ``size`` bytes and return their address, or None for zero."""
        if size < 0:
            raise ValueError("size must not be negative")
        if size == 0:
            return None
        if size > self.end - self._low:
            raise HeapError("Heap Overflow")
        ptr = self._low
        self._low += size
        return ptr

    def calloc(self, nelts: int, eltsz: int) -> int | None:
        """Reserve ``nelts * eltsz`` zeroed bytes."""
        size = nelts * eltsz
        ptr = self.malloc(size)
        if ptr is None:
            return None
        offset = ptr - self.start
        self._memory[offset:offset + size] = bytes(size)
        return ptr

    def free(self, ptr: int | None) -> None:
        """Accept a released block; memory is never reclaimed.

        A pointer that was never handed out by this heap is rejected.
        """
        if ptr is None:
            return
        if not self.start <= ptr < self._low:
            raise HeapError(f"free of unallocated address {ptr:#x}")

    def _offset(self, ptr: int, size: int) -> int:
        if size < 0:
            raise ValueError("size must not be negative")
        if ptr < self.start or ptr + size > self._low:
            raise HeapError(f"access outside allocated memory at {ptr:#x}")
        return ptr - self.start

    def read(self, ptr: int, size: int) -> bytes:
        """Return ``size`` bytes stored at ``ptr``."""
        offset = self._offset(ptr, size)
        return bytes(self._memory[offset:offset + size])

    def write(self, ptr: int, data: bytes) -> None:
        """Store ``data`` at ``ptr``."""
        offset = self._offset(ptr, len(data))
        self._memory[offset:offset + len(data)] = data