"""Thread-safety helpers, scoped resources and small numeric utilities."""

from __future__ import annotations

import threading
from array import array
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

_STATUS_OK = 0


class ScopedLock:
    """Context manager that holds a lock for the duration of a block.

    A ``None`` lock is accepted and simply never becomes locked.
    """

    def __init__(self, lock: Optional[Any]) -> None:
        self._lock = lock
        self.locked = False

    def __enter__(self) -> "ScopedLock":
        self.locked = self._lock is not None and bool(self._lock.acquire())
        return self

    def __exit__(self, *args: Any) -> None:
        if self.locked and self._lock is not None:
            self._lock.release()
        self.locked = False


class ScopedSemaphore:
    """Context manager that acquires a semaphore, optionally with a timeout.

    ``timeout`` is in microseconds; ``None`` waits forever. A failed
    acquisition leaves ``acquired`` false instead of raising.
    """

    def __init__(self, semaphore: Optional[Any], timeout: Optional[int] = None) -> None:
        self._semaphore = semaphore
        self._timeout = timeout
        self.acquired = False

    def __enter__(self) -> "ScopedSemaphore":
        if self._semaphore is not None:
            if self._timeout is None:
                self.acquired = bool(self._semaphore.acquire())
            else:
                self.acquired = bool(
                    self._semaphore.acquire(timeout=self._timeout / 1_000_000)
                )
        return self

    def release(self) -> None:
        """Release the semaphore early; later releases do nothing."""
        if self.acquired and self._semaphore is not None:
            self._semaphore.release()
            self.acquired = False

    def __exit__(self, *args: Any) -> None:
        self.release()


class ScopedBuffer:
    """A fixed-size typed buffer that can be reallocated or freed.

    An unallocated buffer has length 0 and is falsy.
    """

    def __init__(self, count: int = 0, typecode: str = "B") -> None:
        self._typecode = typecode
        self._data: Optional[array] = None
        if count > 0:
            self.allocate(count)

    def allocate(self, count: int) -> bool:
        """Replace the contents with ``count`` zeroed items."""
        self.free()
        if count > 0:
            self._data = array(self._typecode, bytes(count * array(self._typecode).itemsize))
        return self._data is not None

    def free(self) -> None:
        """Drop the contents."""
        self._data = None

    def __len__(self) -> int:
        return 0 if self._data is None else len(self._data)

    def __getitem__(self, index: int) -> int:
        if self._data is None:
            raise IndexError("buffer is not allocated")
        return self._data[index]

    def __setitem__(self, index: int, value: int) -> None:
        if self._data is None:
            raise IndexError("buffer is not allocated")
        self._data[index] = value


class AtomicFlag:
    """A thread-safe boolean."""

    def __init__(self, initial: bool = False) -> None:
        self._value = bool(initial)
        self._lock = threading.Lock()

    def get(self) -> bool:
        with self._lock:
            return self._value

    def set(self, value: bool) -> None:
        with self._lock:
            self._value = bool(value)

    def test_and_set(self, new_value: bool) -> bool:
        """Set to ``new_value`` if currently its opposite; return the old value."""
        new_value = bool(new_value)
        with self._lock:
            old = self._value
            if old == (not new_value):
                self._value = new_value
            return old

    def __bool__(self) -> bool:
        return self.get()


class AtomicCounter:
    """A thread-safe integer counter."""

    def __init__(self, initial: int = 0) -> None:
        self._value = initial
        self._lock = threading.Lock()

    def get(self) -> int:
        with self._lock:
            return self._value

    def set(self, value: int) -> None:
        with self._lock:
            self._value = value

    def increment(self) -> int:
        """Add one and return the new value."""
        return self.add(1)

    def decrement(self) -> int:
        """Subtract one and return the new value."""
        return self.add(-1)

    def add(self, delta: int) -> int:
        """Add ``delta`` and return the new value."""
        with self._lock:
            self._value += delta
            return self._value

    def __int__(self) -> int:
        return self.get()


class RingBufferIndex:
    """Head/tail index management for a circular buffer.

    One slot is always kept empty, so at most ``capacity - 1`` items fit.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._head = 0
        self._tail = 0
        self._lock = threading.Lock()

    def is_empty(self) -> bool:
        with self._lock:
            return self._head == self._tail

    def is_full(self) -> bool:
        with self._lock:
            return (self._head + 1) % self.capacity == self._tail

    def count(self) -> int:
        with self._lock:
            if self._head >= self._tail:
                return self._head - self._tail
            return self.capacity - self._tail + self._head

    def reserve_write(self) -> Optional[int]:
        """Return the slot to write to, or ``None`` if full."""
        with self._lock:
            if (self._head + 1) % self.capacity == self._tail:
                return None
            return self._head

    def commit_write(self) -> None:
        with self._lock:
            self._head = (self._head + 1) % self.capacity

    def reserve_read(self) -> Optional[int]:
        """Return the slot to read from, or ``None`` if empty."""
        with self._lock:
            if self._tail == self._head:
                return None
            return self._tail

    def commit_read(self) -> None:
        with self._lock:
            self._tail = (self._tail + 1) % self.capacity

    def reset(self) -> None:
        with self._lock:
            self._head = 0
            self._tail = 0


@dataclass(frozen=True)
class Result(Generic[T]):
    """A value or an error status."""

    value: Optional[T] = None
    status: int = _STATUS_OK

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value, status=_STATUS_OK)

    @classmethod
    def error(cls, status: int) -> "Result[T]":
        if status == _STATUS_OK:
            raise ValueError("an error result needs a non-zero status")
        return cls(value=None, status=status)

    @property
    def is_ok(self) -> bool:
        return self.status == _STATUS_OK

    def value_or(self, default: T) -> T:
        """Return the value on success, otherwise ``default``."""
        return self.value if self.is_ok else default  # type: ignore[return-value]


def _div_toward_zero(value: int, divisor: int) -> int:
    quotient = abs(value) // divisor
    return quotient if value >= 0 else -quotient


def microseconds_to_milliseconds(us: int) -> int:
    return _div_toward_zero(us, 1000)


def milliseconds_to_microseconds(ms: int) -> int:
    return ms * 1000


def seconds_to_microseconds(seconds: int) -> int:
    return seconds * 1_000_000


def microseconds_to_fps(interval: int) -> float:
    """Frames per second for a microsecond interval; 0 for interval <= 0."""
    if interval <= 0:
        return 0.0
    return 1_000_000.0 / interval


def fps_to_microseconds(fps: float) -> int:
    """Microsecond interval for a frame rate; 0 for fps <= 0."""
    if fps <= 0.0:
        return 0
    return int(1_000_000.0 / fps)


def clamp(value, min_value, max_value):
    """Limit ``value`` to the closed range [min_value, max_value]."""
    if value < min_value:
        return min_value
    if value > max_value:
        return max_value
    return value


def clamp_byte(value: int) -> int:
    """Limit an integer to 0..255."""
    if value < 0:
        return 0
    if value > 255:
        return 255
    return value