"""Open-directory ceiling and concurrency gauge."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

DEFAULT_MAX_OPEN = 100


class ConcurrencyLimiter:
    """Counting permit pool bounding how many directories are read at once.

    This caps open file descriptors, not threads: a walk unit holds a permit
    only while it lists its directory. ``acquire`` waits as long as it takes.
    """

    def __init__(self, capacity: int = DEFAULT_MAX_OPEN) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._permits = threading.BoundedSemaphore(capacity)

    def acquire(self) -> None:
        self._permits.acquire()

    def release(self) -> None:
        self._permits.release()

    @contextmanager
    def permit(self) -> Iterator[None]:
        self.acquire()
        try:
            yield
        finally:
            self.release()


class Gauge:
    """Active-unit counter that remembers its high-water mark."""

    def __init__(self) -> None:
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def enter(self) -> None:
        with self._lock:
            self.active += 1
            if self.active > self.peak:
                self.peak = self.active

    def exit(self) -> None:
        with self._lock:
            self.active -= 1
