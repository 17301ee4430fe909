"""
=============================================================================
READERS-WRITER LOCK
=============================================================================

A lock that lets many readers in at once but gives writers exclusive access.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WHO MAY HOLD THE LOCK?                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Holding now      │  New reader        │  New writer               │
    │   ─────────────────┼────────────────────┼─────────────────────────  │
    │   nobody           │  enters            │  enters                   │
    │   N readers        │  enters*           │  waits for readers = 0    │
    │   a writer         │  waits             │  waits                    │
    │                                                                      │
    │   * unless a writer is already waiting (writer preference)          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The standard library only ships a mutual-exclusion lock, so this is built
from a single threading.Condition. Writers are preferred: once a writer is
waiting, new readers queue behind it. Without that, a steady stream of
GET requests could keep a POST waiting forever.

Usage:

    lock = ReadWriteLock()

    with lock.read_locked():
        snapshot = list(items.values())

    with lock.write_locked():
        items[key] = value

=============================================================================
"""

from contextlib import contextmanager
from typing import Iterator
import threading


class ReadWriteLock:
    """
    Writer-preferring readers-writer lock.

    Not reentrant: a thread holding the write lock must not try to take
    the read lock (or the write lock again). It would deadlock.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0             # Threads currently reading
        self._writer = False          # A thread is currently writing
        self._writers_waiting = 0     # Writers queued for the lock

    # =========================================================================
    # READ SIDE
    # =========================================================================

    def acquire_read(self) -> None:
        """Block until no writer holds or waits for the lock, then enter."""
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() called without a read lock held")
            self._readers -= 1
            if self._readers == 0:
                # Last reader out lets a waiting writer in
                self._cond.notify_all()

    # =========================================================================
    # WRITE SIDE
    # =========================================================================

    def acquire_write(self) -> None:
        """Block until there are no readers and no writer, then enter."""
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() called without the write lock held")
            self._writer = False
            self._cond.notify_all()

    # =========================================================================
    # CONTEXT MANAGERS
    # =========================================================================

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the read lock for the duration of a with-block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the write lock for the duration of a with-block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def readers(self) -> int:
        """Number of threads holding the read lock (diagnostics only)."""
        with self._cond:
            return self._readers

    @property
    def is_write_locked(self) -> bool:
        """Whether a writer currently holds the lock (diagnostics only)."""
        with self._cond:
            return self._writer
