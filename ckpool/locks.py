"""Instrumented mutexes, read-write locks and the write-biased ``CkLock``.

Every blocking acquisition waits in rounds of ``timeout`` seconds. A warning
naming the current holder is logged after each failed round. After
``retries`` rounds ``LockContentionError`` is raised.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_RETRIES = 6


class LockContentionError(RuntimeError):
    """A lock could not be acquired within the allowed number of waits."""


def _current() -> str:
    return threading.current_thread().name


class CkMutex:
    """A mutex that remembers its holder and gives up on prolonged contention."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, retries: int = DEFAULT_RETRIES) -> None:
        self._lock = threading.Lock()
        self.timeout = timeout
        self.retries = retries
        self.holder: str | None = None

    def timedlock(self, timeout: float) -> bool:
        """Try to take the mutex for up to ``timeout`` seconds."""
        if self._lock.acquire(timeout=max(timeout, 0.0)):
            self.holder = _current()
            return True
        return False

    def lock(self) -> None:
        """Take the mutex, raising ``LockContentionError`` on prolonged contention."""
        for _ in range(self.retries):
            if self.timedlock(self.timeout):
                return
            logger.error("WARNING: Prolonged mutex lock contention from %s, held by %s",
                         _current(), self.holder)
        raise LockContentionError("FAILED TO GRAB MUTEX!")

    def trylock(self) -> bool:
        """Take the mutex only if it is free right now."""
        if self._lock.acquire(blocking=False):
            self.holder = _current()
            return True
        return False

    def unlock(self) -> None:
        """Release the mutex; ``RuntimeError`` if it is not held."""
        try:
            self._lock.release()
        except RuntimeError as exc:
            raise RuntimeError("Mutex error on unlock: not locked") from exc

    def locked(self) -> bool:
        """Whether the mutex is currently held."""
        return self._lock.locked()

    def __enter__(self) -> "CkMutex":
        self.lock()
        return self

    def __exit__(self, *exc: object) -> None:
        self.unlock()


class RWLock:
    """A read-write lock: many readers or one writer."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, retries: int = DEFAULT_RETRIES) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self.timeout = timeout
        self.retries = retries
        self.holder: str | None = None

    @property
    def readers(self) -> int:
        """Number of read locks currently held."""
        return self._readers

    @property
    def writing(self) -> bool:
        """Whether the write lock is currently held."""
        return self._writer

    def _acquire(self, kind: str, ready: Callable[[], bool], take: Callable[[], None]) -> None:
        for _ in range(self.retries):
            with self._cond:
                if self._cond.wait_for(ready, self.timeout):
                    take()
                    self.holder = _current()
                    return
            logger.error("WARNING: Prolonged %s lock contention from %s, held by %s",
                         kind, _current(), self.holder)
        raise LockContentionError(f"FAILED TO GRAB {kind.upper()} LOCK!")

    def _take_read(self) -> None:
        self._readers += 1

    def _take_write(self) -> None:
        self._writer = True

    def rd_lock(self) -> None:
        """Take a shared read lock."""
        self._acquire("read", lambda: not self._writer, self._take_read)

    def wr_lock(self) -> None:
        """Take the exclusive write lock."""
        self._acquire("write", lambda: not self._writer and not self._readers,
                      self._take_write)

    def wr_trylock(self) -> bool:
        """Take the write lock only if it is free right now."""
        with self._cond:
            if self._writer or self._readers:
                return False
            self._writer = True
            self.holder = _current()
            return True

    def rd_unlock(self) -> None:
        """Release one read lock; ``RuntimeError`` if none is held."""
        with self._cond:
            if not self._readers:
                raise RuntimeError("RWLock error on unlock: no read lock held")
            self._readers -= 1
            if not self._readers:
                self._cond.notify_all()

    def wr_unlock(self) -> None:
        """Release the write lock; ``RuntimeError`` if it is not held."""
        with self._cond:
            if not self._writer:
                raise RuntimeError("RWLock error on unlock: write lock not held")
            self._writer = False
            self._cond.notify_all()


class CkLock:
    """A write-biased lock made of a mutex guarding a read-write lock.

    Writers hold the mutex for as long as they hold the write lock, so new
    readers queue behind a waiting writer. A read lock cannot be promoted.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, retries: int = DEFAULT_RETRIES) -> None:
        self.mutex = CkMutex(timeout, retries)
        self.rwlock = RWLock(timeout, retries)

    def rlock(self) -> None:
        """Take a read lock."""
        self.mutex.lock()
        try:
            self.rwlock.rd_lock()
        finally:
            self.mutex.unlock()

    def wlock(self) -> None:
        """Take the write lock."""
        self.mutex.lock()
        try:
            self.rwlock.wr_lock()
        except BaseException:
            self.mutex.unlock()
            raise

    def dwlock(self) -> None:
        """Downgrade a held write lock to a read lock."""
        self.rwlock.wr_unlock()
        self.rwlock.rd_lock()
        self.mutex.unlock()

    def dwilock(self) -> None:
        """Demote a held write lock, keeping only the mutex."""
        self.rwlock.wr_unlock()

    def runlock(self) -> None:
        """Release a read lock."""
        self.rwlock.rd_unlock()

    def wunlock(self) -> None:
        """Release the write lock."""
        self.rwlock.wr_unlock()
        self.mutex.unlock()


def ck_completion_timeout(fn: Callable[[Any], Any], arg: Any, timeout: int) -> bool:
    """Run ``fn(arg)`` in a thread and wait up to ``timeout`` milliseconds.

    Returns True if it finished in time. A call that overruns is left to
    finish on its own daemon thread.
    """
    done = threading.Event()

    def _run() -> None:
        try:
            fn(arg)
        finally:
            done.set()

    thread = threading.Thread(target=_run, daemon=True)
    thread.start()
    if done.wait(max(timeout, 0) / 1000.0):
        thread.join()
        return True
    return False