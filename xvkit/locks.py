"""Spin locks and sleeping locks with holder checks."""

import threading

__all__ = ["LockError", "SpinLock", "SleepLock"]


class LockError(RuntimeError):
    """Raised on acquiring a held lock again or releasing one not held."""


class SpinLock:
    """A mutual-exclusion lock that refuses re-entry and foreign release."""

    def __init__(self, name):
        self.name = name
        self._lock = threading.Lock()
        self.owner = None

    @property
    def locked(self):
        """Whether any thread holds the lock."""
        return self._lock.locked()

    def acquire(self):
        """Wait for and take the lock."""
        if self.holding():
            raise LockError(f"acquire: {self.name} already held")
        self._lock.acquire()
        self.owner = threading.get_ident()

    def release(self):
        """Give the lock up; only the holder may do so."""
        if not self.holding():
            raise LockError(f"release: {self.name} not held")
        self.owner = None
        self._lock.release()

    def holding(self):
        """Whether the calling thread holds the lock."""
        return self._lock.locked() and self.owner == threading.get_ident()

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, *args):
        self.release()
        return False


class SleepLock:
    """A long-term lock whose waiters sleep until it is released."""

    def __init__(self, name):
        self.name = name
        self.locked = False
        self.pid = 0
        self._cond = threading.Condition(threading.Lock())

    def acquire(self):
        """Sleep until the lock is free, then take it."""
        with self._cond:
            while self.locked:
                self._cond.wait()
            self.locked = True
            self.pid = threading.get_ident()

    def release(self):
        """Free the lock and wake the sleepers."""
        with self._cond:
            self.locked = False
            self.pid = 0
            self._cond.notify_all()

    def holding(self):
        """Whether the calling thread holds the lock."""
        with self._cond:
            return self.locked and self.pid == threading.get_ident()

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, *args):
        self.release()
        return False