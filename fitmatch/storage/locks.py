"""Mutual exclusion scoped to a key (a user pair or a chat)."""

from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator


class KeyedLock:
    """One lock per key, created on demand and freed when unused."""

    def __init__(self):
        self._lock = Lock()
        self._locks: Dict[str, Lock] = {}
        self._waiters: Dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._lock:
            lock = self._locks.setdefault(key, Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._lock:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._locks)
