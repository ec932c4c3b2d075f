"""Expiring key/value stores consumed by the cache manager.

The manager only needs the small ``CacheStore`` contract below. ``MemoryStore``
is the in-process implementation used by default; any object with the same
four methods can be injected instead.
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple


class CacheStore(Protocol):
    def get(self, key: str) -> Optional[Any]:
        """Return the live value for ``key`` or None."""
        ...

    def set(self, key: str, value: Any, expires_at: float) -> None:
        """Store ``value`` until the absolute timestamp ``expires_at``, replacing any entry."""
        ...

    def remove(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        """Snapshot of the keys currently present."""
        ...


class MemoryStore:
    """Thread-safe dict of ``key -> (expires_at, value)`` with lazy expiry.

    ``clock`` returns the current absolute time in seconds and must agree with
    the clock used to compute ``expires_at``.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._data: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            exp, val = entry
            if exp <= self.clock():
                # expired
                del self._data[key]
                return None
            return val

    def set(self, key: str, value: Any, expires_at: float) -> None:
        with self._lock:
            self._data[key] = (expires_at, value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            self._sweep()
            return list(self._data)

    def _sweep(self) -> None:
        now = self.clock()
        for key in [k for k, (exp, _) in self._data.items() if exp <= now]:
            del self._data[key]

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self.keys())


def make_default_store(clock: Callable[[], float] = time.time) -> MemoryStore:
    """A fresh in-memory store; every call returns a new, unshared instance."""
    return MemoryStore(clock=clock)
