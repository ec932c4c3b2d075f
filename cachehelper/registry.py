import logging
import threading
import time
from typing import Callable, Optional

from . import metrics
from .store import CacheStore, MemoryStore

log = logging.getLogger("registry")

LOCK_PREFIX = "locker@"


def lock_key(key: str) -> str:
    return LOCK_PREFIX + key


class LockHandle:
    """Binary semaphore shared by every caller racing for one cache key."""

    def __init__(self):
        self._sem = threading.BoundedSemaphore(1)

    def acquire(self, timeout: Optional[float] = None) -> bool:
        return self._sem.acquire(timeout=timeout)

    def release(self) -> None:
        self._sem.release()


class LockRegistry:
    """One ``LockHandle`` per cache key, kept in an expiring store.

    By default handles live in a private store, apart from cached data. Passing
    the data store itself shares one namespace: data keys starting with
    ``locker@`` then land on lock slots, and ``get_or_create`` falls back to an
    unregistered handle for them.
    """

    def __init__(self, store: Optional[CacheStore] = None, clock: Callable[[], float] = time.time):
        self.store = store if store is not None else MemoryStore(clock=clock)
        self.clock = clock
        # guards handle creation and removal only, never a loader call
        self._mutex = threading.Lock()

    def get_or_create(self, key: str, ttl: float) -> LockHandle:
        lkey = lock_key(key)
        with self._mutex:
            try:
                current = self.store.get(lkey)
                if current is None:
                    handle = LockHandle()
                    self.store.set(lkey, handle, self.clock() + ttl)
                    return handle
                if isinstance(current, LockHandle):
                    return current
                log.warning("lock slot holds a non-lock value", extra={"key": key, "found": type(current).__name__})
            except Exception:
                log.warning("lock lookup failed", exc_info=True, extra={"key": key})
        metrics.registry_fallbacks.inc()
        return LockHandle()

    def discard(self, key: str, handle: LockHandle) -> bool:
        """Remove the registered handle for ``key`` if it is still ``handle``."""
        lkey = lock_key(key)
        with self._mutex:
            if self.store.get(lkey) is not handle:
                return False
            self.store.remove(lkey)
            return True

    def current(self, key: str) -> Optional[LockHandle]:
        value = self.store.get(lock_key(key))
        return value if isinstance(value, LockHandle) else None
