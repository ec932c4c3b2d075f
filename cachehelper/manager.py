"""Get-or-populate cache with per-key single-flight loading.

``CacheManager.load`` runs a caller's loader at most once at a time per key.
Concurrent callers wait on the key's lock for up to ``lock_timeout`` and then
re-check the store. A caller that times out returns ``Absent("timeout")`` and
removes the lock it waited on if that lock is still registered, so a loader
that never released it cannot block the key forever.

``get_or_load`` is the plain form: value or None, never an exception.
"""

import logging
import time
from datetime import timedelta
from typing import Any, Callable, Optional, Type, Union

from . import metrics
from .config import config
from .outcome import EMPTY, TIMEOUT, Absent, Found, LoadFailed, Outcome, unwrap
from .registry import LockRegistry
from .store import CacheStore, make_default_store
from .tracer import start_span

log = logging.getLogger("cache")

Seconds = Union[float, int, timedelta]


def _seconds(value: Seconds) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def accept_all(value: Any) -> bool:
    return True


class CacheManager:
    def __init__(
        self,
        store: Optional[CacheStore] = None,
        *,
        lock_timeout: Optional[Seconds] = None,
        validator: Optional[Callable[[Any], bool]] = None,
        registry: Optional[LockRegistry] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store if store is not None else make_default_store(clock)
        self.clock = clock
        self.registry = registry if registry is not None else LockRegistry(clock=clock)
        self.lock_timeout = _seconds(config.LOCK_TIMEOUT_SEC if lock_timeout is None else lock_timeout)
        self.validator = validator or accept_all

    def get(self, key: str, expected_type: Optional[Type] = None) -> Optional[Any]:
        try:
            value = self.store.get(key)
        except Exception:
            log.exception("store read failed", extra={"key": key})
            value = None
        if value is None:
            metrics.cache_misses.inc()
            return None
        if expected_type is not None and not isinstance(value, expected_type):
            log.debug("cached value has unexpected type", extra={"key": key, "found": type(value).__name__})
            metrics.cache_misses.inc()
            return None
        metrics.cache_hits.inc()
        return value

    def load(self, key: str, loader: Callable[[], Any], ttl: Seconds, expected_type: Optional[Type] = None) -> Outcome:
        ttl = _seconds(ttl)
        handle = self.registry.get_or_create(key, ttl)
        if not handle.acquire(timeout=self.lock_timeout):
            metrics.lock_timeouts.inc()
            healed = self.registry.discard(key, handle)
            if healed:
                metrics.lock_self_heals.inc()
            log.warning("lock wait timed out", extra={"key": key, "lock_timeout": self.lock_timeout, "healed": healed})
            return Absent(TIMEOUT)
        try:
            # another holder may have filled it while we waited
            value = self.get(key, expected_type)
            if value is not None:
                return Found(value)
            return self._run_loader(key, loader, ttl)
        finally:
            handle.release()

    def _run_loader(self, key: str, loader: Callable[[], Any], ttl: float) -> Outcome:
        metrics.loader_calls.inc()
        start = time.monotonic()
        try:
            with start_span("cache.load", key=key):
                value = loader()
        except Exception as exc:
            metrics.loader_failures.inc()
            log.exception("loader failed", extra={"key": key})
            return LoadFailed(exc)
        finally:
            metrics.loader_latency_seconds.observe(time.monotonic() - start)
        if value is None:
            return Absent(EMPTY)
        if not self._accepts(key, value):
            metrics.validator_rejections.inc()
            log.info("validator rejected loaded value", extra={"key": key})
            return Found(value, cached=False)
        self.set(key, value, ttl)
        return Found(value)

    def _accepts(self, key: str, value: Any) -> bool:
        try:
            return bool(self.validator(value))
        except Exception:
            log.exception("validator raised", extra={"key": key})
            return False

    def get_or_load(self, key: str, loader: Callable[[], Any], ttl: Seconds, expected_type: Optional[Type] = None) -> Optional[Any]:
        return unwrap(self.load(key, loader, ttl, expected_type))

    def set(self, key: str, value: Any, ttl: Seconds) -> None:
        try:
            self.store.set(key, value, self.clock() + _seconds(ttl))
        except Exception:
            log.exception("store write failed", extra={"key": key})

    def remove(self, key: str) -> None:
        try:
            self.store.remove(key)
        except Exception:
            log.exception("store remove failed", extra={"key": key})

    def clear(self) -> None:
        # snapshot first; removing while iterating a live view is unsafe
        try:
            keys = list(self.store.keys())
        except Exception:
            log.exception("store enumeration failed")
            return
        for key in keys:
            self.remove(key)
