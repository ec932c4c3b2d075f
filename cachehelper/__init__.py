"""In-process get-or-load cache with per-key single-flight loading."""

from .manager import CacheManager
from .outcome import Absent, Found, LoadFailed, Outcome, unwrap
from .registry import LockHandle, LockRegistry, lock_key
from .store import CacheStore, MemoryStore, make_default_store

__all__ = [
    "CacheManager",
    "CacheStore",
    "MemoryStore",
    "make_default_store",
    "LockRegistry",
    "LockHandle",
    "lock_key",
    "Found",
    "Absent",
    "LoadFailed",
    "Outcome",
    "unwrap",
]
