"""Result of a single get-or-load attempt.

``CacheManager.load`` returns one of these so callers can tell a miss from a
failed computation. ``unwrap`` collapses them back to ``value | None``.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

MISS = "miss"
TIMEOUT = "timeout"
EMPTY = "empty"


@dataclass(frozen=True)
class Found:
    value: Any
    # False when the validator refused the value: returned but not stored
    cached: bool = True


@dataclass(frozen=True)
class Absent:
    reason: str = MISS


@dataclass(frozen=True)
class LoadFailed:
    cause: BaseException


Outcome = Union[Found, Absent, LoadFailed]


def unwrap(outcome: Outcome) -> Optional[Any]:
    if isinstance(outcome, Found):
        return outcome.value
    return None
