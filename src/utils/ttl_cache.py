"""
Explicit time-to-live cache for catalog lookups
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    timestamp: float


def is_fresh(entry: Optional[CacheEntry], ttl_seconds: float, now: float) -> bool:
    """Return True if the entry exists and is younger than the TTL."""
    if entry is None:
        return False
    return now - entry.timestamp < ttl_seconds


class TTLCache(Generic[T]):
    """
    Single-value cache owned by the component that needs it

    Lifetime is the owner's lifetime; invalidation is explicit through
    ``invalidate()`` or the ``force_refresh`` flag on ``get``.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.entry: Optional[CacheEntry[T]] = None

    def get(self, force_refresh: bool = False) -> Optional[T]:
        if force_refresh:
            return None
        if not is_fresh(self.entry, self.ttl_seconds, self.clock()):
            return None
        return self.entry.value

    def set(self, value: T) -> T:
        self.entry = CacheEntry(value=value, timestamp=self.clock())
        return value

    def invalidate(self) -> None:
        self.entry = None
