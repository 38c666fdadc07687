"""
In-Process Cache Module
=======================

Fallback cache used when Redis is not configured or not reachable.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from vn_admin.cache.base import Cache
from vn_admin.cache.locks import ReadWriteLock
from vn_admin.core.schema import AdminUnit, Province

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A cached list and the monotonic time it stops being valid."""

    data: list[T]
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at and len(self.data) > 0


class MemoryCache(Cache):
    """
    Process-local cache with the same TTL semantics as RedisCache.

    The province entry and the unit mapping have separate reader/writer
    locks, so unit traffic never blocks province reads and concurrent
    reads never block each other. Expiry is checked on every read; stale
    entries stay in memory until overwritten.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__(ttl)
        self._clock = clock

        self._provinces_lock = ReadWriteLock()
        self._provinces: CacheEntry[Province] | None = None

        self._units_lock = ReadWriteLock()
        self._units: dict[int, CacheEntry[AdminUnit]] = {}

    def get_provinces(self) -> tuple[list[Province], bool]:
        with self._provinces_lock.read():
            entry = self._provinces
            if entry is not None and entry.is_valid(self._clock()):
                return list(entry.data), True
        return [], False

    def set_provinces(self, provinces: list[Province]) -> None:
        entry = CacheEntry(data=list(provinces), expires_at=self._clock() + self.ttl)
        with self._provinces_lock.write():
            self._provinces = entry

    def get_units(self, province_id: int) -> tuple[list[AdminUnit], bool]:
        with self._units_lock.read():
            entry = self._units.get(province_id)
            if entry is not None and entry.is_valid(self._clock()):
                return list(entry.data), True
        return [], False

    def set_units(self, province_id: int, units: list[AdminUnit]) -> None:
        entry = CacheEntry(data=list(units), expires_at=self._clock() + self.ttl)
        with self._units_lock.write():
            self._units[province_id] = entry

    def ping(self) -> None:
        """Memory is always available."""
        return None

    @property
    def backend_name(self) -> str:
        return "memory"
