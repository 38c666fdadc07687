"""
Cache Interface Module
======================

Read-through cache contract used by the API routes. A miss and a backend
error look the same to callers: both mean "read the store".
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from vn_admin.core.schema import AdminUnit, Province

PROVINCES_KEY = "provinces"


def units_key(province_id: int) -> str:
    """Logical cache key for one province's unit list."""
    return f"units:{province_id}"


class Cache(ABC):
    """
    Cache for the province list and per-province unit lists.

    Entries expire ``ttl`` seconds after they are set. An expired or empty
    entry is a miss. Getters never raise; setters and ``ping`` raise
    ``CacheError``, which callers treat as advisory.
    """

    def __init__(self, ttl: float) -> None:
        self.ttl = ttl

    @abstractmethod
    def get_provinces(self) -> tuple[list[Province], bool]:
        """
        Get the cached province list.

        Returns:
            ``(provinces, True)`` on a hit, ``([], False)`` otherwise.
        """
        pass

    @abstractmethod
    def set_provinces(self, provinces: list[Province]) -> None:
        """
        Cache the province list for ``ttl`` seconds.

        Raises:
            CacheError: If the backend rejects the write.
        """
        pass

    @abstractmethod
    def get_units(self, province_id: int) -> tuple[list[AdminUnit], bool]:
        """
        Get the cached units of one province.

        Returns:
            ``(units, True)`` on a hit, ``([], False)`` otherwise.
        """
        pass

    @abstractmethod
    def set_units(self, province_id: int, units: list[AdminUnit]) -> None:
        """
        Cache the units of one province for ``ttl`` seconds.

        Raises:
            CacheError: If the backend rejects the write.
        """
        pass

    @abstractmethod
    def ping(self) -> None:
        """
        Check backend health.

        Raises:
            CacheError: If the backend is unreachable.
        """
        pass

    def close(self) -> None:
        """Release backend resources."""
        return None

    @property
    def backend_name(self) -> str:
        """Short name for health output and logs."""
        return type(self).__name__
