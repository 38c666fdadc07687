"""Pluggable read-through cache for provinces and units."""

from vn_admin.cache.base import PROVINCES_KEY, Cache, units_key
from vn_admin.cache.factory import create_cache
from vn_admin.cache.locks import ReadWriteLock
from vn_admin.cache.memory import MemoryCache
from vn_admin.cache.redis_cache import RedisCache

__all__ = [
    "Cache",
    "MemoryCache",
    "RedisCache",
    "ReadWriteLock",
    "create_cache",
    "PROVINCES_KEY",
    "units_key",
]
