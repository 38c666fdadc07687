"""Startup selection of the cache backend."""

import logging

from vn_admin.cache.base import Cache
from vn_admin.cache.memory import MemoryCache
from vn_admin.cache.redis_cache import RedisCache
from vn_admin.core.errors import CacheError
from vn_admin.core.settings import Settings

logger = logging.getLogger(__name__)


def create_cache(settings: Settings) -> Cache:
    """
    Pick the cache backend once, at startup.

    Redis is used when REDIS_URL is set and the server answers. Any
    connection problem falls back to the in-process cache, so the service
    always starts.
    """
    if not settings.redis_url:
        logger.info("Using in-memory cache (no REDIS_URL configured)")
        return MemoryCache(settings.cache_ttl)

    try:
        cache = RedisCache.connect(settings.redis_url, settings.cache_ttl)
    except CacheError as e:
        logger.warning(f"Redis connection failed, falling back to memory cache: {e}")
        return MemoryCache(settings.cache_ttl)

    logger.info(f"Redis cache connected (ttl={settings.cache_ttl:.0f}s)")
    return cache
