"""
Redis Cache Module
==================

Networked cache backend. Lists are stored as JSON and expire through
Redis' own key TTL, so nothing needs cleaning up.
"""

from __future__ import annotations

import logging

import redis
from pydantic import TypeAdapter, ValidationError

from vn_admin.cache.base import PROVINCES_KEY, Cache, units_key
from vn_admin.core.errors import CacheError
from vn_admin.core.schema import AdminUnit, AdminUnitList, Province, ProvinceList

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 5.0


class RedisCache(Cache):
    """
    Cache backed by a Redis server.

    Args:
        client: A connected ``redis.Redis`` client.
        ttl: Entry lifetime in seconds.
        prefix: Optional namespace prepended to every key.
    """

    def __init__(self, client: redis.Redis, ttl: float, prefix: str = "") -> None:
        super().__init__(ttl)
        self.client = client
        self.prefix = prefix

    @classmethod
    def connect(cls, url: str, ttl: float, prefix: str = "") -> RedisCache:
        """
        Connect to Redis and verify the connection.

        Raises:
            CacheError: If the URL is invalid or the server does not answer.
        """
        try:
            client = redis.Redis.from_url(
                url,
                socket_connect_timeout=CONNECT_TIMEOUT,
                socket_timeout=CONNECT_TIMEOUT,
                health_check_interval=30,
            )
        except ValueError as e:
            raise CacheError(f"invalid redis url: {e}") from e

        try:
            client.ping()
        except redis.RedisError as e:
            client.close()
            raise CacheError(f"redis connection failed: {e}") from e

        return cls(client, ttl, prefix)

    def _key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def _get_list(self, name: str, adapter: TypeAdapter) -> tuple[list, bool]:
        key = self._key(name)
        try:
            data = self.client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis GET {key} failed: {e}")
            return [], False
        if data is None:
            return [], False

        try:
            items = adapter.validate_json(data)
        except ValidationError as e:
            logger.warning(f"Discarding undecodable cache entry {key}: {e.error_count()} errors")
            return [], False

        if not items:
            return [], False
        return items, True

    def _set_list(self, name: str, items: list, adapter: TypeAdapter) -> None:
        key = self._key(name)
        try:
            payload = adapter.dump_json(items)
        except (ValueError, TypeError) as e:
            raise CacheError(f"cannot serialize {key}: {e}") from e

        ttl_ms = max(1, int(self.ttl * 1000))
        try:
            self.client.set(key, payload, px=ttl_ms)
        except redis.RedisError as e:
            raise CacheError(f"redis SET {key} failed: {e}") from e

    def get_provinces(self) -> tuple[list[Province], bool]:
        return self._get_list(PROVINCES_KEY, ProvinceList)

    def set_provinces(self, provinces: list[Province]) -> None:
        self._set_list(PROVINCES_KEY, provinces, ProvinceList)

    def get_units(self, province_id: int) -> tuple[list[AdminUnit], bool]:
        return self._get_list(units_key(province_id), AdminUnitList)

    def set_units(self, province_id: int, units: list[AdminUnit]) -> None:
        self._set_list(units_key(province_id), units, AdminUnitList)

    def ping(self) -> None:
        try:
            self.client.ping()
        except redis.RedisError as e:
            raise CacheError(f"redis ping failed: {e}") from e

    def close(self) -> None:
        self.client.close()

    @property
    def backend_name(self) -> str:
        return "redis"
