# src/storage/redis_store.py — v1
"""Redis-based key-value store (STORAGE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Lets several client processes share one cart/likes state.
"""

from __future__ import annotations

import logging

from storesync.storage.base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)


class RedisStore(BaseKeyValueStore):
    """Redis-backed store with namespaced keys."""

    def __init__(self, redis_url: str, namespace: str = "storesync") -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._prefix = f"{namespace}:kv:"

    def get_item(self, key: str) -> str | None:
        return self._client.get(f"{self._prefix}{key}")

    def set_item(self, key: str, value: str) -> None:
        self._client.set(f"{self._prefix}{key}", value)

    def remove_item(self, key: str) -> None:
        self._client.delete(f"{self._prefix}{key}")

    def keys(self) -> list[str]:
        start = len(self._prefix)
        return sorted(k[start:] for k in self._client.scan_iter(match=f"{self._prefix}*"))

    def close(self) -> None:
        """Close the connection pool."""
        self._client.close()
