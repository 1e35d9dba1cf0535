# src/cache/expiring_cache.py — v1
"""Expiring key-value cache over a local durable store.

Expiry is lazy: an entry past its expires_at is removed by the read that
finds it. sweep_expired() bounds storage growth and is run once at start-up.
Corrupted entries are purged and reported as absent, never raised.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from storesync.cache.models import CacheEntry
from storesync.storage.base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def _as_timedelta(ttl: float | timedelta) -> timedelta:
    delta = ttl if isinstance(ttl, timedelta) else timedelta(seconds=ttl)
    if delta <= timedelta(0):
        raise ValueError(f"ttl must be positive, got {ttl!r}")
    return delta


class ExpiringCache:
    """Per-entry TTL cache persisted in a BaseKeyValueStore."""

    def __init__(
        self,
        store: BaseKeyValueStore,
        clock: Clock = utc_now,
        default_ttl: float | timedelta = 3600,
    ) -> None:
        self._store = store
        self._clock = clock
        self._default_ttl = _as_timedelta(default_ttl)

    def set(self, key: str, payload: Any, ttl: float | timedelta | None = None) -> None:
        """Store payload under key with expires_at = now + ttl (seconds or timedelta)."""
        delta = self._default_ttl if ttl is None else _as_timedelta(ttl)
        now = self._clock()
        entry = CacheEntry(
            key=key, payload=payload, written_at=now, expires_at=now + delta
        )
        self._store.set_item(key, entry.model_dump_json())

    def get(self, key: str) -> Any | None:
        """Return the cached payload, or None when absent, expired or corrupt."""
        raw = self._store.get_item(key)
        if raw is None:
            return None
        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Purging malformed cache entry %s: %s", key, e)
            self._store.remove_item(key)
            return None

        if entry.is_expired(self._clock()):
            logger.debug("Cache entry %s expired at %s", key, entry.expires_at)
            self._store.remove_item(key)
            return None
        return entry.payload

    def clear(self, key: str) -> None:
        """Remove key. Idempotent."""
        self._store.remove_item(key)

    def sweep_expired(self) -> int:
        """Remove every expired cache entry in the store.

        Values that are not cache entries are left alone, since the store is
        shared with other keyed state (cart, likes, token).

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        removed = 0
        for key in self._store.keys():
            raw = self._store.get_item(key)
            if raw is None:
                continue
            try:
                entry = CacheEntry.model_validate_json(raw)
            except ValidationError:
                continue
            if entry.is_expired(now):
                self._store.remove_item(key)
                removed += 1
        logger.info("Cleared %d expired cache entries", removed)
        return removed

    async def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        ttl: float | timedelta | None = None,
    ) -> Any:
        """Return the cached payload, or await fetch() and cache its result.

        Failures of fetch() propagate and leave the cache untouched.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        payload = await fetch()
        self.set(key, payload, ttl)
        return payload
