# tests/unit/storage/test_unit_redis_store.py — v1
"""Tests for storage/redis_store.py — mocked Redis client."""

from __future__ import annotations

import fnmatch
import sys
from unittest.mock import MagicMock, patch

import pytest


def _fake_redis() -> MagicMock:
    data: dict[str, str] = {}
    client = MagicMock()
    client.get.side_effect = data.get
    client.set.side_effect = lambda k, v: data.__setitem__(k, v)
    client.delete.side_effect = lambda k: data.pop(k, None)
    client.scan_iter.side_effect = lambda match: [
        k for k in list(data) if fnmatch.fnmatch(k, match)
    ]
    client._data = data
    return client


class TestRedisStore:
    def test_import_error_without_redis(self):
        """Clear ImportError when redis is not available."""
        redis_mod = sys.modules.get("redis")
        sys.modules["redis"] = None  # type: ignore[assignment]
        try:
            from storesync.storage.redis_store import RedisStore
            with pytest.raises(ImportError, match="redis"):
                RedisStore(redis_url="redis://localhost")
        finally:
            if redis_mod is not None:
                sys.modules["redis"] = redis_mod
            else:
                sys.modules.pop("redis", None)

    def test_namespaced_round_trip(self):
        pytest.importorskip("redis")
        fake = _fake_redis()
        with patch("redis.Redis.from_url", return_value=fake):
            from storesync.storage.redis_store import RedisStore
            store = RedisStore(redis_url="redis://localhost", namespace="shop")

        store.set_item("token", "abc")
        assert fake._data == {"shop:kv:token": "abc"}
        assert store.get_item("token") == "abc"
        assert store.keys() == ["token"]
        store.remove_item("token")
        assert store.get_item("token") is None
