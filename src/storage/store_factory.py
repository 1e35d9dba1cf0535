# src/storage/store_factory.py — v1
"""Factory for local key-value store instantiation."""

from __future__ import annotations

from storesync.config.settings import Settings
from storesync.storage.base_store import BaseKeyValueStore


def create_store(settings: Settings | None = None) -> BaseKeyValueStore:
    """Instantiate the configured storage backend.

    Args:
        settings: Application settings. Defaults to an in-memory store.

    Returns:
        Configured BaseKeyValueStore implementation.
    """
    if settings is None:
        from storesync.storage.memory_store import MemoryStore
        return MemoryStore()

    backend = settings.storage_backend

    if backend == "memory":
        from storesync.storage.memory_store import MemoryStore
        return MemoryStore()

    if backend == "json":
        from storesync.storage.json_store import JsonFileStore
        return JsonFileStore(root=settings.storage_root)

    if backend == "sqlite":
        from storesync.storage.sqlite_store import SqliteStore
        db_path = settings.storage_root.expanduser() / "storesync.db"
        return SqliteStore(db_path=db_path)

    if backend == "redis":
        from storesync.storage.redis_store import RedisStore
        if not settings.storage_redis_url:
            raise ValueError(
                "STORAGE_REDIS_URL must be set when STORAGE_BACKEND=redis"
            )
        return RedisStore(
            redis_url=settings.storage_redis_url,
            namespace=settings.storage_namespace,
        )

    raise ValueError(f"Unsupported storage backend: {backend!r}")
