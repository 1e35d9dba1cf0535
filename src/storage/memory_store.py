# src/storage/memory_store.py — v1
"""In-process key-value store (STORAGE_BACKEND=memory).

Nothing survives the process; used for tests and one-shot CLI runs.
"""

from __future__ import annotations

from storesync.storage.base_store import BaseKeyValueStore


class MemoryStore(BaseKeyValueStore):
    """Dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
