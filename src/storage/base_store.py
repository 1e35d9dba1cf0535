# src/storage/base_store.py — v1
"""Abstract local durable key-value store.

String keys, string values, synchronous access: reads and writes never
suspend the event loop. Concurrent logical writers follow last-writer-wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseKeyValueStore(ABC):
    """Unified interface for local storage backends."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, overwriting any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""

    @abstractmethod
    def keys(self) -> list[str]:
        """List all keys currently held by the store."""

    def close(self) -> None:
        """Release backend resources. Default: nothing to release."""
