# src/storage/json_store.py — v1
"""File-based key-value store (default STORAGE_BACKEND=json).

Each key lives in its own file under STORAGE_ROOT. File names are the
percent-encoded key, so keys() can recover the original key.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote, unquote

from storesync.storage.base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)

_SUFFIX = ".json"


class JsonFileStore(BaseKeyValueStore):
    """File-per-key store rooted at a directory."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    def get_item(self, key: str) -> str | None:
        path = self._entry_path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to read storage key %s: %s", key, e)
            return None

    def set_item(self, key: str, value: str) -> None:
        path = self._entry_path(key)
        # Write-then-rename so a crash never leaves a half-written value
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove_item(self, key: str) -> None:
        self._entry_path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return sorted(
            unquote(path.name[: -len(_SUFFIX)])
            for path in self._root.glob(f"*{_SUFFIX}")
        )

    def _entry_path(self, key: str) -> Path:
        """Return file path for a storage key."""
        return self._root / f"{quote(key, safe='')}{_SUFFIX}"
