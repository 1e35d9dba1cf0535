# tests/unit/storage/test_unit_stores.py — v1
"""Contract tests shared by the memory, JSON-file and SQLite stores."""

from __future__ import annotations

import pytest

from storesync.storage.json_store import JsonFileStore
from storesync.storage.memory_store import MemoryStore
from storesync.storage.sqlite_store import SqliteStore


@pytest.fixture(params=["memory", "json", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        s = MemoryStore()
    elif request.param == "json":
        s = JsonFileStore(root=tmp_path / "kv")
    else:
        s = SqliteStore(db_path=tmp_path / "kv.db")
    yield s
    s.close()


class TestKeyValueContract:
    def test_get_missing(self, store):
        assert store.get_item("nope") is None

    def test_set_and_get(self, store):
        store.set_item("token", "abc")
        assert store.get_item("token") == "abc"

    def test_overwrite(self, store):
        store.set_item("k", "1")
        store.set_item("k", "2")
        assert store.get_item("k") == "2"

    def test_remove_is_idempotent(self, store):
        store.set_item("k", "1")
        store.remove_item("k")
        store.remove_item("k")
        assert store.get_item("k") is None

    def test_keys(self, store):
        store.set_item("categories:tree", "[]")
        store.set_item("likedProducts", "[]")
        assert sorted(store.keys()) == ["categories:tree", "likedProducts"]


class TestJsonFileStore:
    def test_survives_reopen(self, tmp_path):
        JsonFileStore(root=tmp_path).set_item("wisestyle_cart", '{"items": []}')
        assert JsonFileStore(root=tmp_path).get_item("wisestyle_cart") == '{"items": []}'

    def test_unsafe_key_stays_inside_root(self, tmp_path):
        store = JsonFileStore(root=tmp_path / "kv")
        store.set_item("../escape/key", "v")
        assert store.get_item("../escape/key") == "v"
        assert not (tmp_path / "escape").exists()
        assert store.keys() == ["../escape/key"]

    def test_no_temp_files_left(self, tmp_path):
        store = JsonFileStore(root=tmp_path)
        store.set_item("k", "v")
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]


class TestSqliteStore:
    def test_survives_reopen(self, tmp_path):
        db = tmp_path / "kv.db"
        first = SqliteStore(db_path=db)
        first.set_item("token", "t")
        first.close()
        second = SqliteStore(db_path=db)
        assert second.get_item("token") == "t"
        second.close()
