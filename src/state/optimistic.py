# src/state/optimistic.py — v1
"""Optimistic local mirror of a remote collection.

Lifecycle:
  load()  — synchronous, from local storage only; never touches the network.
  sync()  — when a credential is held, overwrite the visible collection with
            the remote one. Failure keeps the local data.

Mutations are applied to the visible collection immediately and in issue
order, then persisted. With a credential, the remote call runs afterwards,
serialized per item key. A failed remote call rolls back that mutation only
and re-raises:
  - if it is the newest pending mutation on its key, the item it replaced is
    restored;
  - otherwise its "before" state is handed to the next pending mutation on
    the key, so a later successful mutation is never reverted.
Without a credential (guest use) mutations are local only.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Hashable, TypeVar

from pydantic import ValidationError as PydanticValidationError

from storesync.client.auth import CredentialStore
from storesync.client.errors import ApiError, ValidationError
from storesync.logging.context import set_collection_context
from storesync.state.models import LocalState, TrackedItem
from storesync.storage.base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=TrackedItem)

RemoteCall = Callable[[], Awaitable[Any]]


@dataclass
class PendingMutation(Generic[T]):
    """A mutation applied locally and awaiting remote confirmation."""

    mutation_id: int
    key: Hashable
    kind: LocalState
    before: T | None
    before_position: int | None


class OptimisticCollection(ABC, Generic[T]):
    """Base class of LikesStore and CartStore."""

    collection_name = "collection"

    def __init__(
        self,
        store: BaseKeyValueStore,
        credentials: CredentialStore,
        storage_key: str,
    ) -> None:
        self._store = store
        self._credentials = credentials
        self._storage_key = storage_key
        self._items: dict[Hashable, T] = {}
        self._pending: dict[Hashable, list[PendingMutation[T]]] = {}
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._ids = itertools.count(1)
        self._loaded = False
        self._closed = False

    # --- Subclass hooks ---

    @abstractmethod
    def _serialize(self, items: list[T]) -> str:
        """Encode the visible collection for local storage."""

    @abstractmethod
    def _deserialize(self, raw: str) -> list[T]:
        """Decode local storage; raise ValueError on malformed data."""

    @abstractmethod
    async def _fetch_remote(self) -> list[T]:
        """Authoritative collection from the remote authority."""

    # --- Read side ---

    @property
    def items(self) -> list[T]:
        """The visible collection, in insertion order."""
        return list(self._items.values())

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._items)

    def state_of(self, key: Hashable) -> LocalState | None:
        """Reconciliation tag for key; None when neither visible nor pending."""
        queue = self._pending.get(key)
        if queue:
            return queue[-1].kind
        item = self._items.get(key)
        return None if item is None else item.local_state

    def has_pending(self) -> bool:
        return bool(self._pending)

    # --- Lifecycle ---

    def load(self) -> None:
        """Populate the visible collection from local storage."""
        raw = self._store.get_item(self._storage_key)
        items: list[T] = []
        if raw:
            try:
                items = self._deserialize(raw)
            except (ValueError, PydanticValidationError) as e:
                logger.warning(
                    "Discarding corrupted %s data: %s", self.collection_name, e
                )
                self._store.remove_item(self._storage_key)
                items = []
        self._items = {item.key: item for item in items}
        self._loaded = True
        logger.debug("Loaded %d %s item(s)", len(self._items), self.collection_name)

    async def sync(self) -> bool:
        """Replace the visible collection with the remote one.

        Keys with pending mutations keep their local state.

        Returns:
            True if the remote collection was applied.
        """
        if not self._loaded:
            self.load()
        if not self._credentials.is_authenticated:
            return False
        set_collection_context(self.collection_name)
        try:
            remote = await self._fetch_remote()
        except (ApiError, ValidationError) as e:
            logger.warning(
                "Keeping local %s, remote fetch failed: %s", self.collection_name, e
            )
            return False

        merged: dict[Hashable, T] = {}
        for item in remote:
            if item.key not in self._pending:
                merged[item.key] = item.tagged(LocalState.SYNCED)
        for key in self._pending:
            if key in self._items:
                merged[key] = self._items[key]
        self._items = merged
        self.persist()
        logger.info("Synced %d %s item(s)", len(merged), self.collection_name)
        return True

    def persist(self) -> None:
        """Write the visible collection to local storage."""
        try:
            self._store.set_item(self._storage_key, self._serialize(self.items))
        except OSError as e:
            logger.error("Failed to save %s: %s", self.collection_name, e)

    def close(self) -> None:
        """Detach from storage; later completions only update memory."""
        self._closed = True

    # --- Mutation protocol ---

    async def _mutate(self, key: Hashable, after: T | None, remote: RemoteCall) -> None:
        """Apply after (None = remove) to key optimistically, then confirm remotely."""
        set_collection_context(self.collection_name)
        kind = LocalState.PENDING_REMOVE if after is None else LocalState.PENDING_ADD

        if not self._credentials.is_authenticated:
            self._apply(key, None if after is None else after.tagged(LocalState.SYNCED))
            self._rebase(key)
            self.persist()
            return

        mutation: PendingMutation[T] = PendingMutation(
            mutation_id=next(self._ids),
            key=key,
            kind=kind,
            before=self._items.get(key),
            before_position=self._position(key),
        )
        self._pending.setdefault(key, []).append(mutation)
        self._apply(key, None if after is None else after.tagged(kind))
        self.persist()

        lock = self._locks.setdefault(key, asyncio.Lock())
        succeeded = False
        try:
            async with lock:
                await remote()
            succeeded = True
        finally:
            self._settle(mutation, succeeded)

    def _settle(self, mutation: PendingMutation[T], succeeded: bool) -> None:
        key = mutation.key
        queue = self._pending.get(key, [])
        index = queue.index(mutation)
        queue.pop(index)

        if not succeeded:
            if index < len(queue):
                # A later mutation now owns the key; it inherits our baseline
                queue[index].before = mutation.before
                queue[index].before_position = mutation.before_position
            else:
                self._apply(key, mutation.before, mutation.before_position)
            logger.warning(
                "Rolled back %s mutation #%d on %r",
                self.collection_name, mutation.mutation_id, key,
            )

        if not queue:
            self._pending.pop(key, None)
            lock = self._locks.get(key)
            if lock is not None and not lock.locked():
                del self._locks[key]
        self._retag(key)

        if self._closed:
            logger.debug(
                "%s closed, skipping persist of mutation #%d",
                self.collection_name, mutation.mutation_id,
            )
            return
        self.persist()

    def _rebase(self, key: Hashable) -> None:
        """Make the current state of key the rollback baseline of its pending mutations."""
        item = self._items.get(key)
        position = self._position(key)
        for mutation in self._pending.get(key, ()):
            mutation.before = item
            mutation.before_position = position

    def _retag(self, key: Hashable) -> None:
        item = self._items.get(key)
        if item is None:
            return
        queue = self._pending.get(key)
        state = queue[-1].kind if queue else LocalState.SYNCED
        self._items[key] = item.tagged(state)

    def _apply(self, key: Hashable, item: T | None, position: int | None = None) -> None:
        """Set key to item in place, remove it (None), or insert at position."""
        if item is None:
            self._items.pop(key, None)
            return
        if key in self._items or position is None or position >= len(self._items):
            self._items[key] = item
            return
        entries = list(self._items.items())
        entries.insert(position, (key, item))
        self._items = dict(entries)

    def _position(self, key: Hashable) -> int | None:
        for index, existing in enumerate(self._items):
            if existing == key:
                return index
        return None
