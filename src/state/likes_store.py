# src/state/likes_store.py — v1
"""Liked products (wishlist) with optimistic toggling."""

from __future__ import annotations

import json
import logging

from storesync.client.auth import CredentialStore
from storesync.services.likes_service import LikesService
from storesync.state.models import TrackedItem
from storesync.state.optimistic import OptimisticCollection
from storesync.storage.base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)


class LikesStore(OptimisticCollection[TrackedItem]):
    """Set of liked product ids, persisted as a JSON array."""

    collection_name = "likes"

    def __init__(
        self,
        store: BaseKeyValueStore,
        credentials: CredentialStore,
        service: LikesService,
        storage_key: str = "likedProducts",
    ) -> None:
        super().__init__(store, credentials, storage_key)
        self._service = service

    @property
    def liked_ids(self) -> list[str]:
        return [item.item_id for item in self.items]

    def is_liked(self, product_id: str | int) -> bool:
        return str(product_id) in self._items

    async def like(self, product_id: str | int) -> None:
        product_id = str(product_id)
        if self.is_liked(product_id):
            return
        await self._mutate(
            product_id,
            TrackedItem(item_id=product_id),
            lambda: self._service.add_like(product_id),
        )

    async def unlike(self, product_id: str | int) -> None:
        product_id = str(product_id)
        if not self.is_liked(product_id):
            return
        await self._mutate(
            product_id, None, lambda: self._service.remove_like(product_id)
        )

    async def toggle_like(self, product_id: str | int) -> bool:
        """Flip the like state as currently visible.

        Returns:
            True if the product is now liked.

        Raises:
            ApiError: The remote call failed; the toggle was rolled back.
        """
        if self.is_liked(product_id):
            await self.unlike(product_id)
            return False
        await self.like(product_id)
        return True

    def _serialize(self, items: list[TrackedItem]) -> str:
        return json.dumps([item.item_id for item in items])

    def _deserialize(self, raw: str) -> list[TrackedItem]:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"expected a list of ids, got {type(data).__name__}")
        return [TrackedItem(item_id=product_id) for product_id in data]

    async def _fetch_remote(self) -> list[TrackedItem]:
        response = await self._service.list_likes()
        return [TrackedItem(item_id=product_id) for product_id in response.products]
