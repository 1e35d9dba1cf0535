# src/services/category_service.py — v1
"""Catalog categories (public endpoints), cached in the expiring cache."""

from __future__ import annotations

import logging
from datetime import timedelta

from storesync.cache.expiring_cache import ExpiringCache
from storesync.client.api_client import ApiClient
from storesync.services.models import Category

logger = logging.getLogger(__name__)

TREE_CACHE_KEY = "categories:tree"


class CategoryService:
    """Read-only access to the category catalog."""

    def __init__(
        self,
        client: ApiClient,
        cache: ExpiringCache | None = None,
        ttl: float | timedelta | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._ttl = ttl

    async def get_category_tree(self) -> list[Category]:
        """Category tree, served from cache while fresh."""
        if self._cache is not None:
            cached = self._cache.get(TREE_CACHE_KEY)
            if cached is not None:
                logger.debug("Category tree served from cache")
                return [Category.model_validate(c) for c in cached]
        return await self.refresh_category_tree()

    async def refresh_category_tree(self) -> list[Category]:
        """Fetch the tree from the API and overwrite the cached copy."""
        tree = await self._client.get(
            "/api/categories/tree",
            require_auth=False,
            resource="Category tree",
            response_model=list[Category],
        )
        if self._cache is not None:
            self._cache.set(
                TREE_CACHE_KEY,
                [c.model_dump(mode="json", by_alias=True) for c in tree],
                self._ttl,
            )
        return tree

    async def get_category_by_slug(self, slug: str) -> Category:
        return await self._client.get(
            f"/api/categories/slug/{slug}",
            require_auth=False,
            resource="Category",
            response_model=Category,
        )
