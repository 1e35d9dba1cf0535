# src/services/product_service.py — v1
"""Product catalog (public endpoints).

Listings go straight to the API and share in-flight GETs through the
client. Homepage sections are kept in the expiring cache for a few minutes.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from storesync.cache.expiring_cache import ExpiringCache
from storesync.client.api_client import ApiClient
from storesync.services.models import Product

logger = logging.getLogger(__name__)

HOMEPAGE_CACHE_KEY = "products:homepage-sections"
HOMEPAGE_TTL_S = 300

HomepageSections = dict[str, list[Product]]


class ProductService:
    """Read-only access to the product catalog."""

    def __init__(
        self,
        client: ApiClient,
        cache: ExpiringCache | None = None,
        homepage_ttl: float | timedelta = HOMEPAGE_TTL_S,
    ) -> None:
        self._client = client
        self._cache = cache
        self._homepage_ttl = homepage_ttl

    async def get_products(self, page: int = 1, limit: int = 10) -> list[Product]:
        """One page of the catalog."""
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be >= 1")
        return await self._list("/api/products", "Products", {"page": page, "limit": limit})

    async def get_product_by_slug(self, slug: str) -> Product:
        return await self._client.get(
            f"/api/products/slug/{slug}",
            require_auth=False,
            resource="Product",
            response_model=Product,
        )

    async def get_products_by_category(self, category: str) -> list[Product]:
        return await self._list(f"/api/products/category/{category}", "Category products")

    async def get_featured_products(self) -> list[Product]:
        return await self._list("/api/products/featured", "Featured products")

    async def get_new_arrivals(self) -> list[Product]:
        return await self._list("/api/products/new-arrivals", "New arrivals")

    async def get_limited_edition_products(self) -> list[Product]:
        return await self._list("/api/products/limited-edition", "Limited edition products")

    async def get_homepage_sections(self) -> HomepageSections:
        """Products grouped by homepage section, served from cache while fresh."""
        if self._cache is not None:
            cached = self._cache.get(HOMEPAGE_CACHE_KEY)
            if cached is not None:
                logger.debug("Homepage sections served from cache")
                return {
                    name: [Product.model_validate(p) for p in products]
                    for name, products in cached.items()
                }
        return await self.refresh_homepage_sections()

    async def refresh_homepage_sections(self) -> HomepageSections:
        """Fetch homepage sections from the API and overwrite the cached copy."""
        sections = await self._client.get(
            "/api/products/homepage-sections",
            require_auth=False,
            resource="Homepage sections",
            response_model=HomepageSections,
        )
        if self._cache is not None:
            self._cache.set(
                HOMEPAGE_CACHE_KEY,
                {
                    name: [p.model_dump(mode="json", by_alias=True) for p in products]
                    for name, products in sections.items()
                },
                self._homepage_ttl,
            )
        return sections

    async def _list(
        self, path: str, resource: str, params: dict[str, int] | None = None
    ) -> list[Product]:
        return await self._client.get(
            path,
            params=params,
            require_auth=False,
            resource=resource,
            response_model=list[Product],
        )
