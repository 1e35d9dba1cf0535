# src/services/likes_service.py — v1
"""Remote side of the user's liked products."""

from __future__ import annotations

from typing import Any

from storesync.client.api_client import ApiClient
from storesync.services.models import LikesResponse


class LikesService:
    """/api/user/likes endpoints (authenticated)."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_likes(self) -> LikesResponse:
        return await self._client.get(
            "/api/user/likes", resource="User likes", response_model=LikesResponse
        )

    async def add_like(self, product_id: str) -> Any:
        return await self._client.post(
            "/api/user/likes", {"productId": product_id}, resource="User like"
        )

    async def remove_like(self, product_id: str) -> Any:
        return await self._client.delete(
            f"/api/user/likes/{product_id}", resource="User like"
        )
