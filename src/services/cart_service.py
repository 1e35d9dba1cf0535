# src/services/cart_service.py — v1
"""Remote side of the shopping cart.

Every endpoint answers with the full server-side cart.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from storesync.client.api_client import ApiClient
from storesync.services.models import CartResponse

if TYPE_CHECKING:
    from storesync.state.models import CartLine


def _line_body(line: CartLine) -> dict[str, object]:
    return {
        "id": line.item_id,
        "quantity": line.quantity,
        "selectedSize": line.size,
        "selectedColor": line.color,
    }


def _variant_params(line: CartLine) -> dict[str, str]:
    return {"size": line.size, "color": line.color}


class CartService:
    """/api/cart endpoints (authenticated)."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def get_cart(self) -> CartResponse:
        return await self._client.get(
            "/api/cart", resource="Cart", response_model=CartResponse
        )

    async def add_line(self, line: CartLine) -> CartResponse:
        return await self._client.post(
            "/api/cart", _line_body(line), resource="Cart", response_model=CartResponse
        )

    async def update_quantity(self, line: CartLine, quantity: int) -> CartResponse:
        # PATCH is not retried on rate limiting
        return await self._client.patch(
            f"/api/cart/{line.item_id}",
            {"quantity": quantity, **_variant_params(line)},
            resource="Cart item",
            response_model=CartResponse,
        )

    async def remove_line(self, line: CartLine) -> CartResponse:
        return await self._client.delete(
            f"/api/cart/{line.item_id}",
            params=_variant_params(line),
            resource="Cart item",
            response_model=CartResponse,
        )

    async def clear(self) -> CartResponse:
        return await self._client.delete(
            "/api/cart", resource="Cart", response_model=CartResponse
        )
