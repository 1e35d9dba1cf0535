# src/state/models.py — v1
"""Tracked items of optimistic collections: liked products and cart lines."""

from __future__ import annotations

from enum import Enum
from typing import Hashable

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LocalState(str, Enum):
    """Reconciliation tag of a visible item."""

    SYNCED = "synced"
    PENDING_ADD = "pending_add"
    PENDING_REMOVE = "pending_remove"


class TrackedItem(BaseModel):
    """An entity of a remote collection mirrored locally."""

    model_config = ConfigDict(frozen=True)

    item_id: str
    local_state: LocalState = LocalState.SYNCED

    @field_validator("item_id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> object:  # noqa: N805
        return str(v) if isinstance(v, int) else v

    @property
    def key(self) -> Hashable:
        """Uniqueness key within the collection."""
        return self.item_id

    def tagged(self, state: LocalState) -> TrackedItem:
        """Copy of this item with another reconciliation tag."""
        if state == self.local_state:
            return self
        return self.model_copy(update={"local_state": state})


class CartLine(TrackedItem):
    """Cart row; (item_id, size, color) identifies it."""

    quantity: int = Field(default=1, ge=1)
    size: str = ""
    color: str = ""
    name: str = ""
    price: float = 0.0

    @property
    def variant_key(self) -> tuple[str, str]:
        return (self.size, self.color)

    @property
    def key(self) -> Hashable:
        return (self.item_id, self.variant_key)

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity
