# src/services/models.py — v1
"""Wire schemas for storefront API responses.

The backend speaks camelCase JSON; models accept both the aliases and the
Python field names. Unknown fields are ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for camelCase API payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(WireModel):
    """Catalog category, possibly with nested children (category tree)."""

    id: str
    name: str
    slug: str
    description: str | None = None
    type: Literal["MAIN", "LIFESTYLE"] = "MAIN"
    image: str | None = None
    is_active: bool = True
    parent_id: str | None = None
    children: list[Category] = Field(default_factory=list)

    @field_validator("id", "parent_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:  # noqa: N805
        return str(v) if isinstance(v, int) else v


class LikesResponse(WireModel):
    """GET /api/user/likes payload."""

    products: list[str] = Field(default_factory=list)

    @field_validator("products", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:  # noqa: N805
        """Product ids arrive as numbers or strings."""
        if isinstance(v, list):
            return [str(item) if isinstance(item, int) else item for item in v]
        return v


def _variant_label(value: Any) -> Any:
    """Sizes and colors arrive either as plain labels or as {id, name, value} objects."""
    if isinstance(value, dict):
        return value.get("value") or value.get("name") or value.get("id")
    return value


class RemoteCartLine(WireModel):
    """One line of the server-side cart."""

    id: str
    quantity: int = Field(ge=1)
    selected_size: str = ""
    selected_color: str = ""
    name: str = ""
    price: float = 0.0

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:  # noqa: N805
        return str(v) if isinstance(v, int) else v

    @field_validator("selected_size", "selected_color", mode="before")
    @classmethod
    def flatten_variant(cls, v: Any) -> Any:  # noqa: N805
        return "" if v is None else _variant_label(v)


class CartResponse(WireModel):
    """Cart endpoints all answer with the full cart."""

    items: list[RemoteCartLine] = Field(default_factory=list)


class ProductSize(WireModel):
    id: str = ""
    name: str = ""
    value: str = ""
    category: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:  # noqa: N805
        return str(v) if isinstance(v, int) else v


class ProductColor(WireModel):
    id: str = ""
    name: str = ""
    value: str = ""
    # "class" is reserved in Python
    css_class: str = Field(default="", alias="class")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:  # noqa: N805
        return str(v) if isinstance(v, int) else v


class InventoryItem(WireModel):
    """Stock level of one size/color combination."""

    size_id: str
    color_id: str
    quantity: int = Field(default=0, ge=0)

    @field_validator("size_id", "color_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:  # noqa: N805
        return str(v) if isinstance(v, int) else v


class Product(WireModel):
    """Catalog product as served by the public /api/products endpoints."""

    id: str
    name: str
    slug: str
    price: float = Field(ge=0)
    original_price: float | None = None
    sale_price: float | None = None
    discount: float | None = None
    description: str = ""
    category_id: str | None = None
    category: Category | None = None
    image: str | None = None
    images: list[str] = Field(default_factory=list)
    is_limited: bool = False
    sizes: list[ProductSize] = Field(default_factory=list)
    colors: list[ProductColor] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    inventory: list[InventoryItem] = Field(default_factory=list)
    display_section: Literal["NEW_ARRIVALS", "WORK_WEEKEND", "EFFORTLESS", "NONE"] = "NONE"
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("id", "category_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:  # noqa: N805
        return str(v) if isinstance(v, int) else v

    @field_validator("images", mode="before")
    @classmethod
    def flatten_images(cls, v: Any) -> Any:  # noqa: N805
        """Images arrive as URLs or as {id, url} objects."""
        if isinstance(v, list):
            return [item.get("url") if isinstance(item, dict) else item for item in v]
        return v

    @property
    def effective_price(self) -> float:
        """Price the customer pays: the sale price when one is set."""
        return self.sale_price if self.sale_price is not None else self.price

    def in_stock(self, size_id: str | None = None, color_id: str | None = None) -> bool:
        """Whether any matching inventory row has stock left."""
        return any(
            row.quantity > 0
            and (size_id is None or row.size_id == size_id)
            and (color_id is None or row.color_id == color_id)
            for row in self.inventory
        )
