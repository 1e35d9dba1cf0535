# src/state/cart_store.py — v1
"""Shopping cart with optimistic line mutations and a load-time TTL.

Lines sharing (item_id, size, color) merge by summing quantities. The whole
cart is dropped on load() once more than the TTL has passed since its first
line was added.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta

from storesync.cache.expiring_cache import Clock, utc_now
from storesync.client.auth import CredentialStore
from storesync.services.cart_service import CartService
from storesync.state.models import CartLine, LocalState
from storesync.state.optimistic import OptimisticCollection
from storesync.storage.base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)


def _parse_created_at(value: object) -> datetime:
    """Parse a stored ISO-8601 timestamp; it must carry a UTC offset."""
    if not isinstance(value, str):
        raise ValueError(f"created_at must be an ISO-8601 string, got {value!r}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f"created_at has no UTC offset: {value!r}")
    return parsed


class CartStore(OptimisticCollection[CartLine]):
    """Cart lines keyed by (item_id, (size, color))."""

    collection_name = "cart"

    def __init__(
        self,
        store: BaseKeyValueStore,
        credentials: CredentialStore,
        service: CartService,
        storage_key: str = "wisestyle_cart",
        ttl: timedelta = timedelta(hours=1),
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(store, credentials, storage_key)
        self._service = service
        self._ttl = ttl
        self._clock = clock
        self._created_at: datetime | None = None

    # --- Read side ---

    @property
    def created_at(self) -> datetime | None:
        """When the first line of the current cart was added."""
        return self._created_at

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.items)

    @property
    def total_price(self) -> float:
        return sum(line.subtotal for line in self.items)

    def find_line(self, item_id: str, size: str = "", color: str = "") -> CartLine | None:
        return self._items.get((str(item_id), (size, color)))

    # --- Lifecycle ---

    def load(self) -> None:
        self._created_at = None
        super().load()
        if self._created_at is not None and self._clock() - self._created_at > self._ttl:
            logger.info(
                "Cart expired (created %s, ttl %s), clearing",
                self._created_at.isoformat(), self._ttl,
            )
            self._items = {}
            self._created_at = None
            self._store.remove_item(self._storage_key)

    def persist(self) -> None:
        if not self._items:
            self._created_at = None
        elif self._created_at is None:
            self._created_at = self._clock()
        super().persist()

    # --- Mutations ---

    async def add_line(self, line: CartLine) -> None:
        """Add line, merging into an existing line with the same key."""
        existing = self._items.get(line.key)
        merged = line
        if existing is not None:
            merged = existing.model_copy(
                update={"quantity": existing.quantity + line.quantity}
            )
        await self._mutate(line.key, merged, lambda: self._service.add_line(line))

    async def remove_line(self, item_id: str, size: str = "", color: str = "") -> None:
        """Delete the line outright, whatever its quantity."""
        line = self.find_line(item_id, size, color)
        if line is None:
            return
        await self._mutate(line.key, None, lambda: self._service.remove_line(line))

    async def update_quantity(
        self, item_id: str, size: str, color: str, quantity: int
    ) -> None:
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            await self.remove_line(item_id, size, color)
            return
        line = self.find_line(item_id, size, color)
        if line is None:
            return
        updated = line.model_copy(update={"quantity": quantity})
        await self._mutate(
            line.key, updated, lambda: self._service.update_quantity(line, quantity)
        )

    async def clear(self) -> None:
        """Empty the cart; on remote failure restore lines nobody touched since."""
        snapshot = dict(self._items)
        # In-flight line mutations now roll back to the empty cart
        baselines = [
            (mutation, mutation.before, mutation.before_position)
            for queue in self._pending.values()
            for mutation in queue
        ]
        for mutation, _, _ in baselines:
            mutation.before = None
            mutation.before_position = None
        self._items = {}
        self.persist()
        if not self._credentials.is_authenticated:
            return

        succeeded = False
        try:
            await self._service.clear()
            succeeded = True
        finally:
            if not succeeded:
                taken_over = {mutation.mutation_id for mutation, _, _ in baselines}
                taken_keys = {mutation.key for mutation, _, _ in baselines}
                for mutation, before, position in baselines:
                    if mutation in self._pending.get(mutation.key, ()):
                        mutation.before = before
                        mutation.before_position = position
                for key, line in snapshot.items():
                    if key in self._items:
                        continue
                    queue = self._pending.get(key, ())
                    if key in taken_keys:
                        # Only while its taken-over mutations are still in flight
                        restore = bool(queue) and all(
                            m.mutation_id in taken_over for m in queue
                        )
                    else:
                        restore = not queue
                    if restore:
                        self._items[key] = line
                logger.warning("Rolled back cart clear (%d line(s))", len(snapshot))
                if not self._closed:
                    self.persist()

    # --- Storage ---

    def _serialize(self, items: list[CartLine]) -> str:
        return json.dumps(
            {
                "created_at": self._created_at.isoformat() if self._created_at else None,
                "items": [
                    line.model_dump(mode="json", exclude={"local_state"})
                    for line in items
                ],
            }
        )

    def _deserialize(self, raw: str) -> list[CartLine]:
        data = json.loads(raw)
        if isinstance(data, list):
            # Plain array of lines, as written by older clients
            rows, created_at = data, None
        elif isinstance(data, dict) and isinstance(data.get("items"), list):
            rows = data["items"]
            created_at = data.get("created_at")
        else:
            raise ValueError("expected a cart object with an 'items' list")

        lines = [CartLine.model_validate(row) for row in rows]
        if created_at is not None:
            self._created_at = _parse_created_at(created_at)
        elif lines:
            self._created_at = self._clock()
        else:
            self._created_at = None
        return lines

    async def _fetch_remote(self) -> list[CartLine]:
        response = await self._service.get_cart()
        return [
            CartLine(
                item_id=remote.id,
                quantity=remote.quantity,
                size=remote.selected_size,
                color=remote.selected_color,
                name=remote.name,
                price=remote.price,
                local_state=LocalState.SYNCED,
            )
            for remote in response.items
        ]
