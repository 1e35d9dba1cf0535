# src/api/facade.py — v1
"""Public API facade — composition root of the storefront client.

Usage:
    from storesync.api.facade import create_storefront
    storefront = create_storefront(listeners=[router])
    await storefront.start()
    await storefront.likes.toggle_like("42")
    await storefront.aclose()

Every collaborator is constructed here and passed explicitly; there are no
module-level singletons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable

import httpx

from storesync.cache.expiring_cache import Clock, ExpiringCache, utc_now
from storesync.client.api_client import ApiClient, LocationProvider, root_location
from storesync.client.auth import CredentialStore, SignOutListener, SignOutNotifier
from storesync.client.retry import RetryPolicy, Sleep
from storesync.config.settings import Settings
from storesync.services.cart_service import CartService
from storesync.services.category_service import CategoryService
from storesync.services.likes_service import LikesService
from storesync.services.product_service import ProductService
from storesync.state.cart_store import CartStore
from storesync.state.likes_store import LikesStore
from storesync.storage.base_store import BaseKeyValueStore
from storesync.storage.store_factory import create_store

logger = logging.getLogger(__name__)


@dataclass
class Storefront:
    """Wired client-side state of one storefront session."""

    settings: Settings
    store: BaseKeyValueStore
    cache: ExpiringCache
    credentials: CredentialStore
    client: ApiClient
    categories: CategoryService
    products: ProductService
    likes: LikesStore
    cart: CartStore

    async def start(self) -> None:
        """Reconcile both collections with the remote authority, if signed in."""
        await self.likes.sync()
        await self.cart.sync()

    async def aclose(self) -> None:
        """Close the HTTP client and detach collections from storage."""
        self.likes.close()
        self.cart.close()
        await self.client.aclose()
        self.store.close()

    async def __aenter__(self) -> Storefront:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def create_storefront(
    settings: Settings | None = None,
    *,
    store: BaseKeyValueStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    location: LocationProvider = root_location,
    listeners: Iterable[SignOutListener] = (),
    clock: Clock = utc_now,
    sleep: Sleep | None = None,
) -> Storefront:
    """Build a Storefront from settings.

    Loads both collections from local storage (no network) and, when
    CACHE_SWEEP_ON_START is set, drops expired cache entries.

    Args:
        settings: Application settings. Loaded from .env if None.
        store: Local storage. Built from settings if None.
        transport: httpx transport override (tests use httpx.MockTransport).
        location: Current path provider, used as the sign-in return path.
        listeners: Sign-out observers registered on the client.
        clock: Time source for cache and cart expiry.
        sleep: Backoff sleep override.
    """
    settings = settings or Settings()
    if store is None:
        store = create_store(settings)

    cache = ExpiringCache(store, clock=clock, default_ttl=settings.cache_default_ttl_s)
    if settings.cache_sweep_on_start:
        cache.sweep_expired()

    credentials = CredentialStore(store, key=settings.token_storage_key)
    notifier = SignOutNotifier()
    for listener in listeners:
        notifier.subscribe(listener)

    client_kwargs = {} if sleep is None else {"sleep": sleep}
    client = ApiClient(
        settings.api_root,
        credentials,
        policy=RetryPolicy(
            max_retries=settings.api_max_rate_limit_retries,
            base_delay_s=settings.api_backoff_base_s,
            default_retry_after_s=settings.api_default_retry_after_s,
        ),
        notifier=notifier,
        location=location,
        timeout=settings.api_timeout_s,
        transport=transport,
        **client_kwargs,
    )

    likes = LikesStore(
        store, credentials, LikesService(client), storage_key=settings.likes_storage_key
    )
    cart = CartStore(
        store,
        credentials,
        CartService(client),
        storage_key=settings.cart_storage_key,
        ttl=timedelta(seconds=settings.cart_ttl_s),
        clock=clock,
    )
    likes.load()
    cart.load()

    logger.debug(
        "Storefront ready (backend=%s, authenticated=%s)",
        settings.storage_backend, credentials.is_authenticated,
    )
    return Storefront(
        settings=settings,
        store=store,
        cache=cache,
        credentials=credentials,
        client=client,
        categories=CategoryService(client, cache),
        products=ProductService(
            client, cache, homepage_ttl=timedelta(seconds=settings.cache_homepage_ttl_s)
        ),
        likes=likes,
        cart=cart,
    )
