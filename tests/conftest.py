# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides an in-memory store, credentials, a controllable clock, a recording
sleep and helpers to build an ApiClient on top of httpx.MockTransport.
No network access — all HTTP is served by mock transports.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import httpx
import pytest

from storesync.client.api_client import ApiClient
from storesync.client.auth import CredentialStore, SignOutEvent, SignOutNotifier
from storesync.client.retry import RetryPolicy
from storesync.storage.memory_store import MemoryStore


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class RecordingListener:
    """SignOutListener collecting events."""

    def __init__(self) -> None:
        self.events: list[SignOutEvent] = []

    def on_signed_out(self, event: SignOutEvent) -> None:
        self.events.append(event)


def json_response(status: int, payload: Any = None, **headers: str) -> httpx.Response:
    """httpx.Response with a JSON body (or empty body for payload=None)."""
    content = b"" if payload is None else json.dumps(payload).encode()
    return httpx.Response(
        status,
        content=content,
        headers={"Content-Type": "application/json", **headers},
    )


Handler = Callable[[httpx.Request], httpx.Response]


# === FIXTURES: Storage and auth ===


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def credentials(memory_store: MemoryStore) -> CredentialStore:
    """Signed-out credentials."""
    return CredentialStore(memory_store, key="token")


@pytest.fixture
def signed_in(credentials: CredentialStore) -> CredentialStore:
    credentials.set_token("test-token")
    return credentials


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


# === FIXTURES: HTTP ===


@pytest.fixture
def make_client(
    credentials: CredentialStore,
    fake_sleep: RecordingSleep,
    listener: RecordingListener,
):
    """Factory: ApiClient serving requests from handler."""
    clients: list[ApiClient] = []

    def _make(handler: Handler, location: str = "/products") -> ApiClient:
        notifier = SignOutNotifier()
        notifier.subscribe(listener)
        client = ApiClient(
            "http://api.test",
            credentials,
            policy=RetryPolicy(max_retries=3, base_delay_s=1.0),
            notifier=notifier,
            location=lambda: location,
            transport=httpx.MockTransport(handler),
            sleep=fake_sleep,
        )
        clients.append(client)
        return client

    return _make


@pytest.fixture
def respond() -> Callable[..., httpx.Response]:
    """The json_response helper, for tests that build their own handlers."""
    return json_response
