# tests/unit/state/test_unit_likes_store.py — v1
"""Tests for state/likes_store.py."""

from __future__ import annotations

import asyncio
import json

import pytest

from storesync.client.errors import ApiError, UnauthenticatedError
from storesync.services.likes_service import LikesService
from storesync.state.likes_store import LikesStore
from storesync.state.models import LocalState


class LikesApi:
    """Mock /api/user/likes backend."""

    def __init__(self, respond, liked=(), fail_with: int | None = None) -> None:
        self.respond = respond
        self.liked = list(liked)
        self.fail_with = fail_with
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.fail_with is not None:
            return self.respond(self.fail_with, {"message": "failed"})
        if request.method == "GET":
            return self.respond(200, {"products": self.liked})
        return self.respond(200, {})


@pytest.fixture
def make_likes(make_client, memory_store, credentials):
    def _make(api) -> LikesStore:
        likes = LikesStore(memory_store, credentials, LikesService(make_client(api)))
        likes.load()
        return likes

    return _make


class TestGuest:
    @pytest.mark.asyncio
    async def test_like_is_local_and_persisted(self, make_likes, respond, memory_store):
        api = LikesApi(respond)
        likes = make_likes(api)

        assert await likes.toggle_like("42") is True

        assert api.requests == []
        assert likes.state_of("42") == LocalState.SYNCED
        assert json.loads(memory_store.get_item("likedProducts")) == ["42"]
        assert make_likes(api).is_liked("42")

    @pytest.mark.asyncio
    async def test_toggle_twice(self, make_likes, respond):
        likes = make_likes(LikesApi(respond))
        await likes.toggle_like(7)
        assert await likes.toggle_like("7") is False
        assert likes.liked_ids == []

    @pytest.mark.asyncio
    async def test_sync_is_skipped(self, make_likes, respond):
        api = LikesApi(respond, liked=["1"])
        likes = make_likes(api)
        assert await likes.sync() is False
        assert api.requests == []


class TestSignedIn:
    @pytest.mark.asyncio
    async def test_like_confirmed(self, make_likes, respond, signed_in):
        api = LikesApi(respond)
        likes = make_likes(api)

        await likes.like("42")

        assert [(r.method, r.url.path) for r in api.requests] == [("POST", "/api/user/likes")]
        assert likes.is_liked("42")
        assert likes.state_of("42") == LocalState.SYNCED
        assert not likes.has_pending()

    @pytest.mark.asyncio
    async def test_pending_while_in_flight(self, make_likes, respond, signed_in):
        gate = asyncio.Event()

        async def handler(request):
            await gate.wait()
            return respond(200, {})

        likes = make_likes(handler)
        task = asyncio.ensure_future(likes.like("42"))
        await asyncio.sleep(0)

        assert likes.is_liked("42")
        assert likes.state_of("42") == LocalState.PENDING_ADD

        gate.set()
        await task
        assert likes.state_of("42") == LocalState.SYNCED

    @pytest.mark.asyncio
    async def test_failed_like_reverts_and_raises(self, make_likes, respond, signed_in, memory_store):
        likes = make_likes(LikesApi(respond, fail_with=500))

        with pytest.raises(ApiError) as exc_info:
            await likes.toggle_like("42")

        assert exc_info.value.status == 500
        assert not likes.is_liked("42")
        assert likes.state_of("42") is None
        assert json.loads(memory_store.get_item("likedProducts")) == []

    @pytest.mark.asyncio
    async def test_failed_unlike_restores(self, make_likes, respond, signed_in):
        api = LikesApi(respond, liked=["1", "2", "3"])
        likes = make_likes(api)
        await likes.sync()
        api.fail_with = 503

        with pytest.raises(ApiError):
            await likes.unlike("2")

        assert likes.liked_ids == ["1", "2", "3"]
        assert likes.state_of("2") == LocalState.SYNCED

    @pytest.mark.asyncio
    async def test_rejected_token_reverts(self, make_likes, respond, signed_in, listener):
        likes = make_likes(LikesApi(respond, fail_with=401))

        with pytest.raises(UnauthenticatedError):
            await likes.like("9")

        assert not likes.is_liked("9")
        assert not signed_in.is_authenticated
        assert listener.events[0].reason == "rejected"


class TestSync:
    @pytest.mark.asyncio
    async def test_remote_overwrites_local(self, make_likes, respond, credentials, memory_store):
        api = LikesApi(respond, liked=[1, 2])
        likes = make_likes(api)
        await likes.like("99")
        credentials.set_token("test-token")

        assert await likes.sync() is True

        assert likes.liked_ids == ["1", "2"]
        assert json.loads(memory_store.get_item("likedProducts")) == ["1", "2"]

    @pytest.mark.asyncio
    async def test_failure_keeps_local(self, make_likes, respond, credentials):
        likes = make_likes(LikesApi(respond, fail_with=500))
        await likes.like("5")
        credentials.set_token("test-token")

        assert await likes.sync() is False
        assert likes.liked_ids == ["5"]

    @pytest.mark.asyncio
    async def test_invalid_payload_keeps_local(self, make_likes, respond, credentials):
        likes = make_likes(lambda r: respond(200, {"products": {"bad": True}}))
        await likes.like("5")
        credentials.set_token("test-token")

        assert await likes.sync() is False
        assert likes.liked_ids == ["5"]


class TestCorruptStorage:
    @pytest.mark.parametrize("raw", ["{not json", '{"ids": [1]}', '"42"'])
    def test_cleared_on_load(self, make_likes, respond, memory_store, raw):
        memory_store.set_item("likedProducts", raw)
        likes = make_likes(LikesApi(respond))
        assert likes.liked_ids == []
        assert likes.is_loaded
        assert memory_store.get_item("likedProducts") is None

    def test_numeric_ids_normalized(self, make_likes, respond, memory_store):
        memory_store.set_item("likedProducts", "[1, 2]")
        assert make_likes(LikesApi(respond)).liked_ids == ["1", "2"]
