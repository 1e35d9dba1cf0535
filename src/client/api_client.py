# src/client/api_client.py — v1
"""Resilient client for the storefront REST API.

Responsibilities:
  - bearer authentication from the CredentialStore, with a no-network
    failure (and sign-out notification) when a required token is missing
  - classification of failures into the errors.py taxonomy
  - rate-limit retries per RetryPolicy (GET/POST/PUT/DELETE only)
  - de-duplication of concurrent identical GET requests
  - schema validation of response bodies (response_model)

Usage:
    async with ApiClient("http://localhost:3001", credentials) as client:
        tree = await client.get("/api/categories/tree", require_auth=False)
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Callable, Mapping

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from storesync.client.auth import (
    CredentialStore,
    SignOutEvent,
    SignOutListener,
    SignOutNotifier,
)
from storesync.client.errors import (
    ApiError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    UnauthenticatedError,
    ValidationError,
)
from storesync.client.fingerprint import request_fingerprint
from storesync.client.retry import RetryPolicy, Sleep
from storesync.logging.context import set_request_context

logger = logging.getLogger(__name__)

LocationProvider = Callable[[], str]


def root_location() -> str:
    return "/"


class ApiClient:
    """HTTP/JSON client with auth, retry, de-duplication and validation."""

    def __init__(
        self,
        base_url: str,
        credentials: CredentialStore,
        *,
        policy: RetryPolicy | None = None,
        notifier: SignOutNotifier | None = None,
        location: LocationProvider = root_location,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._credentials = credentials
        self._policy = policy or RetryPolicy()
        self._notifier = notifier or SignOutNotifier()
        self._location = location
        self._timeout = timeout
        self._transport = transport
        self._sleep = sleep
        self._pending: dict[str, asyncio.Future[Any]] = {}
        self._adapters: dict[Any, TypeAdapter[Any]] = {}
        self.__client: httpx.AsyncClient | None = None  # Lazy initialization

    @property
    def _client(self) -> httpx.AsyncClient:
        """Lazy-init the httpx client (only on first request)."""
        if self.__client is None or self.__client.is_closed:
            self.__client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
        return self.__client

    @property
    def credentials(self) -> CredentialStore:
        return self._credentials

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def in_flight(self) -> int:
        """Number of de-duplicated GET requests currently pending."""
        return len(self._pending)

    # --- Sign-out observers ---

    def subscribe(self, listener: SignOutListener) -> None:
        """Register a listener for sign-out notifications."""
        self._notifier.subscribe(listener)

    def unsubscribe(self, listener: SignOutListener) -> None:
        self._notifier.unsubscribe(listener)

    # --- Verbs ---

    async def get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        require_auth: bool = True,
        resource: str = "Resource",
        response_model: Any = None,
    ) -> Any:
        """GET path. Concurrent identical requests share one network call."""
        self._require_credential(require_auth)

        key = request_fingerprint("GET", path, params, authenticated=require_auth)
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(
                self._send_with_retry("GET", path, None, params, require_auth, resource)
            )
            self._pending[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        else:
            logger.debug("Joining in-flight request %s", key)

        # shield: one caller being cancelled must not cancel the shared call
        data = await asyncio.shield(task)
        return self._validate(data, response_model, resource)

    async def post(
        self,
        path: str,
        body: Any = None,
        *,
        require_auth: bool = True,
        resource: str = "Resource",
        response_model: Any = None,
    ) -> Any:
        return await self._request(
            "POST", path, body, None, require_auth, resource, response_model
        )

    async def put(
        self,
        path: str,
        body: Any = None,
        *,
        require_auth: bool = True,
        resource: str = "Resource",
        response_model: Any = None,
    ) -> Any:
        return await self._request(
            "PUT", path, body, None, require_auth, resource, response_model
        )

    async def patch(
        self,
        path: str,
        body: Any = None,
        *,
        require_auth: bool = True,
        resource: str = "Resource",
        response_model: Any = None,
    ) -> Any:
        return await self._request(
            "PATCH", path, body, None, require_auth, resource, response_model
        )

    async def delete(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        require_auth: bool = True,
        resource: str = "Resource",
        response_model: Any = None,
    ) -> Any:
        return await self._request(
            "DELETE", path, body, params, require_auth, resource, response_model
        )

    # --- Lifecycle ---

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        if self.__client is not None and not self.__client.is_closed:
            await self.__client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- Internals ---

    async def _request(
        self,
        method: str,
        path: str,
        body: Any,
        params: Mapping[str, Any] | None,
        require_auth: bool,
        resource: str,
        response_model: Any,
    ) -> Any:
        self._require_credential(require_auth)
        data = await self._send_with_retry(
            method, path, body, params, require_auth, resource
        )
        return self._validate(data, response_model, resource)

    async def _send_with_retry(
        self,
        method: str,
        path: str,
        body: Any,
        params: Mapping[str, Any] | None,
        require_auth: bool,
        resource: str,
    ) -> Any:
        """Send once, then retry rate-limited calls per the policy."""
        set_request_context(uuid.uuid4().hex[:12], resource)
        attempt = 0
        while True:
            try:
                return await self._send_once(
                    method, path, body, params, require_auth, resource
                )
            except RateLimitError as e:
                if not self._policy.should_retry(method, attempt):
                    logger.warning(
                        "%s %s still rate limited after %d retries",
                        method, path, attempt,
                    )
                    raise
                delay = self._policy.delay_for(attempt, e.retry_after)
                attempt += 1
                logger.warning(
                    "Rate limited on %s %s (retry %d/%d), retrying in %.1fs",
                    method, path, attempt, self._policy.max_retries, delay,
                )
                await self._sleep(delay)

    async def _send_once(
        self,
        method: str,
        path: str,
        body: Any,
        params: Mapping[str, Any] | None,
        require_auth: bool,
        resource: str,
    ) -> Any:
        # A concurrent 401 may have dropped the token since the first attempt
        headers = self._require_credential(require_auth)
        try:
            response = await self._client.request(
                method,
                path,
                json=body,
                params=dict(params) if params else None,
                headers=headers,
            )
        except httpx.TransportError as e:
            logger.warning("%s %s transport failure: %s", method, path, e)
            raise NetworkError(str(e) or "Unable to connect to the server") from e

        if response.is_success:
            return self._decode(response, resource)

        error = self._classify(response, resource)
        logger.info(
            "%s %s -> %d %s",
            method, path, response.status_code, type(error).__name__,
            extra={"data": {"status": error.status, "code": error.code}},
        )
        raise error

    def _require_credential(self, require_auth: bool) -> dict[str, str]:
        """Authorization header, or fail without touching the network."""
        if not require_auth:
            return {}
        headers = self._credentials.authorization_header()
        if not headers:
            self._notifier.notify(
                SignOutEvent(return_path=self._location(), reason="missing_token")
            )
            raise UnauthenticatedError("No authentication token available")
        return headers

    def _classify(self, response: httpx.Response, resource: str) -> ApiError:
        status = response.status_code
        message, code = self._error_details(response)

        if status == 401:
            self._credentials.clear()
            self._notifier.notify(
                SignOutEvent(return_path=self._location(), reason="rejected")
            )
            return UnauthenticatedError()
        if status == 404:
            return NotFoundError(resource)
        if status == 429:
            retry_after = self._policy.parse_retry_after(
                response.headers.get("Retry-After")
            )
            return RateLimitError(message, retry_after)
        return ApiError(message, status, code)

    @staticmethod
    def _error_details(response: httpx.Response) -> tuple[str, str]:
        """Message and code from a JSON error body, with HTTP fallbacks."""
        message = response.reason_phrase or "An error occurred"
        code = "API_ERROR"
        try:
            data = response.json()
        except ValueError:
            return message, code
        if isinstance(data, dict):
            raw = data.get("message")
            if isinstance(raw, list):
                raw = "; ".join(str(m) for m in raw)
            if raw:
                message = str(raw)
            if data.get("error"):
                code = str(data["error"])
        return message, code

    @staticmethod
    def _decode(response: httpx.Response, resource: str) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ValidationError(
                resource, [{"type": "json_invalid", "msg": str(e)}]
            ) from e

    def _validate(self, data: Any, response_model: Any, resource: str) -> Any:
        if response_model is None:
            return data
        adapter = self._adapters.get(response_model)
        if adapter is None:
            adapter = TypeAdapter(response_model)
            self._adapters[response_model] = adapter
        try:
            return adapter.validate_python(data)
        except PydanticValidationError as e:
            logger.warning("Invalid %s response: %s", resource, e)
            raise ValidationError(resource, e.errors(include_url=False)) from e

    def _forget(self, key: str, task: asyncio.Future[Any]) -> None:
        """Drop a settled request from the in-flight table."""
        if self._pending.get(key) is task:
            del self._pending[key]
        # Mark the exception retrieved when every awaiter was cancelled
        if not task.cancelled():
            task.exception()
