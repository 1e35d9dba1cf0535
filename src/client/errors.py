# src/client/errors.py — v1
"""Error taxonomy of the remote client.

ApiError covers every classified HTTP failure. ValidationError is kept
outside that hierarchy: the call succeeded on the wire but the body did not
match the expected schema.
"""

from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """Non-2xx response (or transport failure) from the remote authority."""

    def __init__(self, message: str, status: int, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


class NotFoundError(ApiError):
    """404 for a named resource."""

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not found", 404, "NOT_FOUND")
        self.resource = resource


class RateLimitError(ApiError):
    """429; retry_after is the server-advertised wait in seconds."""

    def __init__(self, message: str | None = None, retry_after: int = 60) -> None:
        super().__init__(
            message or "Too many requests, please try again later",
            429,
            "RATE_LIMITED",
        )
        self.retry_after = retry_after


class UnauthenticatedError(ApiError):
    """No credential held, or the remote authority rejected it (401)."""

    def __init__(self, message: str = "Unauthorized access") -> None:
        super().__init__(message, 401, "UNAUTHORIZED")


class NetworkError(ApiError):
    """The request never produced a response."""

    def __init__(self, message: str = "Network error occurred") -> None:
        super().__init__(message, 0, "NETWORK_ERROR")


class ValidationError(Exception):
    """Response body does not match the expected schema."""

    def __init__(self, resource: str, errors: list[dict[str, Any]]) -> None:
        self.resource = resource
        self.errors = errors
        super().__init__(
            f"Invalid {resource} response: {len(errors)} validation error(s)"
        )
