# src/client/retry.py — v1
"""Retry policies.

Two layers:
  - RetryPolicy: the client-level rate-limit policy. Deterministic
    exponential backoff capped by the server's Retry-After, no jitter.
  - with_jittered_retry: a caller-level loop (CLI --retry, UI retry
    buttons) that spreads repeated attempts with random jitter.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]

RETRYABLE_METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "DELETE"})


class RetryExhausted(Exception):
    """All caller-level attempts failed."""

    def __init__(self, operation: str, attempts: int, last_error: Exception):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"'{operation}' failed after {attempts} attempts: {last_error}"
        )


@dataclass(frozen=True)
class RetryPolicy:
    """Rate-limit retry policy for a single logical call."""

    max_retries: int = 3
    base_delay_s: float = 1.0
    default_retry_after_s: int = 60

    def should_retry(self, method: str, attempt: int) -> bool:
        """Whether a rate-limited call on its attempt-th retry may go again."""
        return method.upper() in RETRYABLE_METHODS and attempt < self.max_retries

    def delay_for(self, attempt: int, retry_after_s: float) -> float:
        """Delay before retry number attempt (0-based), in seconds."""
        return min(self.base_delay_s * (2 ** attempt), retry_after_s)

    def parse_retry_after(self, header: str | None) -> int:
        """Parse a Retry-After header given in seconds.

        Fractional values round up. Missing, non-numeric, non-finite or
        negative values fall back to the default.
        """
        if header is None:
            return self.default_retry_after_s
        try:
            value = float(header.strip())
        except ValueError:
            return self.default_retry_after_s
        if not math.isfinite(value) or value < 0:
            return self.default_retry_after_s
        return math.ceil(value)


def _jittered_delay(base_delay_s: float, attempt: int) -> float:
    """Exponential delay for a 0-based attempt, scaled by a 0.5-1.5 factor."""
    delay = base_delay_s * (2 ** attempt)
    return delay * (0.5 + random.random())  # noqa: S311


async def with_jittered_retry(
    fn: Callable[[], Awaitable[Any]],
    *,
    attempts: int = 3,
    base_delay_s: float = 1.0,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    operation: str = "operation",
    sleep: Sleep = asyncio.sleep,
) -> Any:
    """Run fn up to attempts times, sleeping a jittered backoff in between.

    Exceptions outside retry_on propagate immediately.

    Raises:
        RetryExhausted: If every attempt failed with a retryable error.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    for attempt in range(attempts):
        try:
            return await fn()
        except retry_on as e:
            if attempt + 1 >= attempts:
                raise RetryExhausted(operation, attempt + 1, e) from e
            delay = _jittered_delay(base_delay_s, attempt)
            logger.warning(
                "'%s' failed (attempt %d/%d), retrying in %.1fs: %s",
                operation, attempt + 1, attempts, delay, e,
            )
            await sleep(delay)
    raise AssertionError("unreachable")
