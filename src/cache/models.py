# src/cache/models.py — v1
"""Cache domain model: CacheEntry."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AwareDatetime, BaseModel, model_validator


class CacheEntry(BaseModel):
    """Single cached payload with its write and expiry timestamps."""

    key: str
    payload: Any = None
    # Naive timestamps cannot be compared with the UTC clock
    written_at: AwareDatetime
    expires_at: AwareDatetime

    @model_validator(mode="after")
    def validate_expiry(self) -> CacheEntry:
        if self.expires_at <= self.written_at:
            raise ValueError("expires_at must be later than written_at")
        return self

    def is_expired(self, now: datetime) -> bool:
        """True once now is past expires_at."""
        return now > self.expires_at
