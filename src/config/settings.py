# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for API endpoint, retry, local storage, cache,
collection and logging settings. Env var names are the upper-cased field
names (API_BASE_URL, STORAGE_BACKEND, CART_TTL_S, ...).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Remote API ===
    api_base_url: str = "http://localhost:3001"
    api_timeout_s: float | None = None
    api_max_rate_limit_retries: int = 3
    api_backoff_base_s: float = 1.0
    api_default_retry_after_s: int = 60

    # === Local durable storage ===
    storage_backend: Literal["memory", "json", "sqlite", "redis"] = "json"
    storage_root: Path = Path("~/.storesync/storage")
    storage_redis_url: str = ""
    storage_namespace: str = "storesync"

    # === Expiring cache ===
    cache_default_ttl_s: int = 3600
    cache_sweep_on_start: bool = True
    cache_homepage_ttl_s: int = 300

    # === Tracked collections ===
    cart_ttl_s: int = 3600
    cart_storage_key: str = "wisestyle_cart"
    likes_storage_key: str = "likedProducts"
    token_storage_key: str = "token"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("api_max_rate_limit_retries", "log_retention")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator(
        "cache_default_ttl_s",
        "cache_homepage_ttl_s",
        "cart_ttl_s",
        "api_default_retry_after_s",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.storage_backend == "redis" and not self.storage_redis_url:
            errors.append("STORAGE_BACKEND=redis requires STORAGE_REDIS_URL")

        if not self.api_base_url.startswith(("http://", "https://")):
            errors.append("API_BASE_URL must start with http:// or https://")

        if self.api_backoff_base_s < 0:
            errors.append("API_BACKOFF_BASE_S must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def api_root(self) -> str:
        """Base URL without trailing slash."""
        return self.api_base_url.rstrip("/")


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
