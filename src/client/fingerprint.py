# src/client/fingerprint.py — v1
"""Request fingerprints used to de-duplicate in-flight GET requests."""

from __future__ import annotations

import json
from typing import Any, Mapping


def request_fingerprint(
    method: str,
    url: str,
    params: Mapping[str, Any] | None = None,
    authenticated: bool = False,
) -> str:
    """Deterministic key from method, URL, query parameters and auth mode.

    Parameters are serialised with sorted keys so that {"a": 1, "b": 2} and
    {"b": 2, "a": 1} collide. A trailing slash on the URL is not significant.
    Requests sent with the bearer token never share a key with public ones.
    """
    normalized_url = url.rstrip("/") or "/"
    serialized = json.dumps(params, sort_keys=True, default=str, separators=(",", ":"))
    key = f"{method.upper()}:{normalized_url}:{serialized}"
    return f"{key}:auth" if authenticated else key
