# src/client/auth.py — v1
"""Bearer credential holder and sign-out notification.

The client never performs a sign-in itself. It only reads the held token,
drops it when the remote authority rejects it, and tells registered
listeners that the user must be routed to a sign-in view.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from storesync.storage.base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)

SIGN_IN_PATH = "/sign-in"


@dataclass(frozen=True)
class SignOutEvent:
    """Emitted when a call needs a credential the client does not hold."""

    return_path: str
    reason: str = "unauthenticated"


@runtime_checkable
class SignOutListener(Protocol):
    """Observer registered by the routing layer."""

    def on_signed_out(self, event: SignOutEvent) -> None:
        """Handle a sign-out, e.g. redirect to sign-in with event.return_path."""


class CredentialStore:
    """Holds the bearer token, persisted in local storage."""

    def __init__(self, store: BaseKeyValueStore, key: str = "token") -> None:
        self._store = store
        self._key = key

    @property
    def token(self) -> str | None:
        token = self._store.get_item(self._key)
        return token or None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def set_token(self, token: str) -> None:
        if not token:
            raise ValueError("token must be a non-empty string")
        self._store.set_item(self._key, token)

    def clear(self) -> None:
        self._store.remove_item(self._key)

    def authorization_header(self) -> dict[str, str]:
        """Authorization header for the held token, or {} when signed out."""
        token = self.token
        return {"Authorization": f"Bearer {token}"} if token else {}


class SignOutNotifier:
    """Fan-out of SignOutEvent to registered listeners."""

    def __init__(self) -> None:
        self._listeners: list[SignOutListener] = []

    def subscribe(self, listener: SignOutListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: SignOutListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self, event: SignOutEvent) -> None:
        """Deliver event to every listener.

        A failing listener is logged; it must not replace the error that
        caused the sign-out.
        """
        if SIGN_IN_PATH in event.return_path:
            return
        for listener in list(self._listeners):
            try:
                listener.on_signed_out(event)
            except Exception:
                logger.exception(
                    "Sign-out listener %r failed", listener,
                )
