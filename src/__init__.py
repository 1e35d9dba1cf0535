# src/__init__.py — v1
"""storesync — resilient storefront client with optimistic local state."""

from storesync.version import __version__

__all__ = ["__version__"]
