"""Utility functions for memory management."""

from soulbond_memory.utils.timestamps import ensure_utc, resolve_now, utc_now

__all__ = [
    "ensure_utc",
    "resolve_now",
    "utc_now",
]
