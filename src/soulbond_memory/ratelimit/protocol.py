"""
Backend protocol for rate limit counters.

A backend tracks at most one active window per key. It only counts; the
decision whether a request is allowed is made by the limiter.
"""

from typing import Optional, Protocol

from soulbond_memory.models import RateLimitEntry


class RateLimitBackend(Protocol):
    """
    Protocol for rate limit counter storage.

    Implementations are backed by a shared cache (Redis) for multi-instance
    deployments or a local map for single-process and development use.
    """

    def hit(self, key: str, window_ms: int, now_ms: int) -> RateLimitEntry:
        """
        Record one request against a key.

        Starts a new window with count 1 when the key has no window or its
        window has expired; otherwise increments the active window.

        Args:
            key: Counter key (e.g. "ratelimit:chat:free:user_1")
            window_ms: Window length used when a new window starts
            now_ms: Current time in epoch milliseconds

        Returns:
            The window after the increment

        Raises:
            RateLimitBackendError: If the counter store is unavailable
        """
        ...

    def get(self, key: str, now_ms: int) -> Optional[RateLimitEntry]:
        """
        Read the active window for a key without counting a request.

        Args:
            key: Counter key
            now_ms: Current time in epoch milliseconds

        Returns:
            The active window, or None if absent or expired

        Raises:
            RateLimitBackendError: If the counter store is unavailable
        """
        ...

    def reset(self, key: str) -> bool:
        """
        Drop the window for a key.

        Args:
            key: Counter key

        Returns:
            True if a window existed
        """
        ...
