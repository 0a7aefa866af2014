"""
In-memory rate limit backend.

Keeps counting windows in a local dictionary, suitable for tests, development
and single-instance deployments. Each instance owns its own map, so tests can
build isolated limiters. For multiple replicas use the Redis backend instead.

The map is not guarded by a lock: concurrent threads hitting the same key may
lose increments. Use it from a single thread or event loop.
"""

import logging
import random
from typing import Callable, Dict, Optional

from soulbond_memory.config import RATE_LIMIT_CLEANUP_PROBABILITY
from soulbond_memory.models import RateLimitEntry

logger = logging.getLogger(__name__)


class InMemoryRateLimitBackend:
    """
    In-memory implementation of the RateLimitBackend protocol.

    Expired windows are reclaimed by an opportunistic sweep that runs on a
    random fraction of hits, or explicitly through cleanup().
    """

    def __init__(
        self,
        cleanup_probability: float = RATE_LIMIT_CLEANUP_PROBABILITY,
        random_source: Callable[[], float] = random.random,
    ):
        """
        Initialize the backend.

        Args:
            cleanup_probability: Chance (0.0-1.0) that a hit triggers a sweep
            random_source: Returns floats in [0, 1); injectable for tests
        """
        self._entries: Dict[str, RateLimitEntry] = {}
        self._cleanup_probability = cleanup_probability
        self._random = random_source

        logger.info(
            f"InMemoryRateLimitBackend initialized (cleanup_probability={cleanup_probability})"
        )

    def hit(self, key: str, window_ms: int, now_ms: int) -> RateLimitEntry:
        """Record one request against a key."""
        if self._random() < self._cleanup_probability:
            self.cleanup(now_ms)

        entry = self._entries.get(key)

        if entry is None or entry.reset_at < now_ms:
            entry = RateLimitEntry(key=key, count=1, reset_at=now_ms + window_ms)
            self._entries[key] = entry
            logger.debug(f"Started window for {key} (reset_at={entry.reset_at})")
        else:
            entry.count += 1

        return entry.model_copy()

    def get(self, key: str, now_ms: int) -> Optional[RateLimitEntry]:
        """Read the active window for a key without counting a request."""
        entry = self._entries.get(key)

        if entry is None or entry.reset_at < now_ms:
            return None

        return entry.model_copy()

    def reset(self, key: str) -> bool:
        """Drop the window for a key."""
        existed = self._entries.pop(key, None) is not None
        if existed:
            logger.info(f"Reset rate limit window for {key}")
        return existed

    def cleanup(self, now_ms: int) -> int:
        """
        Remove every expired window.

        Args:
            now_ms: Current time in epoch milliseconds

        Returns:
            Number of windows removed
        """
        expired = [key for key, entry in self._entries.items() if entry.reset_at < now_ms]

        for key in expired:
            del self._entries[key]

        if expired:
            logger.debug(f"Swept {len(expired)} expired rate limit windows")

        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
