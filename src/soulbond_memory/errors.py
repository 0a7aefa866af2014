"""Shared error types for soulbond-memory.

Scoring and keyword extraction never raise; errors here come from
infrastructure (storage, counters) or from invalid configuration.
"""


class SoulbondMemoryError(Exception):
    """Base error for soulbond-memory."""


class RateLimitBackendError(SoulbondMemoryError):
    """The shared counter store could not be reached or failed mid-operation."""


class InvalidWindowError(SoulbondMemoryError, ValueError):
    """A rate limit window string could not be parsed."""
