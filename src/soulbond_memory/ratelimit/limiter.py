"""
Fixed-window rate limiting over a pluggable counter backend.

Per key, a window is either absent (never seen or expired) or active.
The first request in an absent window starts it with count 1 and always
succeeds. Later requests increment the count and succeed while the count
is within the limit; the window is not reset early when the limit is
exceeded, so excess requests keep failing until it expires.
"""

import logging
import re
import time
from typing import Callable, Dict, Optional, Union

from soulbond_memory.errors import InvalidWindowError, RateLimitBackendError
from soulbond_memory.models import RateLimitEntry, RateLimitResult
from soulbond_memory.ratelimit.protocol import RateLimitBackend

logger = logging.getLogger(__name__)

_WINDOW_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd])\s*$")

WINDOW_UNITS_MS = {
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
}


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def parse_window(window: Union[str, int]) -> int:
    """
    Convert a window specification to milliseconds.

    Args:
        window: Milliseconds, or a string such as "1 m", "15 m", "1 h", "24 h", "1 d"

    Returns:
        Window length in milliseconds

    Raises:
        InvalidWindowError: If the window is not a positive duration
    """
    if isinstance(window, bool):
        raise InvalidWindowError(f"Invalid window: {window!r}")

    if isinstance(window, int):
        if window <= 0:
            raise InvalidWindowError(f"Window must be positive: {window}")
        return window

    match = _WINDOW_PATTERN.match(window or "")
    if not match:
        raise InvalidWindowError(f"Invalid window format: {window!r}")

    amount, unit = match.groups()
    window_ms = int(amount) * WINDOW_UNITS_MS[unit]
    if window_ms <= 0:
        raise InvalidWindowError(f"Window must be positive: {window!r}")

    return window_ms


def evaluate_window(entry: RateLimitEntry, max_requests: int) -> RateLimitResult:
    """Turn a counted window into an allow/deny decision."""
    return RateLimitResult(
        success=entry.count <= max_requests,
        limit=max_requests,
        remaining=max(0, max_requests - entry.count),
        reset=entry.reset_at,
    )


def apply_limit(
    backend: RateLimitBackend,
    key: str,
    max_requests: int,
    window_ms: int,
    current_ms: Optional[int] = None,
) -> RateLimitResult:
    """
    Count one request against a key and decide whether it is allowed.

    Args:
        backend: Counter storage
        key: Full counter key
        max_requests: Requests allowed per window
        window_ms: Window length in milliseconds
        current_ms: Current time in epoch milliseconds (default: now)

    Returns:
        RateLimitResult for this request

    Raises:
        RateLimitBackendError: If the backend is unavailable
    """
    current_ms = now_ms() if current_ms is None else current_ms
    entry = backend.hit(key, window_ms, current_ms)
    return evaluate_window(entry, max_requests)


class RateLimiter:
    """
    A named limit (max requests per window) bound to a backend.

    Example:
        limiter = RateLimiter(InMemoryRateLimitBackend(), 100, "1 m", prefix="ratelimit:api")
        result = limiter.limit("user_1")
        if not result.success:
            headers = rate_limit_headers(result)
    """

    def __init__(
        self,
        backend: RateLimitBackend,
        max_requests: int,
        window: Union[str, int],
        prefix: Optional[str] = None,
        fail_open: bool = True,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize the limiter.

        Args:
            backend: Counter storage shared by every key of this limiter
            max_requests: Requests allowed per window (must be positive)
            window: Window length in ms, or a string such as "15 m"
            prefix: Key prefix (e.g. "ratelimit:auth")
            fail_open: Allow requests when the backend fails (default: True)
            clock: Returns the current time in epoch ms; injectable for tests
        """
        if max_requests <= 0:
            raise ValueError(f"max_requests must be positive: {max_requests}")

        self.backend = backend
        self.max_requests = max_requests
        self.window_ms = parse_window(window)
        self.prefix = prefix
        self.fail_open = fail_open
        self._clock = clock or now_ms

    def key_for(self, identifier: str) -> str:
        return f"{self.prefix}:{identifier}" if self.prefix else identifier

    def limit(self, identifier: str) -> RateLimitResult:
        """
        Count a request for an identifier.

        Args:
            identifier: User ID, IP address or other caller identity

        Returns:
            RateLimitResult; degraded=True if the backend failed
        """
        key = self.key_for(identifier)
        current = self._clock()

        try:
            result = apply_limit(self.backend, key, self.max_requests, self.window_ms, current)
        except RateLimitBackendError as e:
            return self._on_backend_failure(key, current, e)

        if not result.success:
            logger.info(f"Rate limit exceeded for {key} ({self.max_requests}/{self.window_ms}ms)")

        return result

    def peek(self, identifier: str) -> RateLimitResult:
        """
        Report the current window for an identifier without counting a request.

        success tells whether the next request would be allowed.
        """
        key = self.key_for(identifier)
        current = self._clock()

        try:
            entry = self.backend.get(key, current)
        except RateLimitBackendError as e:
            return self._on_backend_failure(key, current, e)

        if entry is None:
            return RateLimitResult(
                success=True,
                limit=self.max_requests,
                remaining=self.max_requests,
                reset=current + self.window_ms,
            )

        return RateLimitResult(
            success=entry.count < self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - entry.count),
            reset=entry.reset_at,
        )

    def reset(self, identifier: str) -> bool:
        """Drop the window for an identifier; returns True if one existed."""
        return self.backend.reset(self.key_for(identifier))

    def _on_backend_failure(
        self, key: str, current: int, error: Exception
    ) -> RateLimitResult:
        policy = "open" if self.fail_open else "closed"
        logger.warning(f"Rate limit backend failed for {key}, failing {policy}: {error}")

        return RateLimitResult(
            success=self.fail_open,
            limit=self.max_requests,
            remaining=self.max_requests if self.fail_open else 0,
            reset=current + self.window_ms,
            degraded=True,
        )


def rate_limit_headers(result: RateLimitResult, current_ms: Optional[int] = None) -> Dict[str, str]:
    """
    Build standard rate limit response headers.

    Args:
        result: Outcome of a limit check
        current_ms: Current time in epoch ms, used for Retry-After (default: now)

    Returns:
        Header dict; empty for unlimited results
    """
    if result.unlimited or result.limit is None or result.reset is None:
        return {}

    current_ms = now_ms() if current_ms is None else current_ms
    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset),
    }

    if not result.success:
        headers["Retry-After"] = str(max(0, (result.reset - current_ms) // 1000))

    return headers
