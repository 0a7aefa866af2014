import logging
import os
from typing import Optional

from soulbond_memory.ratelimit.memory import InMemoryRateLimitBackend
from soulbond_memory.ratelimit.protocol import RateLimitBackend

logger = logging.getLogger(__name__)


def create_rate_limit_backend(redis_url: Optional[str] = None) -> RateLimitBackend:
    """
    Pick a counter backend for the current deployment.

    Uses Redis when a URL is given or REDIS_URL is set; otherwise falls back
    to a local in-memory backend, which only limits within one process.

    Args:
        redis_url: Redis URL (default: REDIS_URL environment variable)

    Returns:
        A RateLimitBackend

    Raises:
        RateLimitBackendError: If Redis is configured but unreachable
    """
    redis_url = redis_url or os.getenv("REDIS_URL")

    if redis_url:
        from soulbond_memory.ratelimit.redis import RedisRateLimitBackend

        return RedisRateLimitBackend(url=redis_url)

    logger.warning("Using in-memory rate limiter (Redis not configured)")
    return InMemoryRateLimitBackend()
