"""
Redis rate limit backend.

Counts requests with an atomic Lua script (INCR plus PEXPIRE on the first
hit), so concurrent requests across replicas share one window per key.
"""

import logging
from typing import Optional

from soulbond_memory.errors import RateLimitBackendError
from soulbond_memory.models import RateLimitEntry

try:
    import redis
except ImportError:
    redis = None  # type: ignore

logger = logging.getLogger(__name__)

# KEYS[1] = counter key, ARGV[1] = window in ms. Returns {count, ttl_ms}.
HIT_SCRIPT = """
local count = redis.call('INCR', KEYS[1])
local ttl = redis.call('PTTL', KEYS[1])
if count == 1 or ttl < 0 then
    redis.call('PEXPIRE', KEYS[1], ARGV[1])
    ttl = tonumber(ARGV[1])
end
return {count, ttl}
"""


class RedisRateLimitBackend:
    """
    Redis implementation of the RateLimitBackend protocol.

    Each key holds an integer counter whose TTL is the remaining window.
    Redis errors are raised as RateLimitBackendError so the limiter can
    apply its failure policy.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        client=None,
        check_connection: bool = True,
    ):
        """
        Initialize the Redis backend.

        Args:
            url: Redis URL (e.g. "redis://localhost:6379/0"); overrides host/port/db
            host: Redis host
            port: Redis port
            db: Redis database number
            client: Pre-built redis client; overrides url and host settings
            check_connection: Ping the server on startup
        """
        if redis is None:
            raise ImportError(
                "redis package is required for RedisRateLimitBackend. "
                "Install with: pip install redis"
            )

        if client is not None:
            self.client = client
        elif url:
            self.client = redis.Redis.from_url(url, decode_responses=True)
        else:
            self.client = redis.Redis(host=host, port=port, db=db, decode_responses=True)

        self._hit_script = self.client.register_script(HIT_SCRIPT)

        if check_connection:
            try:
                self.client.ping()
                logger.info(f"RedisRateLimitBackend initialized ({url or f'{host}:{port}/{db}'})")
            except redis.RedisError as e:
                logger.error(f"Failed to connect to Redis: {e}")
                raise RateLimitBackendError(f"Redis unavailable: {e}") from e

    def hit(self, key: str, window_ms: int, now_ms: int) -> RateLimitEntry:
        """Record one request against a key."""
        try:
            count, ttl = self._hit_script(keys=[key], args=[window_ms])
        except redis.RedisError as e:
            logger.error(f"Rate limit hit failed for {key}: {e}")
            raise RateLimitBackendError(str(e)) from e

        return RateLimitEntry(key=key, count=int(count), reset_at=now_ms + int(ttl))

    def get(self, key: str, now_ms: int) -> Optional[RateLimitEntry]:
        """Read the active window for a key without counting a request."""
        try:
            pipeline = self.client.pipeline()
            pipeline.get(key)
            pipeline.pttl(key)
            value, ttl = pipeline.execute()
        except redis.RedisError as e:
            logger.error(f"Rate limit read failed for {key}: {e}")
            raise RateLimitBackendError(str(e)) from e

        if value is None or int(ttl) < 0:
            return None

        return RateLimitEntry(key=key, count=int(value), reset_at=now_ms + int(ttl))

    def reset(self, key: str) -> bool:
        """Drop the window for a key."""
        try:
            deleted = self.client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Rate limit reset failed for {key}: {e}")
            raise RateLimitBackendError(str(e)) from e

        logger.info(f"Reset rate limit window for {key}")
        return bool(deleted)
