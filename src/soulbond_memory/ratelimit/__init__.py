"""
Rate limiting for the chat pipeline.

- limiter: fixed-window RateLimiter, window parsing, response headers
- plans: plan tiers with an explicit UNLIMITED variant
- suite: the application's named limiters over one backend
- memory / redis: counter backends
"""

from soulbond_memory.ratelimit.factory import create_rate_limit_backend
from soulbond_memory.ratelimit.limiter import (
    RateLimiter,
    apply_limit,
    parse_window,
    rate_limit_headers,
)
from soulbond_memory.ratelimit.memory import InMemoryRateLimitBackend
from soulbond_memory.ratelimit.plans import (
    CHAT_PLAN_LIMITS,
    UNLIMITED,
    PlanLimit,
    PlanTier,
    TierConfig,
    Unlimited,
    check_rate_limit,
    resolve_plan_limit,
)
from soulbond_memory.ratelimit.protocol import RateLimitBackend
from soulbond_memory.ratelimit.suite import RateLimiterSuite

__all__ = [
    "RateLimitBackend",
    "InMemoryRateLimitBackend",
    "RateLimiter",
    "RateLimiterSuite",
    "apply_limit",
    "parse_window",
    "rate_limit_headers",
    "create_rate_limit_backend",
    "PlanTier",
    "PlanLimit",
    "Unlimited",
    "UNLIMITED",
    "TierConfig",
    "CHAT_PLAN_LIMITS",
    "check_rate_limit",
    "resolve_plan_limit",
]

try:
    from soulbond_memory.ratelimit.redis import RedisRateLimitBackend  # noqa: F401

    __all__.append("RedisRateLimitBackend")
except ImportError:
    pass
