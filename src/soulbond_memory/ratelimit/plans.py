"""
Subscription plan tiers for chat rate limiting.

Each tier maps to either a concrete PlanLimit or the UNLIMITED sentinel.
Callers resolve the plan once with resolve_plan_limit() and pass the result
to check_rate_limit(); UNLIMITED skips the backend entirely.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Union

from soulbond_memory.models import RateLimitResult
from soulbond_memory.ratelimit.limiter import WINDOW_UNITS_MS, RateLimiter
from soulbond_memory.ratelimit.protocol import RateLimitBackend

logger = logging.getLogger(__name__)

DAY_MS = WINDOW_UNITS_MS["d"]


class PlanTier(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"
    ULTIMATE = "ultimate"


@dataclass(frozen=True)
class PlanLimit:
    """A finite quota: max_requests per window_ms."""

    max_requests: int
    window_ms: int


class Unlimited:
    """Sentinel for tiers without a quota. Use the UNLIMITED instance."""

    _instance: Optional["Unlimited"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNLIMITED"


UNLIMITED = Unlimited()

TierConfig = Union[PlanLimit, Unlimited]

CHAT_PLAN_LIMITS: Dict[PlanTier, TierConfig] = {
    PlanTier.FREE: PlanLimit(max_requests=50, window_ms=DAY_MS),
    PlanTier.BASIC: PlanLimit(max_requests=1000, window_ms=DAY_MS),
    PlanTier.PREMIUM: PlanLimit(max_requests=10000, window_ms=DAY_MS),
    PlanTier.ULTIMATE: UNLIMITED,
}


def resolve_plan_tier(plan: Union[str, PlanTier, None]) -> PlanTier:
    """Normalize a plan name; unknown or missing plans are treated as free."""
    if isinstance(plan, PlanTier):
        return plan

    if isinstance(plan, str):
        try:
            return PlanTier(plan.strip().lower())
        except ValueError:
            pass

    if plan:
        logger.warning(f"Unknown plan {plan!r}, using free tier limits")
    return PlanTier.FREE


def resolve_plan_limit(
    plan: Union[str, PlanTier, None],
    limits: Optional[Dict[PlanTier, TierConfig]] = None,
) -> TierConfig:
    """
    Resolve a plan to its quota.

    Args:
        plan: Plan name or tier
        limits: Tier table (default: CHAT_PLAN_LIMITS)

    Returns:
        PlanLimit, or UNLIMITED for tiers without a quota
    """
    limits = limits if limits is not None else CHAT_PLAN_LIMITS
    tier = resolve_plan_tier(plan)
    return limits.get(tier, limits[PlanTier.FREE])


def unlimited_result() -> RateLimitResult:
    return RateLimitResult(success=True, unlimited=True)


def check_rate_limit(
    identifier: str,
    tier_config: TierConfig,
    backend: RateLimitBackend,
    prefix: str = "ratelimit:chat",
    fail_open: bool = True,
    clock: Optional[Callable[[], int]] = None,
) -> RateLimitResult:
    """
    Check a request against a resolved tier quota.

    Args:
        identifier: Caller identity (usually the user ID)
        tier_config: PlanLimit or UNLIMITED from resolve_plan_limit()
        backend: Counter storage
        prefix: Key prefix; use a per-tier prefix to keep tier counters apart
        fail_open: Allow requests when the backend fails
        clock: Returns the current time in epoch ms

    Returns:
        RateLimitResult; unlimited=True when the tier has no quota
    """
    if isinstance(tier_config, Unlimited):
        return unlimited_result()

    limiter = RateLimiter(
        backend,
        tier_config.max_requests,
        tier_config.window_ms,
        prefix=prefix,
        fail_open=fail_open,
        clock=clock,
    )
    return limiter.limit(identifier)
