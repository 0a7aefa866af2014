"""
The application's named rate limiters, sharing one backend.

    api              100 per minute
    auth             5 per 15 minutes
    upload           10 per hour
    generation       50 per hour (voice, images)
    password_reset   3 per hour
    data_export      5 per 24 hours
    chat             per plan tier (see plans.CHAT_PLAN_LIMITS)
"""

import logging
from typing import Callable, Dict, Optional, Union

from soulbond_memory.models import RateLimitResult
from soulbond_memory.ratelimit.limiter import RateLimiter
from soulbond_memory.ratelimit.plans import (
    CHAT_PLAN_LIMITS,
    PlanLimit,
    PlanTier,
    TierConfig,
    Unlimited,
    resolve_plan_tier,
    unlimited_result,
)
from soulbond_memory.ratelimit.protocol import RateLimitBackend

logger = logging.getLogger(__name__)

# name -> (max_requests, window)
DEFAULT_LIMITS = {
    "api": (100, "1 m"),
    "auth": (5, "15 m"),
    "upload": (10, "1 h"),
    "generation": (50, "1 h"),
    "password_reset": (3, "1 h"),
    "data_export": (5, "24 h"),
}


class RateLimiterSuite:
    """
    Builds every named limiter over a single backend.

    Keys are prefixed "ratelimit:<name>" and chat keys "ratelimit:chat:<tier>",
    so a plan change starts a fresh chat window.
    """

    def __init__(
        self,
        backend: RateLimitBackend,
        fail_open: bool = True,
        clock: Optional[Callable[[], int]] = None,
        chat_limits: Optional[Dict[PlanTier, TierConfig]] = None,
    ):
        self.backend = backend
        self.chat_limits = chat_limits if chat_limits is not None else CHAT_PLAN_LIMITS

        # Unknown and missing tiers resolve to free
        if PlanTier.FREE not in self.chat_limits:
            raise ValueError("chat_limits must define the free tier")

        self.limiters: Dict[str, RateLimiter] = {
            name: RateLimiter(
                backend,
                max_requests,
                window,
                prefix=f"ratelimit:{name.replace('_', '-')}",
                fail_open=fail_open,
                clock=clock,
            )
            for name, (max_requests, window) in DEFAULT_LIMITS.items()
        }

        self.chat: Dict[PlanTier, RateLimiter] = {
            tier: RateLimiter(
                backend,
                config.max_requests,
                config.window_ms,
                prefix=f"ratelimit:chat:{tier.value}",
                fail_open=fail_open,
                clock=clock,
            )
            for tier, config in self.chat_limits.items()
            if isinstance(config, PlanLimit)
        }

        logger.info(
            f"RateLimiterSuite initialized ({len(self.limiters)} limiters, "
            f"{len(self.chat)} chat tiers)"
        )

    def get(self, name: str) -> Optional[RateLimiter]:
        """
        Look up a named limiter (e.g. "auth", "chat:free").

        Returns None for chat tiers without a quota.

        Raises:
            KeyError: If the name is not a known limiter
        """
        if name.startswith("chat:"):
            return self._chat_limiter(name.split(":", 1)[1])
        return self.limiters[name]

    def _chat_limiter(self, plan: Union[str, PlanTier, None]) -> Optional[RateLimiter]:
        tier = resolve_plan_tier(plan)
        config = self.chat_limits.get(tier, self.chat_limits[PlanTier.FREE])

        if isinstance(config, Unlimited):
            return None

        return self.chat.get(tier, self.chat[PlanTier.FREE])

    def check(self, name: str, identifier: str) -> RateLimitResult:
        """Count a request against a named limiter."""
        limiter = self.get(name)

        if limiter is None:
            return unlimited_result()

        return limiter.limit(identifier)

    def check_chat(
        self, user_id: str, plan: Union[str, PlanTier, None] = "free"
    ) -> RateLimitResult:
        """Count a chat message against the user's plan quota."""
        limiter = self._chat_limiter(plan)

        if limiter is None:
            return unlimited_result()

        return limiter.limit(user_id)

    def remaining_limits(
        self, user_id: str, plan: Union[str, PlanTier, None] = "free"
    ) -> Dict[str, RateLimitResult]:
        """
        Report chat, upload and generation quotas without consuming them.

        Chat is omitted for unlimited plans.
        """
        limits: Dict[str, RateLimitResult] = {}

        chat_limiter = self._chat_limiter(plan)
        if chat_limiter is not None:
            limits["chat"] = chat_limiter.peek(user_id)

        limits["upload"] = self.limiters["upload"].peek(user_id)
        limits["generation"] = self.limiters["generation"].peek(user_id)

        return limits

    def reset(self, identifier: str, name: str) -> bool:
        """Drop an identifier's window on a named limiter; False for unlimited tiers."""
        limiter = self.get(name)

        if limiter is None:
            return False

        reset = limiter.reset(identifier)
        logger.info(f"Reset {name} limit for {identifier} (existed={reset})")
        return reset
