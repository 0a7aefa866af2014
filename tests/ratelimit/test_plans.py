"""Unit tests for plan tiers and chat limit checks."""

from unittest.mock import Mock

import pytest

from soulbond_memory.errors import RateLimitBackendError
from soulbond_memory.ratelimit import (
    CHAT_PLAN_LIMITS,
    UNLIMITED,
    InMemoryRateLimitBackend,
    PlanLimit,
    PlanTier,
    Unlimited,
    check_rate_limit,
    rate_limit_headers,
    resolve_plan_limit,
)
from soulbond_memory.ratelimit.plans import DAY_MS, resolve_plan_tier


def test_tier_table():
    assert CHAT_PLAN_LIMITS[PlanTier.FREE] == PlanLimit(50, DAY_MS)
    assert CHAT_PLAN_LIMITS[PlanTier.BASIC] == PlanLimit(1000, DAY_MS)
    assert CHAT_PLAN_LIMITS[PlanTier.PREMIUM] == PlanLimit(10000, DAY_MS)
    assert CHAT_PLAN_LIMITS[PlanTier.ULTIMATE] is UNLIMITED


def test_unlimited_is_a_singleton():
    assert Unlimited() is UNLIMITED
    assert repr(UNLIMITED) == "UNLIMITED"


@pytest.mark.parametrize(
    "plan,expected",
    [
        ("free", PlanTier.FREE),
        ("Premium", PlanTier.PREMIUM),
        (" basic ", PlanTier.BASIC),
        (PlanTier.ULTIMATE, PlanTier.ULTIMATE),
        ("enterprise", PlanTier.FREE),
        ("", PlanTier.FREE),
        (None, PlanTier.FREE),
        (3, PlanTier.FREE),
        ({"tier": "premium"}, PlanTier.FREE),
        (["basic"], PlanTier.FREE),
    ],
)
def test_resolve_plan_tier(plan, expected):
    assert resolve_plan_tier(plan) == expected


def test_resolve_plan_limit():
    assert resolve_plan_limit("premium").max_requests == 10000
    assert resolve_plan_limit("ultimate") is UNLIMITED
    assert resolve_plan_limit("unknown") == CHAT_PLAN_LIMITS[PlanTier.FREE]


def test_resolve_plan_limit_custom_table():
    limits = {PlanTier.FREE: PlanLimit(2, 1000), PlanTier.PREMIUM: UNLIMITED}

    assert resolve_plan_limit("premium", limits) is UNLIMITED
    # Tiers missing from the table fall back to free
    assert resolve_plan_limit("basic", limits) == PlanLimit(2, 1000)


def test_unlimited_tier_never_touches_backend():
    backend = Mock()

    for _ in range(100):
        result = check_rate_limit("user1", UNLIMITED, backend)
        assert result.success is True
        assert result.unlimited is True

    backend.hit.assert_not_called()
    assert rate_limit_headers(result) == {}


def test_finite_tier_is_enforced():
    backend = InMemoryRateLimitBackend(cleanup_probability=0.0)
    tier = PlanLimit(max_requests=2, window_ms=60_000)

    results = [
        check_rate_limit("user1", tier, backend, prefix="ratelimit:chat:free", clock=lambda: 0)
        for _ in range(3)
    ]

    assert [r.success for r in results] == [True, True, False]
    assert results[0].unlimited is False
    assert backend.get("ratelimit:chat:free:user1", 0).count == 3


def test_tier_failure_policy():
    backend = Mock()
    backend.hit.side_effect = RateLimitBackendError("down")

    result = check_rate_limit("user1", PlanLimit(5, 1000), backend, fail_open=False)

    assert result.success is False
    assert result.degraded is True
