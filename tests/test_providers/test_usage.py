"""
Tests for fly_advisor/providers/usage.py.

What we test
------------
  - Free users are allowed until the daily limit, then refused.
  - Counters are per user and per action.
  - Premium users are unlimited (limit -1) and flagged as premium.
  - set_premium() toggles the plan.
  - Counters reset when the clock crosses into a new UTC day.
  - reserve() checks and counts in one step; release() gives one back and
    never goes below zero.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from fly_advisor.providers.usage import FLY_SUGGESTIONS, InMemoryUsageService


class MutableClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _clock() -> MutableClock:
    return MutableClock(datetime(2024, 7, 15, 23, 0, tzinfo=timezone.utc))


class TestInMemoryUsageService:
    def test_free_limit(self):
        service = InMemoryUsageService(daily_limit=2, clock=_clock())

        async def _go():
            before = await service.can_perform("u1", FLY_SUGGESTIONS)
            await service.increment("u1", FLY_SUGGESTIONS)
            last = await service.increment("u1", FLY_SUGGESTIONS)
            after = await service.can_perform("u1", FLY_SUGGESTIONS)
            return before, last, after

        before, last, after = asyncio.run(_go())
        assert before.can_perform is True
        assert before.used == 0
        assert before.remaining == 2
        assert last.used == 2
        assert last.can_perform is False
        assert after.can_perform is False
        assert after.remaining == 0

    def test_counters_are_scoped(self):
        service = InMemoryUsageService(daily_limit=1, clock=_clock())

        async def _go():
            await service.increment("u1", FLY_SUGGESTIONS)
            return (
                await service.can_perform("u2", FLY_SUGGESTIONS),
                await service.can_perform("u1", "other_action"),
            )

        other_user, other_action = asyncio.run(_go())
        assert other_user.can_perform is True
        assert other_action.can_perform is True

    def test_premium_unlimited(self):
        service = InMemoryUsageService(daily_limit=1, premium_users=["p1"], clock=_clock())

        async def _go():
            for _ in range(5):
                info = await service.increment("p1")
            return info

        info = asyncio.run(_go())
        assert info.used == 5
        assert info.is_premium is True
        assert info.limit == -1
        assert info.can_perform is True
        assert info.remaining is None

    def test_set_premium(self):
        service = InMemoryUsageService(daily_limit=1, clock=_clock())

        async def _go():
            await service.increment("u1")
            refused = await service.can_perform("u1")
            service.set_premium("u1")
            upgraded = await service.can_perform("u1")
            service.set_premium("u1", False)
            downgraded = await service.can_perform("u1")
            return refused, upgraded, downgraded

        refused, upgraded, downgraded = asyncio.run(_go())
        assert refused.can_perform is False
        assert upgraded.can_perform is True
        assert downgraded.can_perform is False

    def test_daily_reset(self):
        clock = _clock()
        service = InMemoryUsageService(daily_limit=1, clock=clock)

        async def _go():
            await service.increment("u1")
            same_day = await service.can_perform("u1")
            clock.now += timedelta(hours=2)
            next_day = await service.can_perform("u1")
            return same_day, next_day

        same_day, next_day = asyncio.run(_go())
        assert same_day.can_perform is False
        assert next_day.can_perform is True
        assert next_day.used == 0

    def test_reserve_checks_and_counts(self):
        service = InMemoryUsageService(daily_limit=1, clock=_clock())

        async def _go():
            return await service.reserve("u1"), await service.reserve("u1")

        (granted, info), (refused, after) = asyncio.run(_go())
        assert granted is True
        assert info.used == 1
        assert refused is False
        assert after.used == 1

    def test_concurrent_reservations(self):
        service = InMemoryUsageService(daily_limit=2, clock=_clock())

        async def _go():
            return await asyncio.gather(*(service.reserve("u1") for _ in range(5)))

        outcomes = asyncio.run(_go())
        assert [granted for granted, _ in outcomes].count(True) == 2
        assert asyncio.run(service.can_perform("u1")).used == 2

    def test_release(self):
        service = InMemoryUsageService(daily_limit=1, clock=_clock())

        async def _go():
            await service.reserve("u1")
            released = await service.release("u1")
            floor = await service.release("u1")
            return released, floor

        released, floor = asyncio.run(_go())
        assert released.used == 0
        assert released.can_perform is True
        assert floor.used == 0
