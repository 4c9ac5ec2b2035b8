"""
Usage quota service.

Free users get a fixed number of actions per UTC day; premium users are
unlimited (``limit = -1``).  Counts reset when the injected clock crosses
into a new UTC day.  ``reserve()`` checks and counts in one step so
concurrent requests cannot overrun the limit; ``release()`` hands a
reservation back when the action produced nothing.

The in-memory implementation is suitable for a single process and for tests;
a persistent implementation only needs to satisfy the ``UsageService``
protocol.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Iterable, Optional, Protocol

from fly_advisor.models.recommendation import UsageInfo
from fly_advisor.utils.time_utils import Clock, utcnow

logger = logging.getLogger(__name__)

FLY_SUGGESTIONS = "fly_suggestions"
UNLIMITED = -1


class UsageService(Protocol):
    """Per-user action quota."""

    async def can_perform(self, user_id: str, action: str) -> UsageInfo:
        ...

    async def increment(self, user_id: str, action: str) -> UsageInfo:
        ...

    async def reserve(self, user_id: str, action: str) -> tuple[bool, UsageInfo]:
        ...

    async def release(self, user_id: str, action: str) -> UsageInfo:
        ...


class InMemoryUsageService:
    """Daily per-user counters held in memory.

    Args:
        daily_limit:   Free-tier actions per UTC day.
        premium_users: User ids with unlimited usage.
        clock:         Injected clock; defaults to ``utcnow``.
    """

    def __init__(
        self,
        daily_limit: int = 3,
        premium_users: Iterable[str] = (),
        clock: Optional[Clock] = None,
    ) -> None:
        self.daily_limit = daily_limit
        self.premium_users = set(premium_users)
        self._clock = clock or utcnow
        self._counts: dict[tuple[str, str], tuple[date, int]] = {}
        self._lock = threading.Lock()

    def set_premium(self, user_id: str, is_premium: bool = True) -> None:
        if is_premium:
            self.premium_users.add(user_id)
        else:
            self.premium_users.discard(user_id)

    def _used_today(self, user_id: str, action: str) -> int:
        today = self._clock().date()
        day, count = self._counts.get((user_id, action), (today, 0))
        return count if day == today else 0

    def _info(self, user_id: str, used: int) -> UsageInfo:
        if user_id in self.premium_users:
            return UsageInfo(used=used, limit=UNLIMITED, is_premium=True, can_perform=True)
        return UsageInfo(
            used=used,
            limit=self.daily_limit,
            is_premium=False,
            can_perform=used < self.daily_limit,
        )

    async def can_perform(self, user_id: str, action: str = FLY_SUGGESTIONS) -> UsageInfo:
        with self._lock:
            return self._info(user_id, self._used_today(user_id, action))

    async def increment(self, user_id: str, action: str = FLY_SUGGESTIONS) -> UsageInfo:
        with self._lock:
            used = self._used_today(user_id, action) + 1
            self._counts[(user_id, action)] = (self._clock().date(), used)
        logger.debug("Usage %s/%s now %d", user_id, action, used)
        return self._info(user_id, used)

    async def reserve(self, user_id: str, action: str = FLY_SUGGESTIONS) -> tuple[bool, UsageInfo]:
        """Check and count one action in a single step.

        Returns ``(granted, info)``.  A refused reservation leaves the
        counter untouched.
        """
        with self._lock:
            used = self._used_today(user_id, action)
            if not self._info(user_id, used).can_perform:
                return False, self._info(user_id, used)
            used += 1
            self._counts[(user_id, action)] = (self._clock().date(), used)
        logger.debug("Usage %s/%s reserved, now %d", user_id, action, used)
        return True, self._info(user_id, used)

    async def release(self, user_id: str, action: str = FLY_SUGGESTIONS) -> UsageInfo:
        """Give back a reservation whose action produced nothing."""
        with self._lock:
            used = max(0, self._used_today(user_id, action) - 1)
            self._counts[(user_id, action)] = (self._clock().date(), used)
        logger.debug("Usage %s/%s released, now %d", user_id, action, used)
        return self._info(user_id, used)
