"""
Time and date utilities for condition normalization and solunar math.

Key concepts:
  - All instants inside the engine are timezone-aware UTC ``datetime``s.
    Naive values are interpreted as UTC by ``ensure_utc()``.
  - "Local" hours are solar hours: UTC shifted by ``longitude / 15``.
    The engine never consults a timezone database.
  - The clock is injected.  ``Clock`` is any zero-argument callable that
    returns an aware ``datetime``; ``utcnow`` is the production default and
    ``fixed_clock()`` builds a deterministic one for tests.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def fixed_clock(instant: datetime) -> Clock:
    """Return a clock that always reports ``instant`` (normalized to UTC)."""
    frozen = ensure_utc(instant)

    def _clock() -> datetime:
        return frozen

    return _clock


def ensure_utc(value: datetime | date) -> datetime:
    """Coerce a ``date`` or ``datetime`` into an aware UTC ``datetime``.

    A bare ``date`` becomes midnight UTC of that day.  A naive ``datetime``
    is assumed to already be in UTC.
    """
    if not isinstance(value, datetime):
        return datetime.combine(value, time(0, 0), tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_midnight(value: datetime | date) -> datetime:
    """Return 00:00 UTC on the UTC calendar day containing ``value``."""
    moment = ensure_utc(value)
    return datetime.combine(moment.date(), time(0, 0), tzinfo=timezone.utc)


def at_hours(day: datetime | date, hours: float) -> datetime:
    """Return ``hours`` after UTC midnight of ``day``.

    ``hours`` may be negative or exceed 24; the result rolls into the
    adjacent day.
    """
    return utc_midnight(day) + timedelta(hours=hours)


def day_of_year(value: datetime | date) -> int:
    """1-based day of year of the UTC calendar day containing ``value``."""
    return ensure_utc(value).timetuple().tm_yday


def solar_hour(moment: datetime, longitude: float) -> float:
    """Approximate local solar hour in ``[0, 24)`` for ``moment`` at ``longitude``."""
    utc = ensure_utc(moment)
    hours = utc.hour + utc.minute / 60.0 + utc.second / 3600.0
    return (hours + longitude / 15.0) % 24.0


def minutes_between(start: datetime, end: datetime) -> float:
    """Signed minutes from ``start`` to ``end``."""
    return (end - start).total_seconds() / 60.0
