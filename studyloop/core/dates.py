"""
Calendar helpers.

Datetimes are interpreted in the learner's local zone exactly as given;
"today" is the calendar date of the supplied ``now``.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600


def start_of_day(value: date | datetime) -> date:
    """Return the calendar day of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def gap_days(earlier: date | datetime, later: date | datetime) -> int:
    """Whole calendar days from ``earlier`` to ``later`` (negative if reversed)."""
    return (start_of_day(later) - start_of_day(earlier)).days


def _align(moment: datetime, now: datetime) -> datetime:
    # Naive and aware datetimes cannot be subtracted; assume the naive one
    # shares the other's zone.
    if moment.tzinfo is None and now.tzinfo is not None:
        return moment.replace(tzinfo=now.tzinfo)
    if moment.tzinfo is not None and now.tzinfo is None:
        return moment.replace(tzinfo=None)
    return moment


def wall_time(moment: datetime) -> datetime:
    """Sort key comparing naive and aware datetimes by their local wall-clock time."""
    return moment.replace(tzinfo=None)


def elapsed_seconds(moment: datetime, now: datetime) -> float:
    """Seconds from ``moment`` to ``now``; negative if ``moment`` is in the future."""
    return (now - _align(moment, now)).total_seconds()


def days_since(moment: datetime, now: datetime) -> float:
    """Fractional days since ``moment``, floored at zero."""
    return max(0.0, elapsed_seconds(moment, now) / SECONDS_PER_DAY)


def hours_since(moment: datetime, now: datetime) -> float:
    """Fractional hours since ``moment``, floored at zero."""
    return max(0.0, elapsed_seconds(moment, now) / SECONDS_PER_HOUR)


def previous_day(day: date | datetime) -> date:
    return start_of_day(day) - timedelta(days=1)
