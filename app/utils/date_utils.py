"""Calendar arithmetic for renewal and reminder dates.

All helpers work on timezone-aware UTC datetimes. Naive datetimes (as returned
by SQLite) are treated as UTC, and plain dates as midnight UTC.
"""

from datetime import date, datetime, time, timezone
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from app.models.subscription_enums import SubscriptionFrequency

DateLike = Union[date, datetime]

_RENEWAL_PERIODS: dict[SubscriptionFrequency, relativedelta] = {
    SubscriptionFrequency.DAILY: relativedelta(days=1),
    SubscriptionFrequency.WEEKLY: relativedelta(weeks=1),
    SubscriptionFrequency.MONTHLY: relativedelta(months=1),
    SubscriptionFrequency.YEARLY: relativedelta(years=1),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_utc(value: DateLike) -> datetime:
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_renewal(start_date: DateLike, frequency: Union[SubscriptionFrequency, str, None]) -> datetime:
    """Return the renewal instant one billing period after ``start_date``.

    Month and year steps clamp to the last valid day (Jan 31 -> Feb 28/29).
    Unknown frequencies fall back to the monthly rule.
    """
    try:
        period = _RENEWAL_PERIODS[SubscriptionFrequency(frequency)]
    except ValueError:
        period = _RENEWAL_PERIODS[SubscriptionFrequency.MONTHLY]
    return coerce_utc(start_date) + period


def days_remaining(target: DateLike, now: Optional[DateLike] = None) -> int:
    """Whole days until ``target``; zero once ``now`` is at or past it."""
    target_at = coerce_utc(target)
    now_at = coerce_utc(now) if now is not None else utcnow()
    if now_at >= target_at:
        return 0
    return (target_at - now_at).days


def is_same_day(first: DateLike, second: DateLike) -> bool:
    return coerce_utc(first).date() == coerce_utc(second).date()


def is_date_in_range(value: DateLike, start: DateLike, end: DateLike) -> bool:
    return coerce_utc(start) <= coerce_utc(value) <= coerce_utc(end)


def format_date(value: DateLike) -> str:
    """Human-readable form, e.g. ``Mar 10, 2024``."""
    moment = coerce_utc(value)
    return f"{moment:%b} {moment.day}, {moment.year}"
