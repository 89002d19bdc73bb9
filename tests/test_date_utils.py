from datetime import date, datetime, timedelta, timezone

import pytest

from app.models.subscription_enums import SubscriptionFrequency
from app.utils.date_utils import (
    coerce_utc,
    days_remaining,
    format_date,
    is_date_in_range,
    is_same_day,
    next_renewal,
)

UTC = timezone.utc


@pytest.mark.parametrize("frequency", list(SubscriptionFrequency))
def test_next_renewal_is_strictly_after_start(frequency):
    start = datetime(2024, 3, 10, 8, 30, tzinfo=UTC)
    assert next_renewal(start, frequency) > start


@pytest.mark.parametrize(
    "frequency, expected",
    [
        (SubscriptionFrequency.DAILY, datetime(2024, 3, 11, tzinfo=UTC)),
        (SubscriptionFrequency.WEEKLY, datetime(2024, 3, 17, tzinfo=UTC)),
        (SubscriptionFrequency.MONTHLY, datetime(2024, 4, 10, tzinfo=UTC)),
        (SubscriptionFrequency.YEARLY, datetime(2025, 3, 10, tzinfo=UTC)),
    ],
)
def test_next_renewal_steps_one_period(frequency, expected):
    assert next_renewal(datetime(2024, 3, 10, tzinfo=UTC), frequency) == expected


def test_monthly_renewal_clamps_to_end_of_month():
    assert next_renewal(datetime(2024, 1, 31, tzinfo=UTC), "monthly") == datetime(2024, 2, 29, tzinfo=UTC)
    assert next_renewal(datetime(2023, 1, 31, tzinfo=UTC), "monthly") == datetime(2023, 2, 28, tzinfo=UTC)


def test_yearly_renewal_from_leap_day():
    assert next_renewal(datetime(2024, 2, 29, tzinfo=UTC), "yearly") == datetime(2025, 2, 28, tzinfo=UTC)


@pytest.mark.parametrize("frequency", ["fortnightly", None, ""])
def test_unknown_frequency_falls_back_to_monthly(frequency):
    assert next_renewal(datetime(2024, 3, 10, tzinfo=UTC), frequency) == datetime(2024, 4, 10, tzinfo=UTC)


def test_plain_dates_and_naive_datetimes_are_utc():
    assert coerce_utc(date(2024, 3, 10)) == datetime(2024, 3, 10, tzinfo=UTC)
    assert coerce_utc(datetime(2024, 3, 10, 12)) == datetime(2024, 3, 10, 12, tzinfo=UTC)

    plus_two = timezone(timedelta(hours=2))
    assert coerce_utc(datetime(2024, 3, 10, 1, tzinfo=plus_two)) == datetime(2024, 3, 9, 23, tzinfo=UTC)


def test_days_remaining():
    target = datetime(2024, 3, 10, tzinfo=UTC)
    assert days_remaining(target, now=datetime(2024, 3, 3, tzinfo=UTC)) == 7
    assert days_remaining(target, now=datetime(2024, 3, 8, 12, tzinfo=UTC)) == 1
    assert days_remaining(target, now=target) == 0
    assert days_remaining(target, now=datetime(2024, 3, 12, tzinfo=UTC)) == 0


def test_same_day_compares_utc_calendar_dates():
    assert is_same_day(datetime(2024, 3, 8, 0, 1, tzinfo=UTC), datetime(2024, 3, 8, 23, 59, tzinfo=UTC))
    assert not is_same_day(datetime(2024, 3, 8, 23, 59, tzinfo=UTC), datetime(2024, 3, 9, tzinfo=UTC))


def test_date_range_is_inclusive():
    start = datetime(2024, 3, 1, tzinfo=UTC)
    end = datetime(2024, 3, 8, tzinfo=UTC)
    assert is_date_in_range(start, start, end)
    assert is_date_in_range(end, start, end)
    assert not is_date_in_range(end + timedelta(seconds=1), start, end)


def test_format_date():
    assert format_date(datetime(2024, 3, 10, 18, tzinfo=UTC)) == "Mar 10, 2024"
    assert format_date(date(2024, 12, 1)) == "Dec 1, 2024"
