"""Reminder instants derived from a renewal date and configured lead times."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from app.utils.date_utils import DateLike, coerce_utc

DEFAULT_LEAD_TIMES: tuple[int, ...] = (7, 5, 2, 1)


def reminder_label(days_before: int) -> str:
    return f"{days_before} days before reminder"


@dataclass(frozen=True)
class ReminderInstant:
    days_before: int
    fire_at: datetime

    @property
    def label(self) -> str:
        return reminder_label(self.days_before)


class ReminderScheduleCalculator:
    """Computes reminder instants for a renewal date.

    Lead times are frozen at construction; entries come back in the order the
    lead times were given (largest first by convention, so chronological).
    """

    def __init__(self, lead_times: Iterable[int] = DEFAULT_LEAD_TIMES):
        self._lead_times = tuple(int(days) for days in lead_times)

    @property
    def lead_times(self) -> tuple[int, ...]:
        return self._lead_times

    def schedule(self, renewal_date: DateLike) -> list[ReminderInstant]:
        renewal_at = coerce_utc(renewal_date)
        return [
            ReminderInstant(days_before=days, fire_at=renewal_at - timedelta(days=days))
            for days in self._lead_times
        ]


def calculate_reminder_dates(
    renewal_date: DateLike, lead_times: Iterable[int] = DEFAULT_LEAD_TIMES
) -> list[ReminderInstant]:
    return ReminderScheduleCalculator(lead_times).schedule(renewal_date)
