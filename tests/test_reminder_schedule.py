from datetime import datetime, timezone

from app.workflows.schedule import (
    DEFAULT_LEAD_TIMES,
    ReminderScheduleCalculator,
    calculate_reminder_dates,
    reminder_label,
)

UTC = timezone.utc


def test_default_schedule_for_renewal_date():
    schedule = calculate_reminder_dates(datetime(2024, 3, 10, tzinfo=UTC))

    assert [r.days_before for r in schedule] == [7, 5, 2, 1]
    assert [r.fire_at.date().isoformat() for r in schedule] == [
        "2024-03-03",
        "2024-03-05",
        "2024-03-08",
        "2024-03-09",
    ]
    assert [r.label for r in schedule] == [
        "7 days before reminder",
        "5 days before reminder",
        "2 days before reminder",
        "1 days before reminder",
    ]


def test_schedule_keeps_time_of_day_and_crosses_month_boundary():
    schedule = calculate_reminder_dates(datetime(2024, 3, 2, 15, 45, tzinfo=UTC))

    assert schedule[0].fire_at == datetime(2024, 2, 24, 15, 45, tzinfo=UTC)
    assert schedule[-1].fire_at == datetime(2024, 3, 1, 15, 45, tzinfo=UTC)


def test_schedule_is_repeatable():
    calculator = ReminderScheduleCalculator()
    renewal = datetime(2024, 3, 10, tzinfo=UTC)

    assert calculator.schedule(renewal) == calculator.schedule(renewal)
    assert calculator.lead_times == DEFAULT_LEAD_TIMES


def test_custom_lead_times_are_frozen_at_construction():
    lead_times = [14, 3]
    calculator = ReminderScheduleCalculator(lead_times)
    lead_times.append(1)

    schedule = calculator.schedule(datetime(2024, 3, 20, tzinfo=UTC))
    assert [r.days_before for r in schedule] == [14, 3]
    assert schedule[0].fire_at == datetime(2024, 3, 6, tzinfo=UTC)


def test_reminder_label():
    assert reminder_label(7) == "7 days before reminder"
