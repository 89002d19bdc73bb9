import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_default_lead_days():
    assert Settings(_env_file=None).reminder_lead_days == (7, 5, 2, 1)


@pytest.mark.parametrize("raw, expected", [("14,3,1", (14, 3, 1)), ("[10, 2]", (10, 2)), ([3], (3,))])
def test_lead_days_accept_csv_json_and_lists(raw, expected):
    assert Settings(_env_file=None, REMINDER_LEAD_DAYS=raw).reminder_lead_days == expected


def test_lead_days_from_environment(monkeypatch):
    monkeypatch.setenv("REMINDER_LEAD_DAYS", "3,1")
    assert Settings(_env_file=None).reminder_lead_days == (3, 1)


@pytest.mark.parametrize("raw", ["", "7,7", "0,1", "-2"])
def test_invalid_lead_days_are_rejected(raw):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, REMINDER_LEAD_DAYS=raw)
