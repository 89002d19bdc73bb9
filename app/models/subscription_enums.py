"""Subscription-related enums.

This module contains enums used by the subscription and user models:
- SubscriptionStatus: Lifecycle status of a subscription
- SubscriptionFrequency: Billing frequency, drives renewal date arithmetic
- Currency / SubscriptionCategory: Descriptive subscription fields
- UserRole: Account role used for authorization checks
"""

import enum


class SubscriptionStatus(str, enum.Enum):
    """Status of a subscription."""

    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    TRIAL = "trial"
    PAST_DUE = "past_due"


class SubscriptionFrequency(str, enum.Enum):
    """How often a subscription renews."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Currency(str, enum.Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class SubscriptionCategory(str, enum.Enum):
    SPORTS = "sports"
    NEWS = "news"
    ENTERTAINMENT = "entertainment"
    LIFESTYLE = "lifestyle"
    TECHNOLOGY = "technology"
    FINANCE = "finance"
    POLITICS = "politics"
    OTHER = "other"


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum values (``past_due``) rather than member names (``PAST_DUE``)."""
    return [member.value for member in enum_cls]
