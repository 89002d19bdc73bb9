"""Subscription model - A recurring service a user pays for.

This module contains the Subscription model which links a user to a tracked
subscription and holds the billing frequency, status and renewal date that the
reminder workflow reads.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import TIMESTAMP

from app.models.base import Base
from app.models.models import AuditMixin, UUIDMixin
from app.models.subscription_enums import (
    Currency,
    SubscriptionCategory,
    SubscriptionFrequency,
    SubscriptionStatus,
    enum_values,
)

if TYPE_CHECKING:
    from app.models.models import User


class Subscription(UUIDMixin, AuditMixin, Base):
    """User subscription model.

    ``status`` is mutated from two places: the HTTP handlers (cancel, update)
    and the reminder workflow (expire). Readers must not cache it across a
    workflow suspension.
    """

    __tablename__ = "tbl_subscriptions"
    __table_args__ = (
        Index("ix_subscriptions_user", "user_id"),
        Index("ix_subscriptions_status_renewal", "status", "renewal_date"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("tbl_users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[Currency] = mapped_column(
        Enum(Currency, name="currency", native_enum=False, values_callable=enum_values),
        nullable=False,
        default=Currency.USD,
    )
    frequency: Mapped[SubscriptionFrequency] = mapped_column(
        Enum(SubscriptionFrequency, name="subscription_frequency", native_enum=False, values_callable=enum_values),
        nullable=False,
    )
    category: Mapped[SubscriptionCategory] = mapped_column(
        Enum(SubscriptionCategory, name="subscription_category", native_enum=False, values_callable=enum_values),
        nullable=False,
    )
    payment_method: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[SubscriptionStatus] = mapped_column(
        Enum(SubscriptionStatus, name="subscription_status", native_enum=False, values_callable=enum_values),
        nullable=False,
        default=SubscriptionStatus.ACTIVE,
    )
    start_date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    renewal_date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="subscriptions")
