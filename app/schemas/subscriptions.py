"""Subscription request and response schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.subscription_enums import (
    Currency,
    SubscriptionCategory,
    SubscriptionFrequency,
    SubscriptionStatus,
)
from app.utils.date_utils import coerce_utc, utcnow


class SubscriptionCreate(BaseModel):
    """Subscription creation request.

    ``renewal_date`` is optional; when omitted it is derived from
    ``start_date`` and ``frequency``.
    """

    name: str = Field(..., min_length=2, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    currency: Currency = Currency.USD
    frequency: SubscriptionFrequency
    category: SubscriptionCategory
    payment_method: str = Field(..., min_length=1, max_length=100, alias="paymentMethod")
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    start_date: datetime = Field(..., alias="startDate")
    renewal_date: Optional[datetime] = Field(None, alias="renewalDate")

    class Config:
        populate_by_name = True

    @field_validator("name", "payment_method")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("start_date")
    @classmethod
    def _start_not_in_future(cls, value: datetime) -> datetime:
        value = coerce_utc(value)
        if value > utcnow():
            raise ValueError("Start date must be in the past")
        return value

    @field_validator("renewal_date")
    @classmethod
    def _renewal_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return coerce_utc(value) if value is not None else None

    @model_validator(mode="after")
    def _renewal_after_start(self) -> "SubscriptionCreate":
        if self.renewal_date is not None and self.renewal_date <= self.start_date:
            raise ValueError("Renewal date must be after the start date")
        return self


class SubscriptionUpdate(BaseModel):
    """Subscription update request (all fields optional)."""

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    currency: Optional[Currency] = None
    frequency: Optional[SubscriptionFrequency] = None
    category: Optional[SubscriptionCategory] = None
    payment_method: Optional[str] = Field(None, min_length=1, max_length=100, alias="paymentMethod")
    status: Optional[SubscriptionStatus] = None
    renewal_date: Optional[datetime] = Field(None, alias="renewalDate")

    class Config:
        populate_by_name = True

    @field_validator("renewal_date")
    @classmethod
    def _renewal_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return coerce_utc(value) if value is not None else None


class SubscriptionResponse(BaseModel):
    """Subscription response model."""

    id: str
    user_id: str = Field(..., alias="userId")
    name: str
    price: Decimal
    currency: Currency
    frequency: SubscriptionFrequency
    category: SubscriptionCategory
    payment_method: str = Field(..., alias="paymentMethod")
    status: SubscriptionStatus
    start_date: datetime = Field(..., alias="startDate")
    renewal_date: datetime = Field(..., alias="renewalDate")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True


def subscription_to_response(subscription) -> dict:
    return SubscriptionResponse(
        id=str(subscription.id),
        user_id=str(subscription.user_id),
        name=subscription.name,
        price=subscription.price,
        currency=subscription.currency,
        frequency=subscription.frequency,
        category=subscription.category,
        payment_method=subscription.payment_method,
        status=subscription.status,
        start_date=coerce_utc(subscription.start_date),
        renewal_date=coerce_utc(subscription.renewal_date),
        created_at=coerce_utc(subscription.created_at),
        updated_at=coerce_utc(subscription.updated_at) if subscription.updated_at else None,
    ).model_dump(mode="json", by_alias=True)
