"""Types and collaborator interfaces used by the reminder workflow."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict, field_validator

from app.models.subscription_enums import SubscriptionFrequency, SubscriptionStatus
from app.utils.date_utils import coerce_utc


class SubscriptionSnapshot(BaseModel):
    """Read-only copy of a subscription plus owner contact details.

    Serialized with ``model_dump(mode="json")`` into the run journal.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None
    name: str
    price: Decimal
    currency: str
    frequency: SubscriptionFrequency
    status: SubscriptionStatus
    payment_method: Optional[str] = None
    renewal_date: datetime

    @field_validator("renewal_date")
    @classmethod
    def _renewal_in_utc(cls, value: datetime) -> datetime:
        return coerce_utc(value)

    @property
    def is_active(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE


class SubscriptionStore(Protocol):
    async def find_by_id(self, subscription_id: str) -> Optional[SubscriptionSnapshot]:
        ...

    async def update_status(self, subscription_id: str, status: SubscriptionStatus) -> None:
        ...


class NotificationSender(Protocol):
    async def send(self, to: str, kind: str, context: SubscriptionSnapshot) -> bool:
        """Deliver one templated message. Returns False or raises on failure."""
        ...
