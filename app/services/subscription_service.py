"""Service layer for subscription business logic.

This module contains ALL business rules for subscriptions.
It orchestrates repository calls and hands renewal-date changes to the
reminder workflow.

Key Concepts:
- Renewal date: Supplied by the client or derived from start date + frequency.
  A derived renewal date that is already past marks the subscription expired.
- Workflow trigger: Every create, and every update that moves the renewal
  date or sets the status back to active, starts a reminder run. The run id
  is returned to the caller.
- Cancellation: Sets the status; live reminder runs are told about it but not
  aborted. They stop when they next wake and re-read the status.

Architecture:
- Repository: Fetches raw data from database
- Service: Applies business rules and ownership checks
- Route: Orchestrates service calls and returns HTTP responses
"""

import logging
import uuid
from datetime import timedelta
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.database.subscription_repo import SubscriptionRepository, parse_uuid
from app.models.models import User
from app.models.subscription import Subscription
from app.models.subscription_enums import SubscriptionCategory, SubscriptionStatus
from app.schemas.subscriptions import SubscriptionCreate, SubscriptionUpdate
from app.utils.date_utils import coerce_utc, next_renewal, utcnow
from app.utils.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.workflows.dispatcher import TriggerDispatcher

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Service for subscription business logic."""

    @staticmethod
    def ensure_access(user: User, owner_id: uuid.UUID) -> None:
        """Only the owner or an admin may read or change a subscription."""
        if user.id != owner_id and not user.is_admin:
            raise ForbiddenException("You are not the owner of this subscription")

    @staticmethod
    async def get_subscription(db: AsyncSession, subscription_id: str, user: User) -> Subscription:
        key = parse_uuid(subscription_id)
        subscription = await SubscriptionRepository.get_by_id(db, key) if key else None
        if subscription is None:
            raise NotFoundException("Subscription not found", details={"subscription_id": subscription_id})
        SubscriptionService.ensure_access(user, subscription.user_id)
        return subscription

    @staticmethod
    async def create_subscription(
        db: AsyncSession,
        user: User,
        payload: SubscriptionCreate,
        dispatcher: TriggerDispatcher,
    ) -> tuple[Subscription, str]:
        """
        Create a subscription and start its reminder workflow.

        Args:
            db: Database session
            user: Owner of the new subscription
            payload: Validated creation request
            dispatcher: Workflow trigger entry point

        Returns:
            Tuple of (subscription, workflow run id)

        Raises:
            WorkflowTriggerException: The reminder run could not be started.
                The subscription itself is already stored at that point.
        """
        status = payload.status
        renewal_date = payload.renewal_date
        if renewal_date is None:
            renewal_date = next_renewal(payload.start_date, payload.frequency)
            if renewal_date < utcnow():
                status = SubscriptionStatus.EXPIRED

        subscription = Subscription(
            user_id=user.id,
            name=payload.name,
            price=payload.price,
            currency=payload.currency,
            frequency=payload.frequency,
            category=payload.category,
            payment_method=payload.payment_method,
            status=status,
            start_date=payload.start_date,
            renewal_date=renewal_date,
        )
        db.add(subscription)
        await db.commit()
        await db.refresh(subscription)

        run_id = await dispatcher.on_subscription_created_or_updated(str(subscription.id))
        logger.info(f"Created subscription {subscription.id} for user {user.id}, reminder run {run_id}")
        return subscription, run_id

    @staticmethod
    async def update_subscription(
        db: AsyncSession,
        subscription_id: str,
        user: User,
        payload: SubscriptionUpdate,
        dispatcher: TriggerDispatcher,
    ) -> tuple[Subscription, Optional[str]]:
        """Apply a partial update.

        Starts a new reminder run when the renewal date moves or the status goes back to active.
        """
        subscription = await SubscriptionService.get_subscription(db, subscription_id, user)

        changes = payload.model_dump(exclude_unset=True)
        new_renewal = changes.get("renewal_date")
        if new_renewal is not None and new_renewal <= coerce_utc(subscription.start_date):
            raise ValidationException("Renewal date must be after the start date")

        renewal_changed = new_renewal is not None and new_renewal != coerce_utc(subscription.renewal_date)
        reactivated = (
            changes.get("status") == SubscriptionStatus.ACTIVE and subscription.status != SubscriptionStatus.ACTIVE
        )
        for field_name, value in changes.items():
            if value is not None:
                setattr(subscription, field_name, value)

        await db.commit()
        await db.refresh(subscription)

        run_id = None
        if renewal_changed or reactivated:
            run_id = await dispatcher.on_subscription_created_or_updated(str(subscription.id))
        return subscription, run_id

    @staticmethod
    async def cancel_subscription(
        db: AsyncSession,
        subscription_id: str,
        user: User,
        dispatcher: TriggerDispatcher,
    ) -> tuple[Subscription, list[str]]:
        """Mark a subscription cancelled. Returns the live reminder runs left behind."""
        subscription = await SubscriptionService.get_subscription(db, subscription_id, user)
        if subscription.status == SubscriptionStatus.CANCELLED:
            raise ValidationException("Subscription is already cancelled")

        subscription.status = SubscriptionStatus.CANCELLED
        await db.commit()
        await db.refresh(subscription)

        live_run_ids = await dispatcher.on_subscription_cancelled(str(subscription.id))
        return subscription, live_run_ids

    @staticmethod
    async def delete_subscription(
        db: AsyncSession,
        subscription_id: str,
        user: User,
        dispatcher: TriggerDispatcher,
    ) -> None:
        subscription = await SubscriptionService.get_subscription(db, subscription_id, user)
        key = str(subscription.id)
        await db.delete(subscription)
        await db.commit()
        # Live runs find nothing on their next wake and end as not found
        await dispatcher.on_subscription_cancelled(key)

    @staticmethod
    async def list_subscriptions(
        db: AsyncSession,
        user: User,
        owner_id: Optional[uuid.UUID] = None,
        status: Optional[SubscriptionStatus] = None,
        category: Optional[SubscriptionCategory] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[Sequence[Subscription], int]:
        """
        List subscriptions visible to ``user``.

        Regular users only ever see their own. Admins see everything unless
        ``owner_id`` narrows the query.
        """
        if owner_id is not None:
            SubscriptionService.ensure_access(user, owner_id)
        elif not user.is_admin:
            owner_id = user.id

        return await SubscriptionRepository.list_subscriptions(
            db,
            user_id=owner_id,
            status=status,
            category=category,
            offset=(page - 1) * limit,
            limit=limit,
        )

    @staticmethod
    async def upcoming_renewals(db: AsyncSession, user: User) -> Sequence[Subscription]:
        """Active subscriptions of ``user`` renewing within the configured window."""
        now = utcnow()
        window_end = now + timedelta(days=settings.UPCOMING_RENEWAL_WINDOW_DAYS)
        return await SubscriptionRepository.list_upcoming_renewals(db, user.id, now, window_end)
