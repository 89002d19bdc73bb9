"""Repository layer for subscription-related database operations.

This module contains ONLY database access logic - no business rules.
Repository functions fetch data from the database and return raw models or primitive values.

``SqlSubscriptionStore`` adapts the repository to the store interface used by
the reminder workflow: it opens its own session per call and returns
read-only snapshots.
"""

import uuid
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.models.subscription import Subscription
from app.models.subscription_enums import SubscriptionCategory, SubscriptionStatus
from app.utils.exceptions import StoreUnavailableException
from app.workflows.contracts import SubscriptionSnapshot


def parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class SubscriptionRepository:
    """Repository for subscription database operations."""

    @staticmethod
    async def get_by_id(
        db: AsyncSession, subscription_id: uuid.UUID, with_owner: bool = False
    ) -> Optional[Subscription]:
        """
        Fetch a subscription by primary key.

        Args:
            db: Database session
            subscription_id: ID of the subscription to fetch
            with_owner: Eagerly load the owning user (name and email)

        Returns:
            Subscription if found, None otherwise
        """
        query = select(Subscription).where(Subscription.id == subscription_id)
        if with_owner:
            query = query.options(selectinload(Subscription.user))
        result = await db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_subscriptions(
        db: AsyncSession,
        user_id: Optional[uuid.UUID] = None,
        status: Optional[SubscriptionStatus] = None,
        category: Optional[SubscriptionCategory] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[Sequence[Subscription], int]:
        """
        List subscriptions, newest first, with optional filters.

        Returns:
            Tuple of (page of subscriptions, total matching count)
        """
        filters = []
        if user_id is not None:
            filters.append(Subscription.user_id == user_id)
        if status is not None:
            filters.append(Subscription.status == status)
        if category is not None:
            filters.append(Subscription.category == category)

        total = await db.scalar(select(func.count()).select_from(Subscription).where(*filters))

        query = select(Subscription).where(*filters).order_by(Subscription.created_date.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query)
        return result.scalars().all(), int(total or 0)

    @staticmethod
    async def list_upcoming_renewals(
        db: AsyncSession, user_id: uuid.UUID, start: datetime, end: datetime
    ) -> Sequence[Subscription]:
        """Active subscriptions of a user renewing within [start, end], soonest first."""
        result = await db.execute(
            select(Subscription)
            .where(
                Subscription.user_id == user_id,
                Subscription.status == SubscriptionStatus.ACTIVE,
                Subscription.renewal_date >= start,
                Subscription.renewal_date <= end,
            )
            .order_by(Subscription.renewal_date.asc())
        )
        return result.scalars().all()

    @staticmethod
    async def set_status(db: AsyncSession, subscription_id: uuid.UUID, status: SubscriptionStatus) -> bool:
        """Single-row status write. Returns False when no row matched."""
        result = await db.execute(
            update(Subscription).where(Subscription.id == subscription_id).values(status=status)
        )
        return bool(result.rowcount)

    @staticmethod
    async def delete_for_user(db: AsyncSession, user_id: uuid.UUID) -> list[uuid.UUID]:
        """Delete every subscription of a user without committing. Returns the deleted ids."""
        result = await db.execute(select(Subscription.id).where(Subscription.user_id == user_id))
        subscription_ids = list(result.scalars().all())
        if subscription_ids:
            await db.execute(delete(Subscription).where(Subscription.user_id == user_id))
        return subscription_ids


def to_snapshot(subscription: Subscription) -> SubscriptionSnapshot:
    owner = subscription.user
    return SubscriptionSnapshot(
        id=str(subscription.id),
        user_id=str(subscription.user_id),
        owner_name=owner.name if owner else None,
        owner_email=owner.email if owner else None,
        name=subscription.name,
        price=subscription.price,
        currency=subscription.currency.value,
        frequency=subscription.frequency,
        status=subscription.status,
        payment_method=subscription.payment_method,
        renewal_date=subscription.renewal_date,
    )


class SqlSubscriptionStore:
    """Subscription store backed by the application database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_by_id(self, subscription_id: str) -> Optional[SubscriptionSnapshot]:
        key = parse_uuid(subscription_id)
        if key is None:
            return None
        try:
            async with self._session_factory() as db:
                subscription = await SubscriptionRepository.get_by_id(db, key, with_owner=True)
                return to_snapshot(subscription) if subscription is not None else None
        except SQLAlchemyError as exc:
            raise StoreUnavailableException(details={"subscription_id": subscription_id}) from exc

    async def update_status(self, subscription_id: str, status: SubscriptionStatus) -> None:
        key = parse_uuid(subscription_id)
        if key is None:
            return
        try:
            async with self._session_factory() as db:
                await SubscriptionRepository.set_status(db, key, status)
                await db.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailableException(details={"subscription_id": subscription_id}) from exc
