import json
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database.subscription_repo import SqlSubscriptionStore
from app.database.workflow_run_repo import SqlRunStore
from app.models import (
    Base,
    Notification,
    NotificationChannel,
    Subscription,
    SubscriptionCategory,
    SubscriptionFrequency,
    SubscriptionStatus,
    User,
    WorkflowRunStatus,
)
from app.services.notification_service import REMINDER_NOTIFICATION_TYPE, ReminderNotificationSender

RENEWAL = datetime(2024, 3, 10, tzinfo=timezone.utc)


async def _setup(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'stores.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    async with SessionLocal() as session:
        user = User(name="Jane", email="jane@example.com", password_hash="x")
        session.add(user)
        await session.flush()
        subscription = Subscription(
            user_id=user.id,
            name="Netflix Premium",
            price=Decimal("15.99"),
            frequency=SubscriptionFrequency.MONTHLY,
            category=SubscriptionCategory.ENTERTAINMENT,
            payment_method="Visa ending 4242",
            start_date=datetime(2024, 2, 10, tzinfo=timezone.utc),
            renewal_date=RENEWAL,
        )
        session.add(subscription)
        await session.commit()
        return engine, SessionLocal, str(subscription.id)


@pytest.mark.asyncio
async def test_subscription_store_reads_snapshot_with_owner(tmp_path):
    engine, SessionLocal, subscription_id = await _setup(tmp_path)
    store = SqlSubscriptionStore(SessionLocal)

    snapshot = await store.find_by_id(subscription_id)

    assert snapshot.owner_email == "jane@example.com"
    assert snapshot.status == SubscriptionStatus.ACTIVE
    assert snapshot.renewal_date == RENEWAL
    assert snapshot.price == Decimal("15.99")
    assert await store.find_by_id(str(uuid.uuid4())) is None
    assert await store.find_by_id("not-a-uuid") is None
    await engine.dispose()


@pytest.mark.asyncio
async def test_subscription_store_updates_status(tmp_path):
    engine, SessionLocal, subscription_id = await _setup(tmp_path)
    store = SqlSubscriptionStore(SessionLocal)

    await store.update_status(subscription_id, SubscriptionStatus.EXPIRED)

    assert (await store.find_by_id(subscription_id)).status == SubscriptionStatus.EXPIRED
    await engine.dispose()


@pytest.mark.asyncio
async def test_reminder_sender_writes_email_outbox_row(tmp_path):
    engine, SessionLocal, subscription_id = await _setup(tmp_path)
    snapshot = await SqlSubscriptionStore(SessionLocal).find_by_id(subscription_id)

    assert await ReminderNotificationSender(SessionLocal).send(
        to=snapshot.owner_email, kind="2 days before reminder", context=snapshot
    )

    async with SessionLocal() as session:
        notification = (await session.execute(select(Notification))).scalar_one()
    assert notification.type == REMINDER_NOTIFICATION_TYPE
    assert notification.channel == NotificationChannel.EMAIL
    assert notification.recipient == "jane@example.com"
    assert json.loads(notification.data)["kind"] == "2 days before reminder"
    await engine.dispose()


@pytest.mark.asyncio
async def test_run_store_checkpoint_cycle(tmp_path):
    engine, SessionLocal, subscription_id = await _setup(tmp_path)
    runs = SqlRunStore(SessionLocal)

    record = await runs.create("subscription.reminder", {"subscription_id": subscription_id}, subscription_id)
    assert record.status == WorkflowRunStatus.PENDING

    assert await runs.claim(record.id, "wrong-token") is None
    claimed = await runs.claim(record.id, record.wake_token)
    assert claimed.status == WorkflowRunStatus.RUNNING

    claimed.status = WorkflowRunStatus.SUSPENDED
    claimed.journal = {"get subscription": {"id": subscription_id}}
    claimed.wake_at = datetime(2024, 3, 3, tzinfo=timezone.utc)
    claimed.wake_token = "next-token"
    assert await runs.save(claimed, record.wake_token)

    stored = await runs.get(record.id)
    assert stored.status == WorkflowRunStatus.SUSPENDED
    assert stored.journal == {"get subscription": {"id": subscription_id}}
    assert stored.wake_at == datetime(2024, 3, 3, tzinfo=timezone.utc)
    assert [r.id for r in await runs.list_live(subscription_id)] == [record.id]

    stored.status = WorkflowRunStatus.COMPLETED
    stored.outcome = "COMPLETED"
    stored.result = {"sent": [7]}
    assert await runs.save(stored, "next-token")

    assert await runs.list_live(subscription_id) == []
    # a finished run cannot be written again
    stored.status = WorkflowRunStatus.SUSPENDED
    assert await runs.save(stored, "next-token") is False
    assert (await runs.get(record.id)).status == WorkflowRunStatus.COMPLETED
    assert await runs.claim(record.id, "next-token") is None
    assert (await runs.get(record.id)).result == {"sent": [7]}
    await engine.dispose()
