"""Notification service for user notifications and renewal reminders."""

import json
import logging
import uuid
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.models.models import Notification, NotificationChannel
from app.utils.date_utils import format_date
from app.utils.exceptions import NotificationDeliveryFailure
from app.workflows.contracts import SubscriptionSnapshot
from app.workflows.schedule import DEFAULT_LEAD_TIMES, reminder_label

logger = logging.getLogger(__name__)

REMINDER_NOTIFICATION_TYPE = "subscription.renewal_reminder"


def _reminder_subject(days_before: int, info: dict[str, str]) -> str:
    if days_before == 1:
        return f"Final Reminder: {info['subscription_name']} Renews Tomorrow!"
    return f"Reminder: Your {info['subscription_name']} Subscription Renews in {days_before} Days!"


def _reminder_body(info: dict[str, str]) -> str:
    return (
        f"Hello {info['user_name']},\n\n"
        f"Your {info['subscription_name']} subscription is set to renew on {info['renewal_date']} "
        f"({info['days_left']} days left).\n"
        f"Plan: {info['plan_name']}\n"
        f"Price: {info['price']}\n"
        f"Payment method: {info['payment_method']}\n\n"
        f"Manage your subscription: {info['account_settings_link']}\n"
        f"Need help? {info['support_link']}\n"
    )


REMINDER_TEMPLATES = {
    reminder_label(days): days
    for days in sorted(set(DEFAULT_LEAD_TIMES) | set(settings.reminder_lead_days), reverse=True)
}


class NotificationService:
    """Service for managing user notifications."""

    @staticmethod
    async def create_notification(
        db: AsyncSession,
        user_id: uuid.UUID,
        notification_type: str,
        title: str,
        body: str,
        data: Optional[dict[str, Any]] = None,
        channel: NotificationChannel = NotificationChannel.IN_APP,
        recipient: Optional[str] = None,
    ) -> Notification:
        """Create a notification for a user."""
        # Serialize data to TEXT for DB
        serialized = json.dumps(data, default=str) if data is not None else None

        notification = Notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            body=body,
            data=serialized,
            channel=channel,
            recipient=recipient,
        )

        db.add(notification)
        await db.commit()
        await db.refresh(notification)

        return notification

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: uuid.UUID, limit: int = 50) -> list[Notification]:
        result = await db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_date.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    @staticmethod
    def build_reminder_content(kind: str, subscription: SubscriptionSnapshot) -> tuple[str, str]:
        """Return (subject, body) for a reminder kind such as ``7 days before reminder``."""
        days_before = REMINDER_TEMPLATES.get(kind)
        if days_before is None:
            raise NotificationDeliveryFailure(f"Invalid email type: {kind}")

        client_url = settings.CLIENT_URL.rstrip("/")
        info = {
            "user_name": subscription.owner_name or "there",
            "subscription_name": subscription.name,
            "renewal_date": format_date(subscription.renewal_date),
            "days_left": str(days_before),
            "plan_name": subscription.name,
            "price": f"{subscription.currency} {subscription.price} ({subscription.frequency.value})",
            "payment_method": subscription.payment_method or "-",
            "account_settings_link": f"{client_url}/account/settings",
            "support_link": f"{client_url}/support",
        }
        return _reminder_subject(days_before, info), _reminder_body(info)


class ReminderNotificationSender:
    """Notification sender used by the reminder workflow.

    Writes an email-channel notification that the mail relay delivers.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def send(self, to: str, kind: str, context: SubscriptionSnapshot) -> bool:
        if not to:
            raise NotificationDeliveryFailure("Missing required parameters: to")

        subject, body = NotificationService.build_reminder_content(kind, context)
        try:
            async with self._session_factory() as db:
                notification = await NotificationService.create_notification(
                    db=db,
                    user_id=uuid.UUID(context.user_id),
                    notification_type=REMINDER_NOTIFICATION_TYPE,
                    title=subject,
                    body=body,
                    data={
                        "kind": kind,
                        "subscription_id": context.id,
                        "renewal_date": context.renewal_date.isoformat(),
                    },
                    channel=NotificationChannel.EMAIL,
                    recipient=to,
                )
        except SQLAlchemyError as exc:
            raise NotificationDeliveryFailure(details={"kind": kind, "to": to}) from exc

        logger.info(f"Queued '{kind}' email {notification.id} for {to}")
        return True
