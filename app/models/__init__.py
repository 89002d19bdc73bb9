from app.models.base import Base
from app.models.models import Notification, NotificationChannel, User
from app.models.subscription import Subscription
from app.models.subscription_enums import (
    Currency,
    SubscriptionCategory,
    SubscriptionFrequency,
    SubscriptionStatus,
    UserRole,
)
from app.models.workflow_run import TERMINAL_RUN_STATUSES, WorkflowRun, WorkflowRunStatus

__all__ = [
    "Base",
    "Currency",
    "Notification",
    "NotificationChannel",
    "Subscription",
    "SubscriptionCategory",
    "SubscriptionFrequency",
    "SubscriptionStatus",
    "TERMINAL_RUN_STATUSES",
    "User",
    "UserRole",
    "WorkflowRun",
    "WorkflowRunStatus",
]
