"""WorkflowRun model - Checkpoint of one durable workflow run.

The durable host stores the replay journal here between suspensions, together
with the wake token that the next scheduled wake message must carry.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Enum, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from app.models.base import Base
from app.models.models import AuditMixin, UUIDMixin
from app.models.subscription_enums import enum_values


class WorkflowRunStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUSPENDED = "suspended"
    COMPLETED = "completed"
    FAILED = "failed"
    SUPERSEDED = "superseded"


TERMINAL_RUN_STATUSES = frozenset(
    {WorkflowRunStatus.COMPLETED, WorkflowRunStatus.FAILED, WorkflowRunStatus.SUPERSEDED}
)


class WorkflowRun(UUIDMixin, AuditMixin, Base):
    __tablename__ = "tbl_workflow_runs"
    __table_args__ = (Index("ix_workflow_runs_subscription_status", "subscription_id", "status"),)

    workflow: Mapped[str] = mapped_column(String(100), nullable=False)
    # Not a foreign key: runs outlive deleted subscriptions for auditing
    subscription_id: Mapped[Optional[str]] = mapped_column(String(64))
    status: Mapped[WorkflowRunStatus] = mapped_column(
        Enum(WorkflowRunStatus, name="workflow_run_status", native_enum=False, values_callable=enum_values),
        nullable=False,
        default=WorkflowRunStatus.PENDING,
    )
    outcome: Mapped[Optional[str]] = mapped_column(String(32))
    # JSON text: request payload, replay journal and final result
    payload: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    journal: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    result: Mapped[Optional[str]] = mapped_column(Text)
    wake_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True))
    wake_token: Mapped[str] = mapped_column(String(64), nullable=False, default=lambda: uuid.uuid4().hex)
    last_error: Mapped[Optional[str]] = mapped_column(Text)
