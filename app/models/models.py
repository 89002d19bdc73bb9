from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from app.models.base import Base
from app.models.subscription_enums import UserRole, enum_values

if TYPE_CHECKING:
    from app.models.subscription import Subscription


class UUIDMixin:
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)


class AuditMixin:
    """Audit fields shared by all tables: created_date, updated_date"""
    created_date: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_date: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True), onupdate=func.now()
    )

    @property
    def created_at(self) -> datetime:
        return self.created_date

    @property
    def updated_at(self) -> Optional[datetime]:
        return self.updated_date


class NotificationChannel(str, enum.Enum):
    IN_APP = "in_app"
    EMAIL = "email"
    PUSH = "push"


class User(UUIDMixin, AuditMixin, Base):
    __tablename__ = "tbl_users"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    # Stored lower-cased; uniqueness is enforced on the normalized value
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", native_enum=False, values_callable=enum_values),
        nullable=False,
        default=UserRole.USER,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))
    last_login_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True))

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    subscriptions: Mapped[list["Subscription"]] = relationship(
        "Subscription", back_populates="user", cascade="all, delete-orphan"
    )
    notifications: Mapped[list["Notification"]] = relationship(
        "Notification", back_populates="user", cascade="all, delete-orphan"
    )


class Notification(UUIDMixin, AuditMixin, Base):
    """Outgoing notification record.

    Email-channel rows act as an outbox; a mail relay outside this service picks
    them up and delivers them to ``recipient``.
    """
    __tablename__ = "tbl_notifications"
    __table_args__ = (
        Index(
            "ix_notifications_user_unread",
            "user_id",
            postgresql_where=text("read_at IS NULL"),
        ),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("tbl_users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String, nullable=False)
    channel: Mapped[NotificationChannel] = mapped_column(
        Enum(NotificationChannel, name="notification_channel", native_enum=False, values_callable=enum_values),
        nullable=False,
        default=NotificationChannel.IN_APP,
    )
    recipient: Mapped[Optional[str]] = mapped_column(String(255))
    title: Mapped[str] = mapped_column(String, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    # JSON serialized by the service layer
    data: Mapped[Optional[str]] = mapped_column(Text)
    read_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True))

    user: Mapped[User] = relationship("User", back_populates="notifications")
