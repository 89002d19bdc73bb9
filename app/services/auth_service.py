"""Authentication service for sign-up, sign-in and account management."""

import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token, hash_password, verify_password
from app.database.subscription_repo import SubscriptionRepository
from app.models.models import User
from app.models.subscription_enums import UserRole
from app.utils.date_utils import utcnow
from app.utils.exceptions import (
    ConflictException,
    DatabaseException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    @staticmethod
    async def create_user(
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Create a new user with email/password."""
        if await AuthService.get_user_by_email(db, email):
            raise ConflictException("User already exists", details={"email": email.lower()})

        user = User(
            name=name.strip(),
            email=email.lower(),
            password_hash=hash_password(password),
            role=role,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)

        return user

    @staticmethod
    async def authenticate_email(
        db: AsyncSession,
        email: str,
        password: str,
    ) -> User:
        """Authenticate user with email and password; records the login time."""
        user = await AuthService.get_user_by_email(db, email)

        if not user or not user.is_active or not verify_password(password, user.password_hash):
            raise UnauthorizedException("Invalid email or password")

        user.last_login_at = utcnow()
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        """Get user by email."""
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    def generate_token(user: User) -> tuple[str, datetime]:
        """Generate JWT token for user."""
        return create_access_token(data={"sub": str(user.id), "role": user.role.value})

    @staticmethod
    async def change_password(db: AsyncSession, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise UnauthorizedException("Current password is incorrect")

        user.password_hash = hash_password(new_password)
        await db.commit()
        logger.info(f"Password changed for user: {user.id}")

    @staticmethod
    async def update_user(
        db: AsyncSession,
        actor: User,
        user_id: uuid.UUID,
        name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
    ) -> User:
        """
        Update a user account.

        Users may change their own name and email. Only admins may update
        other accounts or change ``role`` and ``is_active``.

        Raises:
            ForbiddenException: Actor may not make this change
            NotFoundException: No such user
            ConflictException: Email belongs to another account
        """
        if actor.id != user_id and not actor.is_admin:
            raise ForbiddenException("Not authorized to update this user")
        if (role is not None or is_active is not None) and not actor.is_admin:
            raise ForbiddenException("Only admins can change role or active status")

        user = await AuthService.get_user_by_id(db, user_id)
        if user is None:
            raise NotFoundException("User not found", details={"user_id": str(user_id)})

        if email is not None:
            existing = await AuthService.get_user_by_email(db, email)
            if existing is not None and existing.id != user.id:
                raise ConflictException("Email already in use", details={"email": email.lower()})
            user.email = email.lower()
        if name is not None:
            user.name = name.strip()
        if role is not None:
            user.role = role
        if is_active is not None:
            user.is_active = is_active

        await db.commit()
        await db.refresh(user)
        logger.info(f"User updated: {user.id}")
        return user

    @staticmethod
    async def delete_user(db: AsyncSession, user_id: uuid.UUID) -> list[uuid.UUID]:
        """Delete a user and all of their subscriptions in one transaction.

        Returns the ids of the deleted subscriptions.
        """
        user = await AuthService.get_user_by_id(db, user_id)
        if user is None:
            raise NotFoundException("User not found", details={"user_id": str(user_id)})

        try:
            subscription_ids = await SubscriptionRepository.delete_for_user(db, user.id)
            await db.delete(user)
            await db.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to delete user %s", user_id)
            await db.rollback()
            raise DatabaseException("Failed to delete user", details={"user_id": str(user_id)}) from exc

        logger.info(f"User deleted: {user_id} with {len(subscription_ids)} subscriptions")
        return subscription_ids
