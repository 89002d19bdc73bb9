"""Seed database with demo users and subscriptions."""

import asyncio
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import dispose_engine, get_sessionmaker
from app.core.security import hash_password
from app.models.models import User
from app.models.subscription import Subscription
from app.models.subscription_enums import (
    Currency,
    SubscriptionCategory,
    SubscriptionFrequency,
    SubscriptionStatus,
    UserRole,
)
from app.utils.date_utils import next_renewal, utcnow


async def seed_user(session: AsyncSession, name: str, email: str, password: str, role: UserRole) -> User:
    result = await session.execute(select(User).where(User.email == email))
    existing_user = result.scalar_one_or_none()
    if existing_user:
        print(f"✓ User already exists: {email}")
        return existing_user

    user = User(name=name, email=email, password_hash=hash_password(password), role=role)
    session.add(user)
    await session.flush()
    print(f"✓ Created user: {email} (password: {password})")
    return user


async def seed_demo_subscriptions(session: AsyncSession, user: User) -> None:
    """Subscriptions renewing at different distances from today."""
    result = await session.execute(select(Subscription).where(Subscription.user_id == user.id))
    if result.scalars().first() is not None:
        print(f"✓ Demo subscriptions already exist for {user.email}")
        return

    now = utcnow()
    subscriptions_data = [
        ("Netflix Premium", Decimal("15.99"), SubscriptionFrequency.MONTHLY, SubscriptionCategory.ENTERTAINMENT, 25),
        ("The Athletic", Decimal("7.99"), SubscriptionFrequency.MONTHLY, SubscriptionCategory.SPORTS, 4),
        ("Financial Times", Decimal("349.00"), SubscriptionFrequency.YEARLY, SubscriptionCategory.NEWS, 200),
    ]
    for name, price, frequency, category, days_into_cycle in subscriptions_data:
        start_date = now - timedelta(days=days_into_cycle)
        session.add(
            Subscription(
                user_id=user.id,
                name=name,
                price=price,
                currency=Currency.USD,
                frequency=frequency,
                category=category,
                payment_method="Visa ending 4242",
                status=SubscriptionStatus.ACTIVE,
                start_date=start_date,
                renewal_date=next_renewal(start_date, frequency),
            )
        )
        print(f"✓ Created subscription: {name}")


async def main() -> None:
    """Run all seed operations.

    Reminder runs are not started here; trigger them through
    ``POST /workflows/subscriptions/reminder`` once the worker is up.
    """
    print("Seeding database...")

    async with get_sessionmaker()() as session:
        await seed_user(session, "Admin User", "admin@subdub.dev", "admin123456", UserRole.ADMIN)
        demo_user = await seed_user(session, "Demo User", "demo@subdub.dev", "demo123456", UserRole.USER)
        await seed_demo_subscriptions(session, demo_user)
        await session.commit()

    await dispose_engine()

    print("Database seeding completed!")


if __name__ == "__main__":
    asyncio.run(main())
