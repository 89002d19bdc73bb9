from __future__ import annotations

from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

_engine: Optional[AsyncEngine] = None
_SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


def _ensure_async_url(url: str) -> str:
	"""Ensure the SQLAlchemy URL uses an async driver.

	Handles common provider formats like:
	- postgresql://... and postgres://...
	- postgresql+psycopg://... (or +psycopg2)
	- sqlite:///... (local development)

	Returns the URL unchanged if it already names an async driver.
	"""
	if url.startswith("postgresql+asyncpg://") or url.startswith("sqlite+aiosqlite://"):
		return url

	if url.startswith("postgres://"):
		return url.replace("postgres://", "postgresql+asyncpg://", 1)
	if url.startswith("postgresql://"):
		return url.replace("postgresql://", "postgresql+asyncpg://", 1)
	if url.startswith("postgresql+psycopg2://"):
		return url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
	if url.startswith("postgresql+psycopg://"):
		return url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)

	if url.startswith("sqlite://"):
		return url.replace("sqlite://", "sqlite+aiosqlite://", 1)

	return url


def init_engine_and_session() -> None:
	global _engine, _SessionLocal
	if _engine is not None:
		return
	if not settings.DATABASE_URL:
		raise RuntimeError("DATABASE_URL is not configured. Set it in the environment or .env file.")
	database_url = _ensure_async_url(settings.DATABASE_URL)
	_engine = create_async_engine(database_url, pool_pre_ping=True, future=True)
	_SessionLocal = async_sessionmaker(bind=_engine, expire_on_commit=False)


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
	"""Session factory for code running outside a request (workflow runs, worker)."""
	if _SessionLocal is None:
		init_engine_and_session()
	assert _SessionLocal is not None
	return _SessionLocal


async def get_db() -> AsyncGenerator[AsyncSession, None]:
	async with get_sessionmaker()() as session:
		yield session


async def dispose_engine() -> None:
	global _engine, _SessionLocal
	if _engine is not None:
		await _engine.dispose()
	_engine = None
	_SessionLocal = None
