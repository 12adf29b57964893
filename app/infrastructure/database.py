"""Database configuration and session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


settings = get_settings()

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine for ``database_url``."""

    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_async_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(settings.database_url)
SessionLocal = async_sessionmaker(
    bind=engine, autoflush=False, expire_on_commit=False, class_=AsyncSession
)


async def initialize_database(bind: AsyncEngine | None = None) -> None:
    """Ensure all ORM models have corresponding database tables."""

    from app.infrastructure import models  # noqa: F401  # ensure models are imported

    target = bind or engine
    async with target.begin() as connection:
        await connection.run_sync(Base.metadata.create_all, checkfirst=True)
    logger.debug("Database schema ensured on %s", target.url)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session and close it afterwards."""

    async with SessionLocal() as session:
        yield session
