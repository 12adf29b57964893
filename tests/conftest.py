"""Shared fixtures backed by an in-memory SQLite database."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

from app.application.use_cases.notifications import seed_notification_actions  # noqa: E402
from app.infrastructure.database import Base, initialize_database  # noqa: E402


@pytest.fixture()
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await initialize_database(engine)
    yield engine
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return async_sessionmaker(
        bind=db_engine, autoflush=False, expire_on_commit=False, class_=AsyncSession
    )


@pytest.fixture()
async def session(session_factory):
    async with session_factory() as db_session:
        await seed_notification_actions(db_session)
        yield db_session
