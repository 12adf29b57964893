"""Persistence layer for user data."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import User
from app.infrastructure.models import UserModel
from app.utils import ensure_app_timezone


class UserRepository:
    """Provide read access to platform users."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: str) -> User | None:
        model = await self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    async def list_ids(self, *, role: str | None = None) -> list[str]:
        statement = select(UserModel.user_id)
        if role is not None:
            statement = statement.where(UserModel.role == role)
        result = await self.session.execute(statement.order_by(UserModel.user_id))
        return list(result.scalars().all())

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            user_id=model.user_id,
            username=model.username,
            display_name=model.display_name,
            email=model.email,
            email_verified=bool(model.email_verified),
            role=model.role,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["UserRepository"]
