"""Persistence helpers for per-user notification channel preferences."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import NOTIFICATION_CHANNELS, NotificationPreference
from app.infrastructure.models import (
    NotificationActionModel,
    NotificationPreferenceModel,
)

logger = logging.getLogger(__name__)


class NotificationPreferenceRepository:
    """Read and upsert opt-in flags for push and email delivery."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def is_enabled(
        self,
        user_id: str,
        action_type_id: int,
        channel: str,
        contractor_id: str | None = None,
    ) -> bool:
        """Return the stored flag, defaulting to enabled when none exists.

        A contractor-scoped preference wins over the user's global one.
        """

        self._validate_channel(channel)
        candidates = [None] if contractor_id is None else [contractor_id, None]
        for scope in candidates:
            model = await self._get_model(user_id, action_type_id, channel, scope)
            if model is not None:
                return bool(model.enabled)
        return True

    async def is_enabled_for_action(
        self,
        user_id: str,
        action: str,
        channel: str,
        contractor_id: str | None = None,
    ) -> bool:
        """Resolve ``action`` by name and check the matching preference.

        Unknown action names skip the check and report the channel as enabled.
        """

        result = await self.session.execute(
            select(NotificationActionModel.action_type_id).where(
                NotificationActionModel.action == action
            )
        )
        action_type_id = result.scalar_one_or_none()
        if action_type_id is None:
            logger.warning(
                "Notification action %s not found; skipping %s preference check",
                action,
                channel,
                extra={"user_id": user_id, "event_type": action},
            )
            return True
        return await self.is_enabled(user_id, action_type_id, channel, contractor_id)

    async def set_preference(
        self, preference: NotificationPreference
    ) -> NotificationPreference:
        self._validate_channel(preference.channel)
        model = await self._get_model(
            preference.user_id,
            preference.action_type_id,
            preference.channel,
            preference.contractor_id,
        )
        if model is None:
            model = NotificationPreferenceModel(
                user_id=preference.user_id,
                action_type_id=preference.action_type_id,
                contractor_id=preference.contractor_id,
                channel=preference.channel,
            )
            self.session.add(model)
        model.enabled = preference.enabled
        await self.session.commit()
        return self._to_entity(model)

    async def list_for_user(self, user_id: str) -> Sequence[NotificationPreference]:
        result = await self.session.execute(
            select(NotificationPreferenceModel)
            .where(NotificationPreferenceModel.user_id == user_id)
            .order_by(NotificationPreferenceModel.preference_id)
        )
        return [self._to_entity(model) for model in result.scalars().all()]

    async def _get_model(
        self,
        user_id: str,
        action_type_id: int,
        channel: str,
        contractor_id: str | None,
    ) -> NotificationPreferenceModel | None:
        statement = (
            select(NotificationPreferenceModel)
            .where(NotificationPreferenceModel.user_id == user_id)
            .where(NotificationPreferenceModel.action_type_id == action_type_id)
            .where(NotificationPreferenceModel.channel == channel)
        )
        if contractor_id is None:
            statement = statement.where(NotificationPreferenceModel.contractor_id.is_(None))
        else:
            statement = statement.where(
                NotificationPreferenceModel.contractor_id == contractor_id
            )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    @staticmethod
    def _validate_channel(channel: str) -> None:
        if channel not in NOTIFICATION_CHANNELS:
            raise ValueError(f"Unsupported notification channel '{channel}'")

    @staticmethod
    def _to_entity(model: NotificationPreferenceModel) -> NotificationPreference:
        return NotificationPreference(
            user_id=model.user_id,
            action_type_id=model.action_type_id,
            channel=model.channel,
            enabled=bool(model.enabled),
            contractor_id=model.contractor_id,
        )


__all__ = ["NotificationPreferenceRepository"]
