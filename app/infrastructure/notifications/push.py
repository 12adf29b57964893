"""Push delivery to the realtime websocket channel."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from app.domain.entities import NOTIFICATION_CHANNEL_PUSH, PushPayload
from app.infrastructure.repositories import NotificationPreferenceRepository

from .manager import NotificationConnectionManager, notification_manager
from .publisher import serialize_push_payload

logger = logging.getLogger(__name__)


class PushNotificationService:
    """Deliver push payloads to the connected devices of a user."""

    def __init__(
        self,
        preferences: NotificationPreferenceRepository,
        manager: NotificationConnectionManager = notification_manager,
    ) -> None:
        self._preferences = preferences
        self._manager = manager

    async def send_push_notification(
        self,
        user_id: str,
        payload: PushPayload,
        event_name: str,
        contractor_id: str | None = None,
    ) -> bool:
        """Send ``payload`` to ``user_id`` unless their push preference is off.

        Returns ``True`` when at least one connection received the message.
        """

        enabled = await self._preferences.is_enabled_for_action(
            user_id, event_name, NOTIFICATION_CHANNEL_PUSH, contractor_id
        )
        if not enabled:
            logger.debug(
                "Push notification %s suppressed by preference for user %s",
                event_name,
                user_id,
            )
            return False

        message = serialize_push_payload(payload, event_name, contractor_id)
        delivered = await self._manager.send_to_user(user_id, message)
        if not delivered:
            logger.debug("User %s has no active push connection", user_id)
        return delivered > 0

    async def send_push_notifications(
        self, user_ids: Iterable[str | None], payload: PushPayload, event_name: str
    ) -> int:
        """Send ``payload`` to every distinct user and return how many received it."""

        sent = 0
        seen: set[str] = set()
        for user_id in user_ids:
            if not user_id or user_id in seen:
                continue
            seen.add(user_id)
            if await self.send_push_notification(user_id, payload, event_name):
                sent += 1
        return sent


__all__ = ["PushNotificationService"]
