"""Use cases for reading and managing a user's notification inbox."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import (
    NOTIFICATION_CHANNELS,
    CompleteNotification,
    Notification,
    NotificationPreference,
)
from app.domain.exceptions import NotFoundError
from app.infrastructure.repositories import (
    NotificationPreferenceRepository,
    NotificationRepository,
)
from app.infrastructure.repositories.notification_repository import (
    NOTIFICATION_SCOPES,
    SCOPE_ALL,
)

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


@dataclass
class NotificationPage:
    """One page of a user's inbox with pagination metadata."""

    notifications: list[CompleteNotification]
    page: int
    page_size: int
    total_count: int
    unread_count: int
    total_pages: int = field(init=False)

    def __post_init__(self) -> None:
        self.total_pages = math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 0


async def list_notifications(
    session: AsyncSession,
    *,
    user_id: str,
    page: int = 0,
    page_size: int = DEFAULT_PAGE_SIZE,
    action: str | None = None,
    entity_id: str | None = None,
    scope: str = SCOPE_ALL,
    contractor_id: str | None = None,
) -> NotificationPage:
    """Return the requested inbox page and the unread count under the same filters."""

    if page < 0:
        raise ValueError("Page must be zero or greater")
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValueError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")
    if scope not in NOTIFICATION_SCOPES:
        raise ValueError(
            "Invalid scope filter. Must be 'individual', 'organization', or 'all'"
        )

    repository = NotificationRepository(session)
    filters = {
        "action": action,
        "entity_id": entity_id,
        "scope": scope,
        "contractor_id": contractor_id,
    }
    notifications, total = await repository.list_complete_for_user(
        user_id, page=page, page_size=page_size, **filters
    )
    unread = await repository.count_unread(user_id, **filters)
    return NotificationPage(
        notifications=notifications,
        page=page,
        page_size=page_size,
        total_count=total,
        unread_count=unread,
    )


async def list_unread_notifications(
    session: AsyncSession, *, user_id: str, limit: int = MAX_PAGE_SIZE
) -> list[CompleteNotification]:
    notifications, _ = await NotificationRepository(session).list_complete_for_user(
        user_id, page=0, page_size=limit, unread_only=True
    )
    return notifications


async def update_notification_read_state(
    session: AsyncSession, *, user_id: str, notification_id: int, read: bool
) -> Notification:
    """Mark one of the user's notifications read or unread."""

    repository = NotificationRepository(session)
    notification = await repository.get_notification_for_user(notification_id, user_id)
    if notification is None:
        raise NotFoundError("Notification not found")
    await repository.update_read_state(
        user_id, read=read, notification_ids=[notification_id]
    )
    notification.read = read
    return notification


async def update_all_read_state(
    session: AsyncSession, *, user_id: str, read: bool
) -> int:
    """Flip every notification currently in the opposite state; return the count."""

    return await NotificationRepository(session).update_read_state(
        user_id, read=read, only_with_read=not read
    )


async def acknowledge_notifications(
    session: AsyncSession, *, user_id: str, notification_ids: Sequence[int]
) -> int:
    return await NotificationRepository(session).update_read_state(
        user_id, read=True, notification_ids=notification_ids
    )


async def delete_notification(
    session: AsyncSession, *, user_id: str, notification_id: int
) -> None:
    repository = NotificationRepository(session)
    if await repository.get_notification_for_user(notification_id, user_id) is None:
        raise NotFoundError("Notification not found")
    await repository.delete_for_user(user_id, [notification_id])


async def delete_notifications(
    session: AsyncSession,
    *,
    user_id: str,
    notification_ids: Sequence[int] | None = None,
) -> int:
    """Delete the listed notifications, or all of the user's when none are listed."""

    ids = list(notification_ids or [])
    return await NotificationRepository(session).delete_for_user(user_id, ids or None)


async def set_notification_preference(
    session: AsyncSession,
    *,
    user_id: str,
    action: str,
    channel: str,
    enabled: bool,
    contractor_id: str | None = None,
) -> NotificationPreference:
    if channel not in NOTIFICATION_CHANNELS:
        raise ValueError(f"Unsupported notification channel '{channel}'")
    notification_action = await NotificationRepository(
        session
    ).get_notification_action_by_name(action)
    return await NotificationPreferenceRepository(session).set_preference(
        NotificationPreference(
            user_id=user_id,
            action_type_id=notification_action.action_type_id,
            channel=channel,
            enabled=enabled,
            contractor_id=contractor_id,
        )
    )


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "NotificationPage",
    "acknowledge_notifications",
    "delete_notification",
    "delete_notifications",
    "list_notifications",
    "list_unread_notifications",
    "set_notification_preference",
    "update_all_read_state",
    "update_notification_read_state",
]
