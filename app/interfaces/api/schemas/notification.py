"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class NotificationRead(BaseModel):
    """Representation of an inbox notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    notification_id: int
    action: str
    entity: str
    entity_id: str
    read: bool
    timestamp: datetime | None = None
    actor_id: str | None = None
    actor_username: str | None = None
    contractor_id: str | None = None
    contractor_name: str | None = None


class NotificationPagination(BaseModel):
    current_page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next: bool
    has_previous: bool


class NotificationPageRead(BaseModel):
    """One page of the inbox with pagination metadata and the unread count."""

    notifications: list[NotificationRead]
    pagination: NotificationPagination
    unread_count: int


class NotificationReadUpdate(BaseModel):
    read: bool


class NotificationBulkDelete(BaseModel):
    """Identifiers to delete; an empty or missing list deletes every notification."""

    notification_ids: list[int] | None = Field(default=None)

    def unique_ids(self) -> list[int]:
        """Return the identifiers without duplicates preserving order."""

        unique: list[int] = []
        seen: set[int] = set()
        for notification_id in self.notification_ids or []:
            if notification_id in seen:
                continue
            seen.add(notification_id)
            unique.append(notification_id)
        return unique


class NotificationBulkResult(BaseModel):
    message: str
    affected_count: int


class NotificationPreferenceUpdate(BaseModel):
    action: str = Field(..., min_length=1, max_length=64)
    channel: Literal["push", "email"]
    enabled: bool
    contractor_id: str | None = None


class NotificationPreferenceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    action_type_id: int
    channel: str
    enabled: bool
    contractor_id: str | None = None


__all__ = [
    "NotificationBulkDelete",
    "NotificationBulkResult",
    "NotificationPageRead",
    "NotificationPagination",
    "NotificationPreferenceRead",
    "NotificationPreferenceUpdate",
    "NotificationRead",
    "NotificationReadUpdate",
]
