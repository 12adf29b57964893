"""Domain entities describing notification objects and their fan-out rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

NOTIFICATION_CHANNEL_PUSH = "push"
NOTIFICATION_CHANNEL_EMAIL = "email"
NOTIFICATION_CHANNELS = (NOTIFICATION_CHANNEL_PUSH, NOTIFICATION_CHANNEL_EMAIL)


@dataclass(frozen=True)
class NotificationAction:
    """Catalog entry mapping a symbolic action name to its type identifier."""

    action_type_id: int
    action: str
    entity: str


@dataclass
class NotificationObject:
    """Record stating that an action happened to an entity."""

    notification_object_id: int | None
    action_type_id: int
    entity_id: str
    contractor_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class NotificationChange:
    """Actor attributed to a change on a notification object."""

    notification_change_id: int | None
    notification_object_id: int
    actor_id: str
    created_at: datetime | None = None


@dataclass
class Notification:
    """Per-recipient fan-out row linked to a notification object."""

    notification_id: int | None
    notification_object_id: int
    notifier_id: str
    read: bool = False
    created_at: datetime | None = None


@dataclass
class CompleteNotification:
    """Inbox view of a fan-out row joined with its object, action and actor."""

    notification_id: int
    notifier_id: str
    action: str
    entity: str
    entity_id: str
    read: bool
    created_at: datetime | None
    actor_id: str | None = None
    actor_username: str | None = None
    contractor_id: str | None = None
    contractor_name: str | None = None


@dataclass
class NotificationPreference:
    """Opt-in state of a delivery channel for one action, optionally per contractor."""

    user_id: str
    action_type_id: int
    channel: str
    enabled: bool
    contractor_id: str | None = None


@dataclass
class PushPayload:
    """Title, body and deep link delivered to a recipient's devices."""

    title: str
    body: str
    url: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "body": self.body,
            "url": self.url,
            "data": dict(self.data),
        }


__all__ = [
    "NOTIFICATION_CHANNEL_EMAIL",
    "NOTIFICATION_CHANNEL_PUSH",
    "NOTIFICATION_CHANNELS",
    "CompleteNotification",
    "Notification",
    "NotificationAction",
    "NotificationChange",
    "NotificationObject",
    "NotificationPreference",
    "PushPayload",
]
