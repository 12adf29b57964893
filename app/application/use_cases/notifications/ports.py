"""Contracts of the collaborators the notification service depends on."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from app.domain.entities import (
    AlertTargetType,
    MarketBid,
    MarketListing,
    Notification,
    NotificationAction,
    NotificationChange,
    NotificationObject,
    OfferSession,
    Order,
    OrderComment,
    PushPayload,
)


@runtime_checkable
class NotificationStore(Protocol):
    async def get_notification_action_by_name(self, name: str) -> NotificationAction: ...

    async def insert_notification_objects(
        self, objects: Sequence[NotificationObject]
    ) -> list[NotificationObject]: ...

    async def get_notification_object_by_entity_and_action(
        self, entity_id: str, action_type_id: int
    ) -> NotificationObject | None: ...

    async def update_notification_object_timestamp(self, notification_object_id: int) -> None: ...

    async def insert_notification_changes(self, changes: Sequence[NotificationChange]) -> None: ...

    async def insert_notifications(
        self, notifications: Sequence[Notification]
    ) -> list[Notification]: ...

    async def get_unread_notification_by_user_and_object(
        self, user_id: str, notification_object_id: int
    ) -> Notification | None: ...


@runtime_checkable
class RecipientLookup(Protocol):
    async def get_members_with_matching_role(
        self, contractor_id: str, permissions: Mapping[str, bool]
    ) -> list[str]: ...

    async def get_order(self, order_id: str) -> Order: ...

    async def get_chat_id(
        self, *, order_id: str | None = None, session_id: str | None = None
    ) -> str | None: ...

    async def get_users_for_alert_target(
        self, target_type: AlertTargetType | str, contractor_id: str | None = None
    ) -> list[str]: ...


@runtime_checkable
class PushSender(Protocol):
    async def send_push_notification(
        self,
        user_id: str,
        payload: PushPayload,
        event_name: str,
        contractor_id: str | None = None,
    ) -> bool: ...

    async def send_push_notifications(
        self, user_ids: Iterable[str | None], payload: PushPayload, event_name: str
    ) -> int: ...


@runtime_checkable
class EmailSender(Protocol):
    async def send_notification_email(
        self,
        user_id: str,
        event_name: str,
        context: Mapping[str, Any],
        skip_queue: bool = False,
        contractor_id: str | None = None,
    ) -> bool: ...


@runtime_checkable
class WebhookSender(Protocol):
    async def send_order_webhooks(self, order: Order, action: str = "order_create") -> int: ...

    async def send_order_status_webhooks(
        self, order: Order, new_status: str, actor_id: str | None = None
    ) -> int: ...

    async def send_order_comment_webhooks(self, order: Order, comment: OrderComment) -> int: ...

    async def send_offer_webhooks(self, offer: OfferSession, kind: str = "create") -> int: ...

    async def send_bid_webhooks(self, listing: MarketListing, bid: MarketBid) -> int: ...


__all__ = [
    "EmailSender",
    "NotificationStore",
    "PushSender",
    "RecipientLookup",
    "WebhookSender",
]
