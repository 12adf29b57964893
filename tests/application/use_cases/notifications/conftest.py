"""In-memory collaborators for exercising the notification service."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

import anyio
import pytest

from app.application.use_cases.notifications import NotificationEvent, NotificationService
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
from app.domain.exceptions import NotFoundError, NotificationConfigurationError


class FakeStore:
    def __init__(self) -> None:
        self.actions = {
            event.action: NotificationAction(index, event.action, event.entity)
            for index, event in enumerate(NotificationEvent, start=1)
        }
        self.objects: list[NotificationObject] = []
        self.changes: list[NotificationChange] = []
        self.notifications: list[Notification] = []
        self.touched: list[int] = []

    async def get_notification_action_by_name(self, name: str) -> NotificationAction:
        try:
            return self.actions[name]
        except KeyError:
            raise NotificationConfigurationError(name) from None

    async def insert_notification_objects(
        self, objects: Sequence[NotificationObject]
    ) -> list[NotificationObject]:
        created = []
        for item in objects:
            stored = replace(item, notification_object_id=len(self.objects) + 1)
            self.objects.append(stored)
            created.append(stored)
        return created

    async def get_notification_object_by_entity_and_action(
        self, entity_id: str, action_type_id: int
    ) -> NotificationObject | None:
        for item in reversed(self.objects):
            if item.entity_id == entity_id and item.action_type_id == action_type_id:
                return item
        return None

    async def update_notification_object_timestamp(self, notification_object_id: int) -> None:
        self.touched.append(notification_object_id)

    async def insert_notification_changes(self, changes: Sequence[NotificationChange]) -> None:
        self.changes.extend(changes)

    async def insert_notifications(
        self, notifications: Sequence[Notification]
    ) -> list[Notification]:
        created = []
        for item in notifications:
            stored = replace(item, notification_id=len(self.notifications) + 1)
            self.notifications.append(stored)
            created.append(stored)
        return created

    async def get_unread_notification_by_user_and_object(
        self, user_id: str, notification_object_id: int
    ) -> Notification | None:
        for item in self.notifications:
            if (
                item.notifier_id == user_id
                and item.notification_object_id == notification_object_id
                and not item.read
            ):
                return item
        return None

    def objects_for(self, action: str) -> list[NotificationObject]:
        action_type_id = self.actions[action].action_type_id
        return [item for item in self.objects if item.action_type_id == action_type_id]

    def notifiers_for(self, action: str) -> list[str]:
        object_ids = {item.notification_object_id for item in self.objects_for(action)}
        return [
            item.notifier_id
            for item in self.notifications
            if item.notification_object_id in object_ids
        ]


@dataclass
class FakeDirectory:
    members: dict[str, list[tuple[str, dict[str, bool]]]] = field(default_factory=dict)
    orders: dict[str, Order] = field(default_factory=dict)
    chats: dict[str, str] = field(default_factory=dict)
    alert_targets: dict[str, list[str]] = field(default_factory=dict)
    chat_error: Exception | None = None

    async def get_members_with_matching_role(
        self, contractor_id: str, permissions: Mapping[str, bool]
    ) -> list[str]:
        return [
            user_id
            for user_id, flags in self.members.get(contractor_id, [])
            if all(flags.get(name, False) == value for name, value in permissions.items())
        ]

    async def get_order(self, order_id: str) -> Order:
        try:
            return self.orders[order_id]
        except KeyError:
            raise NotFoundError(order_id) from None

    async def get_chat_id(
        self, *, order_id: str | None = None, session_id: str | None = None
    ) -> str | None:
        if self.chat_error is not None:
            raise self.chat_error
        return self.chats.get(order_id or session_id or "")

    async def get_users_for_alert_target(
        self, target_type: AlertTargetType | str, contractor_id: str | None = None
    ) -> list[str]:
        key = AlertTargetType(target_type).value
        if contractor_id:
            key = f"{key}:{contractor_id}"
        return list(self.alert_targets.get(key, []))


class RecordingPush:
    def __init__(self) -> None:
        self.calls: list[tuple[str, PushPayload, str, str | None]] = []
        self.fail_for: set[str] = set()
        self.hang_for: set[str] = set()

    async def send_push_notification(
        self,
        user_id: str,
        payload: PushPayload,
        event_name: str,
        contractor_id: str | None = None,
    ) -> bool:
        self.calls.append((user_id, payload, event_name, contractor_id))
        if user_id in self.hang_for:
            await anyio.sleep(30)
        if user_id in self.fail_for:
            raise RuntimeError(f"push gateway rejected {user_id}")
        return True

    async def send_push_notifications(
        self, user_ids: Iterable[str | None], payload: PushPayload, event_name: str
    ) -> int:
        sent = 0
        for user_id in user_ids:
            if user_id and await self.send_push_notification(user_id, payload, event_name):
                sent += 1
        return sent

    @property
    def recipients(self) -> list[str]:
        return [call[0] for call in self.calls]


class RecordingEmail:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, Mapping[str, Any], bool, str | None]] = []
        self.fail_for: set[str] = set()
        self.result = True

    async def send_notification_email(
        self,
        user_id: str,
        event_name: str,
        context: Mapping[str, Any],
        skip_queue: bool = False,
        contractor_id: str | None = None,
    ) -> bool:
        self.calls.append((user_id, event_name, context, skip_queue, contractor_id))
        if user_id in self.fail_for:
            raise ConnectionError("smtp unavailable")
        return self.result

    @property
    def recipients(self) -> list[str]:
        return [call[0] for call in self.calls]


class RecordingWebhooks:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.error: Exception | None = None

    async def _record(self, name: str, *args: Any) -> int:
        self.calls.append((name, args))
        if self.error is not None:
            raise self.error
        return 1

    async def send_order_webhooks(self, order: Order, action: str = "order_create") -> int:
        return await self._record("order", order, action)

    async def send_order_status_webhooks(
        self, order: Order, new_status: str, actor_id: str | None = None
    ) -> int:
        return await self._record("order_status", order, new_status, actor_id)

    async def send_order_comment_webhooks(self, order: Order, comment: OrderComment) -> int:
        return await self._record("order_comment", order, comment)

    async def send_offer_webhooks(self, offer: OfferSession, kind: str = "create") -> int:
        return await self._record("offer", offer, kind)

    async def send_bid_webhooks(self, listing: MarketListing, bid: MarketBid) -> int:
        return await self._record("bid", listing, bid)

    @property
    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture()
def push() -> RecordingPush:
    return RecordingPush()


@pytest.fixture()
def email() -> RecordingEmail:
    return RecordingEmail()


@pytest.fixture()
def webhooks() -> RecordingWebhooks:
    return RecordingWebhooks()


@pytest.fixture()
def service(store, directory, push, email, webhooks) -> NotificationService:
    return NotificationService(store, directory, push, email, webhooks, delivery_timeout=1.0)
