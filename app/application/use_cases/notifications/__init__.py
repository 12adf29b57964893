"""Notification fan-out, delivery and inbox use cases."""

from .catalog import NotificationContext, NotificationEvent, seed_notification_actions
from .dispatch import DeliveryOutcome, best_effort
from .inbox import (
    NotificationPage,
    acknowledge_notifications,
    delete_notification,
    delete_notifications,
    list_notifications,
    list_unread_notifications,
    set_notification_preference,
    update_all_read_state,
    update_notification_read_state,
)
from .recipients import RecipientResolver, exclude_actor
from .service import (
    OFFER_KIND_COUNTER,
    OFFER_KIND_CREATE,
    NotificationService,
    build_notification_service,
)

__all__ = [
    "DeliveryOutcome",
    "NotificationContext",
    "NotificationEvent",
    "NotificationPage",
    "NotificationService",
    "OFFER_KIND_COUNTER",
    "OFFER_KIND_CREATE",
    "RecipientResolver",
    "acknowledge_notifications",
    "best_effort",
    "build_notification_service",
    "delete_notification",
    "delete_notifications",
    "exclude_actor",
    "list_notifications",
    "list_unread_notifications",
    "seed_notification_actions",
    "set_notification_preference",
    "update_all_read_state",
    "update_notification_read_state",
]
