"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager, notification_manager
from .publisher import serialize_notification, serialize_push_payload
from .push import PushNotificationService

__all__ = [
    "NotificationConnectionManager",
    "notification_manager",
    "PushNotificationService",
    "serialize_notification",
    "serialize_push_payload",
]
