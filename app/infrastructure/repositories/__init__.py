"""Repository implementations for infrastructure layer."""

from .contractor_repository import ContractorRepository
from .notification_preference_repository import NotificationPreferenceRepository
from .notification_repository import NotificationRepository
from .order_repository import OrderRepository
from .recipient_directory import RecipientDirectory
from .user_repository import UserRepository
from .webhook_repository import WebhookRepository

__all__ = [
    "ContractorRepository",
    "NotificationPreferenceRepository",
    "NotificationRepository",
    "OrderRepository",
    "RecipientDirectory",
    "UserRepository",
    "WebhookRepository",
]
