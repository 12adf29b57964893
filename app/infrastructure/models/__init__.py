"""ORM models used by the application infrastructure."""

from .contractor import ContractorMemberRoleModel, ContractorModel, ContractorRoleModel
from .notification import (
    NotificationActionModel,
    NotificationChangeModel,
    NotificationModel,
    NotificationObjectModel,
    NotificationPreferenceModel,
)
from .order import ChatModel, OrderModel
from .user import UserModel
from .webhook import WebhookModel

__all__ = [
    "ChatModel",
    "ContractorMemberRoleModel",
    "ContractorModel",
    "ContractorRoleModel",
    "NotificationActionModel",
    "NotificationChangeModel",
    "NotificationModel",
    "NotificationObjectModel",
    "NotificationPreferenceModel",
    "OrderModel",
    "UserModel",
    "WebhookModel",
]
