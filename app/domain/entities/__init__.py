"""Domain entities exposed by the application."""

from .admin_alert import AdminAlert, AlertTargetType
from .contractor import (
    CONTRACTOR_PERMISSIONS,
    PERMISSION_MANAGE_INVITES,
    PERMISSION_MANAGE_MARKET,
    PERMISSION_MANAGE_ORDERS,
    PERMISSION_MANAGE_ROLES,
    Contractor,
    ContractorInvite,
)
from .market import (
    MarketBid,
    MarketListing,
    MarketListingComplete,
    MarketListingDetails,
    MarketOffer,
)
from .notification import (
    NOTIFICATION_CHANNEL_EMAIL,
    NOTIFICATION_CHANNEL_PUSH,
    NOTIFICATION_CHANNELS,
    CompleteNotification,
    Notification,
    NotificationAction,
    NotificationChange,
    NotificationObject,
    NotificationPreference,
    PushPayload,
)
from .offer import OfferSession
from .order import (
    ORDER_STATUS_CANCELLED,
    ORDER_STATUS_FULFILLED,
    ORDER_STATUS_IN_PROGRESS,
    ORDER_STATUS_NOT_STARTED,
    Message,
    Order,
    OrderComment,
    Review,
)
from .user import USER_ROLE_ADMIN, USER_ROLE_USER, User
from .webhook import Webhook

__all__ = [
    "AdminAlert",
    "AlertTargetType",
    "CONTRACTOR_PERMISSIONS",
    "PERMISSION_MANAGE_INVITES",
    "PERMISSION_MANAGE_MARKET",
    "PERMISSION_MANAGE_ORDERS",
    "PERMISSION_MANAGE_ROLES",
    "Contractor",
    "ContractorInvite",
    "MarketBid",
    "MarketListing",
    "MarketListingComplete",
    "MarketListingDetails",
    "MarketOffer",
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
    "OfferSession",
    "ORDER_STATUS_CANCELLED",
    "ORDER_STATUS_FULFILLED",
    "ORDER_STATUS_IN_PROGRESS",
    "ORDER_STATUS_NOT_STARTED",
    "Message",
    "Order",
    "OrderComment",
    "Review",
    "USER_ROLE_ADMIN",
    "USER_ROLE_USER",
    "User",
    "Webhook",
]
