"""Domain entities for orders and the conversation attached to them."""

from dataclasses import dataclass
from datetime import datetime

ORDER_STATUS_NOT_STARTED = "not-started"
ORDER_STATUS_IN_PROGRESS = "in-progress"
ORDER_STATUS_FULFILLED = "fulfilled"
ORDER_STATUS_CANCELLED = "cancelled"


@dataclass
class Order:
    """Work order placed by a customer, optionally with a contractor and assignee."""

    order_id: str
    customer_id: str
    title: str | None = None
    description: str | None = None
    assigned_id: str | None = None
    contractor_id: str | None = None
    status: str = ORDER_STATUS_NOT_STARTED
    kind: str | None = None
    cost: int | None = None
    created_at: datetime | None = None


@dataclass
class Message:
    """Chat message posted on an order or offer conversation."""

    message_id: str
    author: str | None
    content: str
    chat_id: str | None = None
    created_at: datetime | None = None


@dataclass
class OrderComment:
    """Comment left on an order."""

    comment_id: str
    order_id: str
    author: str
    content: str
    created_at: datetime | None = None


@dataclass
class Review:
    """Review of an order written by a user or on behalf of a contractor."""

    review_id: str
    order_id: str
    rating: float
    content: str = ""
    user_author: str | None = None
    contractor_author: str | None = None
    created_at: datetime | None = None


__all__ = [
    "ORDER_STATUS_CANCELLED",
    "ORDER_STATUS_FULFILLED",
    "ORDER_STATUS_IN_PROGRESS",
    "ORDER_STATUS_NOT_STARTED",
    "Message",
    "Order",
    "OrderComment",
    "Review",
]
