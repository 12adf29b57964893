"""Catalog of notification events and the payloads they produce."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass, fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import (
    AdminAlert,
    ContractorInvite,
    MarketBid,
    MarketListingComplete,
    MarketOffer,
    Message,
    OfferSession,
    Order,
    OrderComment,
    PushPayload,
    Review,
)
from app.domain.exceptions import NotificationConfigurationError
from app.infrastructure.repositories import NotificationRepository

_PREVIEW_LENGTH = 100


@dataclass
class NotificationContext:
    """Entities involved in one event, used to shape push and email payloads."""

    order: Order | None = None
    message: Message | None = None
    comment: OrderComment | None = None
    review: Review | None = None
    offer: OfferSession | None = None
    listing: MarketListingComplete | None = None
    bid: MarketBid | None = None
    market_offer: MarketOffer | None = None
    invite: ContractorInvite | None = None
    alert: AdminAlert | None = None
    chat_id: str | None = None
    requester_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the populated entities as JSON-friendly dictionaries."""

        data: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if value is None:
                continue
            if is_dataclass(value):
                value = asdict(value)
            data[item.name] = _jsonable(value)
        return data


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value


def _preview(text: str | None) -> str:
    text = (text or "").strip()
    if len(text) <= _PREVIEW_LENGTH:
        return text
    return text[: _PREVIEW_LENGTH - 3].rstrip() + "..."


def _order_title(context: NotificationContext) -> str:
    order = context.order
    return (order.title if order else None) or "Untitled"


def _order_url(context: NotificationContext) -> str | None:
    return f"/contract/{context.order.order_id}" if context.order else None


def _order_data(context: NotificationContext, **extra: Any) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if context.order:
        data["order_id"] = context.order.order_id
    data.update({key: value for key, value in extra.items() if value is not None})
    return data


def _offer_url(context: NotificationContext) -> str | None:
    return f"/offers/{context.offer.id}" if context.offer else None


def _listing_title(context: NotificationContext) -> str:
    listing = context.listing
    return (listing.details.title if listing else None) or "Untitled listing"


def _listing_url(context: NotificationContext) -> str | None:
    listing = context.listing
    return f"/market/{listing.listing.listing_id}" if listing else None


def _order_create(context: NotificationContext) -> PushPayload:
    return PushPayload(
        title="New Order Created",
        body=f'A new order "{_order_title(context)}" has been created',
        url=_order_url(context),
        data=_order_data(context),
    )


def _order_assigned(context: NotificationContext) -> PushPayload:
    return PushPayload(
        title="Order Assigned",
        body=f'You have been assigned to order "{_order_title(context)}"',
        url=_order_url(context),
        data=_order_data(context),
    )


def _order_message(context: NotificationContext) -> PushPayload:
    message = context.message
    return PushPayload(
        title="New Message on Order",
        body=_preview(message.content if message else None),
        url=_order_url(context),
        data=_order_data(
            context,
            chat_id=context.chat_id,
            message_id=message.message_id if message else None,
        ),
    )


def _order_comment(context: NotificationContext) -> PushPayload:
    comment = context.comment
    return PushPayload(
        title="New Comment on Order",
        body=_preview(comment.content if comment else None),
        url=_order_url(context),
        data=_order_data(context, comment_id=comment.comment_id if comment else None),
    )


def _order_review(context: NotificationContext) -> PushPayload:
    review = context.review
    rating = f"{review.rating:g}-star " if review else ""
    return PushPayload(
        title="New Review on Order",
        body=f'A {rating}review was left on order "{_order_title(context)}"',
        url=_order_url(context),
        data=_order_data(context, review_id=review.review_id if review else None),
    )


def _order_status(title: str, description: str) -> Callable[[NotificationContext], PushPayload]:
    def build(context: NotificationContext) -> PushPayload:
        return PushPayload(
            title=title,
            body=f'Order "{_order_title(context)}" {description}',
            url=_order_url(context),
            data=_order_data(
                context, status=context.order.status if context.order else None
            ),
        )

    return build


def _offer(title: str, verb: str) -> Callable[[NotificationContext], PushPayload]:
    def build(context: NotificationContext) -> PushPayload:
        offer = context.offer
        name = (offer.title if offer else None) or "Untitled"
        return PushPayload(
            title=title,
            body=f'You {verb} "{name}"',
            url=_offer_url(context),
            data={"offer_id": offer.id} if offer else {},
        )

    return build


def _offer_message(context: NotificationContext) -> PushPayload:
    message = context.message
    data: dict[str, Any] = {"offer_id": context.offer.id} if context.offer else {}
    if context.chat_id:
        data["chat_id"] = context.chat_id
    return PushPayload(
        title="New Message on Offer",
        body=_preview(message.content if message else None),
        url=_offer_url(context),
        data=data,
    )


def _market_bid(context: NotificationContext) -> PushPayload:
    amount = f"{context.bid.bid:,} " if context.bid else ""
    return PushPayload(
        title="New Bid on Market Listing",
        body=f'A bid of {amount}was placed on "{_listing_title(context)}"',
        url=_listing_url(context),
        data={"bid_id": context.bid.bid_id} if context.bid else {},
    )


def _market_offer(context: NotificationContext) -> PushPayload:
    offer = context.market_offer
    amount = f"{offer.offer:,} " if offer else ""
    return PushPayload(
        title="New Offer on Market Listing",
        body=f'An offer of {amount}was made on "{_listing_title(context)}"',
        url=_listing_url(context),
        data={"offer_id": offer.offer_id} if offer else {},
    )


def _contractor_invite(context: NotificationContext) -> PushPayload:
    invite = context.invite
    body = "You have been invited to join a contractor"
    if invite and invite.message:
        body = f"{body}: {_preview(invite.message)}"
    return PushPayload(
        title="Contractor Invitation",
        body=body,
        url="/contractors",
        data={"invite_id": invite.invite_id, "contractor_id": invite.contractor_id}
        if invite
        else {},
    )


def _admin_alert(context: NotificationContext) -> PushPayload:
    alert = context.alert
    return PushPayload(
        title=f"Admin Alert: {alert.title}" if alert else "Admin Alert",
        body=_preview(alert.content if alert else None),
        url="/admin/alerts",
        data={"alert_id": alert.alert_id} if alert else {},
    )


def _review_revision(context: NotificationContext) -> PushPayload:
    review = context.review
    return PushPayload(
        title="Review Revision Requested",
        body=f'A revision was requested for your review on order "{_order_title(context)}"',
        url=_order_url(context),
        data=_order_data(
            context,
            review_id=review.review_id if review else None,
            requester_id=context.requester_id,
        ),
    )


@dataclass(frozen=True)
class EventDefinition:
    """Static description of a notification event kind."""

    action: str
    entity: str
    build_payload: Callable[[NotificationContext], PushPayload]
    dedupe_by_entity_and_action: bool = False


class NotificationEvent(Enum):
    """Every event the notification service can publish."""

    ORDER_CREATE = EventDefinition("order_create", "orders", _order_create)
    ORDER_ASSIGNED = EventDefinition("order_assigned", "orders", _order_assigned)
    ORDER_MESSAGE = EventDefinition(
        "order_message", "orders", _order_message, dedupe_by_entity_and_action=True
    )
    ORDER_COMMENT = EventDefinition("order_comment", "order_comments", _order_comment)
    ORDER_REVIEW = EventDefinition("order_review", "order_reviews", _order_review)
    ORDER_STATUS_FULFILLED = EventDefinition(
        "order_status_fulfilled",
        "orders",
        _order_status("Order Fulfilled", "has been fulfilled"),
    )
    ORDER_STATUS_IN_PROGRESS = EventDefinition(
        "order_status_in_progress",
        "orders",
        _order_status("Order In Progress", "is now in progress"),
    )
    ORDER_STATUS_NOT_STARTED = EventDefinition(
        "order_status_not_started",
        "orders",
        _order_status("Order Status Updated", "was moved back to not started"),
    )
    ORDER_STATUS_CANCELLED = EventDefinition(
        "order_status_cancelled",
        "orders",
        _order_status("Order Cancelled", "has been cancelled"),
    )
    OFFER_CREATE = EventDefinition(
        "offer_create", "offer_sessions", _offer("New Offer Created", "received a new offer")
    )
    COUNTER_OFFER_CREATE = EventDefinition(
        "counter_offer_create",
        "offer_sessions",
        _offer("Counter Offer Received", "received a counter offer on"),
    )
    OFFER_MESSAGE = EventDefinition(
        "offer_message", "offer_sessions", _offer_message, dedupe_by_entity_and_action=True
    )
    MARKET_ITEM_BID = EventDefinition("market_item_bid", "market_bids", _market_bid)
    MARKET_ITEM_OFFER = EventDefinition("market_item_offer", "market_offers", _market_offer)
    CONTRACTOR_INVITE = EventDefinition(
        "contractor_invite", "contractor_invites", _contractor_invite
    )
    ADMIN_ALERT = EventDefinition("admin_alert", "admin_alerts", _admin_alert)
    ORDER_REVIEW_REVISION_REQUESTED = EventDefinition(
        "order_review_revision_requested", "order_reviews", _review_revision
    )

    @property
    def action(self) -> str:
        return self.value.action

    @property
    def entity(self) -> str:
        return self.value.entity

    @property
    def dedupe_by_entity_and_action(self) -> bool:
        return self.value.dedupe_by_entity_and_action

    def build_payload(self, context: NotificationContext) -> PushPayload:
        return self.value.build_payload(context)

    @classmethod
    def for_order_status(cls, status: str) -> "NotificationEvent":
        """Return the event for an order moving to ``status`` (e.g. ``in-progress``)."""

        action = f"order_status_{status.replace('-', '_')}"
        for event in cls:
            if event.action == action:
                return event
        raise NotificationConfigurationError(
            f"No notification event for order status '{status}'"
        )

    @classmethod
    def from_action(cls, action: str) -> "NotificationEvent":
        for event in cls:
            if event.action == action:
                return event
        raise NotificationConfigurationError(f"Unknown notification action '{action}'")


async def seed_notification_actions(session: AsyncSession) -> int:
    """Insert catalog rows for every event missing from ``notification_action``."""

    repository = NotificationRepository(session)
    return await repository.ensure_notification_actions(
        (event.action, event.entity) for event in NotificationEvent
    )


__all__ = [
    "EventDefinition",
    "NotificationContext",
    "NotificationEvent",
    "seed_notification_actions",
]
