"""Notification fan-out for order, offer, market, contractor and admin events."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import replace
from typing import Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.domain.entities import (
    PERMISSION_MANAGE_ORDERS,
    AdminAlert,
    AlertTargetType,
    ContractorInvite,
    MarketBid,
    MarketListingComplete,
    MarketOffer,
    Message,
    Notification,
    NotificationAction,
    NotificationChange,
    NotificationObject,
    OfferSession,
    Order,
    OrderComment,
    Review,
    User,
)
from app.infrastructure.email import EmailNotificationService
from app.infrastructure.notifications import (
    NotificationConnectionManager,
    PushNotificationService,
    notification_manager,
)
from app.infrastructure.repositories import (
    NotificationPreferenceRepository,
    NotificationRepository,
    RecipientDirectory,
    UserRepository,
    WebhookRepository,
)
from app.infrastructure.webhooks import WebhookService

from .catalog import NotificationContext, NotificationEvent
from .dispatch import DeliveryOutcome, best_effort
from .ports import EmailSender, NotificationStore, PushSender, RecipientLookup, WebhookSender
from .recipients import RecipientResolver, exclude_actor

logger = logging.getLogger(__name__)

OFFER_KIND_CREATE = "create"
OFFER_KIND_COUNTER = "counteroffer"


class NotificationService:
    """Write notification rows for domain events and deliver them best-effort.

    Object, change and fan-out writes propagate their errors. Push, email and
    webhook deliveries are isolated per call and never raise.
    """

    def __init__(
        self,
        store: NotificationStore,
        directory: RecipientLookup,
        push: PushSender,
        email: EmailSender,
        webhooks: WebhookSender,
        *,
        delivery_timeout: float | None = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._recipients = RecipientResolver(directory)
        self._push = push
        self._email = email
        self._webhooks = webhooks
        self._delivery_timeout = delivery_timeout

    # -- orders ---------------------------------------------------------

    async def create_order_notification(self, order: Order) -> None:
        if order.contractor_id:
            managers = await self._recipients.contractor_members(
                order.contractor_id, PERMISSION_MANAGE_ORDERS
            )
            await self._publish(
                NotificationEvent.ORDER_CREATE,
                entity_id=order.order_id,
                actor_id=order.customer_id,
                recipients=managers,
                context=NotificationContext(order=order),
                contractor_id=order.contractor_id,
            )

        if order.assigned_id:
            await self.create_order_assigned_notification(order)
        else:
            await self._send_webhook(
                "order",
                lambda: self._webhooks.send_order_webhooks(order),
                entity_id=order.order_id,
                contractor_id=order.contractor_id,
            )

    async def create_order_assigned_notification(self, order: Order) -> None:
        if not order.assigned_id:
            logger.debug("Order %s has no assignee; nothing to notify", order.order_id)
            return
        await self._publish(
            NotificationEvent.ORDER_ASSIGNED,
            entity_id=order.order_id,
            actor_id=order.customer_id,
            recipients=[order.assigned_id],
            context=NotificationContext(order=order),
            delivery_contractor_id=order.contractor_id,
        )

    async def create_order_message_notification(self, order: Order, message: Message) -> None:
        chat_id = await self._lookup_chat_id(order_id=order.order_id)
        await self._publish(
            NotificationEvent.ORDER_MESSAGE,
            entity_id=order.order_id,
            actor_id=message.author,
            recipients=self._recipients.order_parties(order, message.author),
            context=NotificationContext(order=order, message=message, chat_id=chat_id),
            delivery_contractor_id=order.contractor_id,
        )

    async def create_order_comment_notification(
        self, comment: OrderComment, actor_id: str
    ) -> None:
        order = await self._directory.get_order(comment.order_id)
        await self._publish(
            NotificationEvent.ORDER_COMMENT,
            entity_id=comment.comment_id,
            actor_id=actor_id,
            recipients=self._recipients.order_parties(order, actor_id),
            context=NotificationContext(order=order, comment=comment),
            delivery_contractor_id=order.contractor_id,
        )
        await self._send_webhook(
            "order_comment",
            lambda: self._webhooks.send_order_comment_webhooks(order, comment),
            entity_id=comment.comment_id,
            contractor_id=order.contractor_id,
        )

    async def create_order_review_notification(self, review: Review) -> None:
        order = await self._directory.get_order(review.order_id)
        if not order.assigned_id:
            logger.debug("Order %s has no assignee; review not notified", order.order_id)
            return
        await self._publish(
            NotificationEvent.ORDER_REVIEW,
            entity_id=review.review_id,
            actor_id=order.customer_id,
            recipients=[order.assigned_id],
            context=NotificationContext(order=order, review=review),
            delivery_contractor_id=order.contractor_id,
        )

    async def create_order_status_notification(
        self, order: Order, new_status: str, actor_id: str
    ) -> None:
        event = NotificationEvent.for_order_status(new_status)
        updated = replace(order, status=new_status)
        await self._publish(
            event,
            entity_id=order.order_id,
            actor_id=actor_id,
            recipients=self._recipients.order_parties(order, actor_id),
            context=NotificationContext(order=updated),
            delivery_contractor_id=order.contractor_id,
        )
        await self._send_webhook(
            "order_status",
            lambda: self._webhooks.send_order_status_webhooks(updated, new_status, actor_id),
            entity_id=order.order_id,
            contractor_id=order.contractor_id,
        )

    async def create_order_review_revision_notification(
        self, review: Review, requester: User
    ) -> None:
        recipients = exclude_actor(
            await self._recipients.review_authors(review), requester.user_id
        )
        if not recipients:
            logger.warning(
                "No recipients for review revision request on review %s",
                review.review_id,
                extra={"entity_id": review.review_id, "contractor_id": review.contractor_author},
            )
            return
        order = await self._directory.get_order(review.order_id)
        await self._publish(
            NotificationEvent.ORDER_REVIEW_REVISION_REQUESTED,
            entity_id=review.review_id,
            actor_id=requester.user_id,
            recipients=recipients,
            context=NotificationContext(
                order=order, review=review, requester_id=requester.user_id
            ),
            contractor_id=review.contractor_author,
        )

    # -- offers ---------------------------------------------------------

    async def create_offer_notification(
        self, offer: OfferSession, kind: str = OFFER_KIND_CREATE
    ) -> None:
        if kind == OFFER_KIND_CREATE:
            event = NotificationEvent.OFFER_CREATE
        elif kind == OFFER_KIND_COUNTER:
            event = NotificationEvent.COUNTER_OFFER_CREATE
        else:
            raise ValueError(f"Unsupported offer notification kind '{kind}'")

        context = NotificationContext(offer=offer)
        if offer.contractor_id:
            managers = await self._recipients.contractor_members(
                offer.contractor_id, PERMISSION_MANAGE_ORDERS
            )
            await self._publish(
                event,
                entity_id=offer.id,
                actor_id=offer.customer_id,
                recipients=managers,
                context=context,
                contractor_id=offer.contractor_id,
            )
        if offer.assigned_id:
            await self._publish(
                event,
                entity_id=offer.id,
                actor_id=offer.customer_id,
                recipients=[offer.assigned_id],
                context=context,
                delivery_contractor_id=offer.contractor_id,
            )
        await self._send_webhook(
            "offer",
            lambda: self._webhooks.send_offer_webhooks(offer, kind),
            entity_id=offer.id,
            contractor_id=offer.contractor_id,
        )

    async def create_offer_message_notification(
        self, session: OfferSession, message: Message
    ) -> None:
        chat_id = await self._lookup_chat_id(session_id=session.id)
        await self._publish(
            NotificationEvent.OFFER_MESSAGE,
            entity_id=session.id,
            actor_id=message.author,
            recipients=self._recipients.order_parties(session, message.author),
            context=NotificationContext(offer=session, message=message, chat_id=chat_id),
            delivery_contractor_id=session.contractor_id,
        )

    # -- market ---------------------------------------------------------

    async def create_market_bid_notification(
        self, listing: MarketListingComplete, bid: MarketBid
    ) -> None:
        seller = listing.listing
        if bid.user_bidder_id:
            await self._publish(
                NotificationEvent.MARKET_ITEM_BID,
                entity_id=bid.bid_id,
                actor_id=bid.user_bidder_id,
                recipients=await self._recipients.listing_sellers(seller),
                context=NotificationContext(listing=listing, bid=bid),
                contractor_id=seller.contractor_seller_id,
            )
        else:
            logger.debug("Bid %s has no user bidder; skipping in-app notification", bid.bid_id)
        await self._send_webhook(
            "bid",
            lambda: self._webhooks.send_bid_webhooks(seller, bid),
            entity_id=bid.bid_id,
            contractor_id=seller.contractor_seller_id,
        )

    async def create_market_offer_notification(
        self, listing: MarketListingComplete, offer: MarketOffer
    ) -> None:
        seller = listing.listing
        if not offer.buyer_user_id:
            logger.debug(
                "Market offer %s has no user buyer; skipping in-app notification",
                offer.offer_id,
            )
            return
        await self._publish(
            NotificationEvent.MARKET_ITEM_OFFER,
            entity_id=offer.offer_id,
            actor_id=offer.buyer_user_id,
            recipients=await self._recipients.listing_sellers(seller),
            context=NotificationContext(listing=listing, market_offer=offer),
            contractor_id=seller.contractor_seller_id,
        )

    # -- contractors and admin ------------------------------------------

    async def create_contractor_invite_notification(self, invite: ContractorInvite) -> None:
        await self._publish(
            NotificationEvent.CONTRACTOR_INVITE,
            entity_id=invite.invite_id,
            actor_id=None,
            recipients=[invite.user_id],
            context=NotificationContext(invite=invite),
        )

    async def create_admin_alert_notification(self, alert: AdminAlert) -> None:
        recipients = exclude_actor(
            await self._recipients.alert_targets(alert), alert.created_by
        )
        if not recipients:
            logger.warning(
                "No users found for admin alert %s with target %s",
                alert.alert_id,
                AlertTargetType(alert.target_type).value,
                extra={"entity_id": alert.alert_id, "contractor_id": alert.target_contractor_id},
            )
            return
        await self._publish(
            NotificationEvent.ADMIN_ALERT,
            entity_id=alert.alert_id,
            actor_id=alert.created_by,
            recipients=recipients,
            context=NotificationContext(alert=alert),
            contractor_id=alert.target_contractor_id,
        )

    # -- shared steps ---------------------------------------------------

    async def _publish(
        self,
        event: NotificationEvent,
        *,
        entity_id: str,
        actor_id: str | None,
        recipients: Iterable[str | None],
        context: NotificationContext,
        contractor_id: str | None = None,
        delivery_contractor_id: str | None = None,
    ) -> list[str]:
        """Write the object, change and fan-out rows, then deliver to each recipient.

        ``contractor_id`` scopes the notification object to a contractor inbox.
        ``delivery_contractor_id`` selects contractor-scoped preferences for push
        and email and falls back to ``contractor_id``.

        Returns the ids of the recipients that received a new fan-out row.
        """

        action = await self._store.get_notification_action_by_name(event.action)
        notification_object = await self._resolve_object(
            event, action, entity_id, contractor_id
        )
        object_id = notification_object.notification_object_id

        if actor_id:
            await self._store.insert_notification_changes(
                [
                    NotificationChange(
                        notification_change_id=None,
                        notification_object_id=object_id,
                        actor_id=actor_id,
                    )
                ]
            )

        targets = exclude_actor(recipients, actor_id)
        if event.dedupe_by_entity_and_action:
            targets = [
                user_id
                for user_id in targets
                if await self._store.get_unread_notification_by_user_and_object(
                    user_id, object_id
                )
                is None
            ]
        if targets:
            await self._store.insert_notifications(
                [
                    Notification(
                        notification_id=None,
                        notification_object_id=object_id,
                        notifier_id=user_id,
                    )
                    for user_id in targets
                ]
            )

        logger.info(
            "Notification %s on %s fanned out to %d recipient(s)",
            event.action,
            entity_id,
            len(targets),
            extra={
                "event_type": event.action,
                "entity_id": entity_id,
                "contractor_id": contractor_id,
            },
        )
        await self._deliver(
            event, targets, context, entity_id, delivery_contractor_id or contractor_id
        )
        return targets

    async def _resolve_object(
        self,
        event: NotificationEvent,
        action: NotificationAction,
        entity_id: str,
        contractor_id: str | None,
    ) -> NotificationObject:
        if event.dedupe_by_entity_and_action:
            existing = await self._store.get_notification_object_by_entity_and_action(
                entity_id, action.action_type_id
            )
            if existing is not None:
                await self._store.update_notification_object_timestamp(
                    existing.notification_object_id
                )
                return existing

        created = await self._store.insert_notification_objects(
            [
                NotificationObject(
                    notification_object_id=None,
                    action_type_id=action.action_type_id,
                    entity_id=entity_id,
                    contractor_id=contractor_id,
                )
            ]
        )
        return created[0]

    async def _deliver(
        self,
        event: NotificationEvent,
        recipients: list[str],
        context: NotificationContext,
        entity_id: str,
        contractor_id: str | None,
    ) -> list[DeliveryOutcome]:
        if not recipients:
            return []
        payload = event.build_payload(context)
        email_context = {"event": event.action, **payload.to_dict(), **context.to_dict()}

        outcomes = []
        for user_id in recipients:
            log_context = {
                "user_id": user_id,
                "entity_id": entity_id,
                "contractor_id": contractor_id,
                "event_type": event.action,
            }
            outcomes.append(
                await best_effort(
                    "push",
                    lambda user_id=user_id: self._push.send_push_notification(
                        user_id, payload, event.action, contractor_id
                    ),
                    timeout=self._delivery_timeout,
                    **log_context,
                )
            )
            outcomes.append(
                await best_effort(
                    "email",
                    lambda user_id=user_id: self._email.send_notification_email(
                        user_id, event.action, email_context, False, contractor_id
                    ),
                    timeout=self._delivery_timeout,
                    **log_context,
                )
            )
        return outcomes

    async def _send_webhook(
        self,
        kind: str,
        call: Callable[[], Awaitable[Any]],
        *,
        entity_id: str,
        contractor_id: str | None,
    ) -> DeliveryOutcome:
        return await best_effort(
            f"{kind}_webhook",
            call,
            timeout=self._delivery_timeout,
            entity_id=entity_id,
            contractor_id=contractor_id,
        )

    async def _lookup_chat_id(
        self, *, order_id: str | None = None, session_id: str | None = None
    ) -> str | None:
        try:
            return await self._directory.get_chat_id(order_id=order_id, session_id=session_id)
        except Exception as exc:
            logger.warning(
                "Could not resolve chat for order=%s session=%s: %s", order_id, session_id, exc
            )
            return None


def build_notification_service(
    session: AsyncSession,
    *,
    manager: NotificationConnectionManager | None = None,
    webhook_client: httpx.AsyncClient | None = None,
) -> NotificationService:
    """Wire a :class:`NotificationService` backed by ``session``."""

    settings = get_settings()
    preferences = NotificationPreferenceRepository(session)
    return NotificationService(
        NotificationRepository(session),
        RecipientDirectory(session),
        PushNotificationService(preferences, manager or notification_manager),
        EmailNotificationService(UserRepository(session), preferences, settings),
        WebhookService(
            WebhookRepository(session),
            client=webhook_client,
            timeout=settings.webhook_timeout_seconds,
        ),
        delivery_timeout=settings.delivery_timeout_seconds,
    )


__all__ = [
    "NotificationService",
    "OFFER_KIND_COUNTER",
    "OFFER_KIND_CREATE",
    "build_notification_service",
]
