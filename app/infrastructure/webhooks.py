"""Outgoing HTTP webhooks for order, offer and market events."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict
from datetime import datetime
from typing import Any

import httpx

from app.config import get_settings
from app.domain.entities import (
    MarketBid,
    MarketListing,
    OfferSession,
    Order,
    OrderComment,
    Webhook,
)
from app.infrastructure.repositories import WebhookRepository
from app.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


class WebhookService:
    """POST event payloads to the webhooks registered by the parties involved."""

    def __init__(
        self,
        webhooks: WebhookRepository,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._webhooks = webhooks
        self._client = client
        if timeout is None:
            timeout = get_settings().webhook_timeout_seconds
        # A non-positive timeout leaves requests unbounded.
        self._timeout = timeout if timeout > 0 else None

    async def send_order_webhooks(self, order: Order, action: str = "order_create") -> int:
        return await self._send(
            action,
            {"order": _serialize(order)},
            contractor_id=order.contractor_id,
            user_id=order.assigned_id,
        )

    async def send_order_status_webhooks(
        self, order: Order, new_status: str, actor_id: str | None = None
    ) -> int:
        action = f"order_status_{new_status.replace('-', '_')}"
        return await self._send(
            action,
            {"order": _serialize(order), "status": new_status, "actor_id": actor_id},
            contractor_id=order.contractor_id,
            user_id=order.assigned_id,
        )

    async def send_order_comment_webhooks(self, order: Order, comment: OrderComment) -> int:
        return await self._send(
            "order_comment",
            {"order": _serialize(order), "comment": _serialize(comment)},
            contractor_id=order.contractor_id,
            user_id=order.assigned_id,
        )

    async def send_offer_webhooks(self, offer: OfferSession, kind: str = "create") -> int:
        action = "counter_offer_create" if kind == "counteroffer" else "offer_create"
        return await self._send(
            action,
            {"offer": _serialize(offer)},
            contractor_id=offer.contractor_id,
            user_id=offer.assigned_id,
        )

    async def send_bid_webhooks(self, listing: MarketListing, bid: MarketBid) -> int:
        return await self._send(
            "market_item_bid",
            {"listing": _serialize(listing), "bid": _serialize(bid)},
            contractor_id=listing.contractor_seller_id,
            user_id=listing.user_seller_id,
        )

    async def _send(
        self,
        action: str,
        data: dict[str, Any],
        *,
        contractor_id: str | None,
        user_id: str | None,
    ) -> int:
        targets = await self._webhooks.list_for_owners(
            contractor_id=contractor_id, user_id=user_id, action=action
        )
        if not targets:
            return 0
        payload = {
            "action": action,
            "timestamp": now_in_app_timezone().isoformat(),
            "data": data,
        }
        if self._client is not None:
            return await self._deliver(self._client, targets, payload)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._deliver(client, targets, payload)

    async def _deliver(
        self,
        client: httpx.AsyncClient,
        targets: Sequence[Webhook],
        payload: dict[str, Any],
    ) -> int:
        delivered = 0
        for webhook in targets:
            try:
                response = await client.post(webhook.webhook_url, json=payload)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error(
                    "Webhook %s failed for action %s: %s",
                    webhook.webhook_id,
                    payload["action"],
                    exc,
                    extra={"webhook_id": webhook.webhook_id, "event_type": payload["action"]},
                )
                continue
            delivered += 1
        return delivered


def _serialize(entity: Any) -> dict[str, Any]:
    data = asdict(entity)
    for key, value in data.items():
        if isinstance(value, datetime):
            data[key] = value.isoformat()
    return data


__all__ = ["WebhookService"]
