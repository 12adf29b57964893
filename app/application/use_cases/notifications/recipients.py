"""Recipient resolution for notification events."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from app.domain.entities import (
    PERMISSION_MANAGE_MARKET,
    PERMISSION_MANAGE_ORDERS,
    AdminAlert,
    MarketListing,
    Review,
)

from .ports import RecipientLookup


class _HasParties(Protocol):
    customer_id: str
    assigned_id: str | None


def exclude_actor(recipients: Iterable[str | None], actor_id: str | None = None) -> list[str]:
    """Drop ``actor_id``, empty ids and duplicates while keeping the input order."""

    result: list[str] = []
    for recipient in recipients:
        if not recipient or recipient == actor_id or recipient in result:
            continue
        result.append(recipient)
    return result


class RecipientResolver:
    """Compute who should be notified about an event."""

    def __init__(self, directory: RecipientLookup) -> None:
        self._directory = directory

    async def contractor_members(
        self, contractor_id: str | None, permission: str = PERMISSION_MANAGE_ORDERS
    ) -> list[str]:
        """Members of ``contractor_id`` whose role grants ``permission``."""

        if not contractor_id:
            return []
        members = await self._directory.get_members_with_matching_role(
            contractor_id, {permission: True}
        )
        return exclude_actor(members)

    @staticmethod
    def order_parties(order: _HasParties, actor_id: str | None = None) -> list[str]:
        """Assignee and customer of an order or offer session, minus the actor."""

        return exclude_actor([order.assigned_id, order.customer_id], actor_id)

    async def listing_sellers(
        self, listing: MarketListing, permission: str = PERMISSION_MANAGE_MARKET
    ) -> list[str]:
        members = await self.contractor_members(listing.contractor_seller_id, permission)
        return exclude_actor([*members, listing.user_seller_id])

    async def review_authors(self, review: Review) -> list[str]:
        if review.user_author:
            return [review.user_author]
        return await self.contractor_members(review.contractor_author, PERMISSION_MANAGE_ORDERS)

    async def alert_targets(self, alert: AdminAlert) -> list[str]:
        users = await self._directory.get_users_for_alert_target(
            alert.target_type, alert.target_contractor_id
        )
        return exclude_actor(users)


__all__ = ["RecipientResolver", "exclude_actor"]
