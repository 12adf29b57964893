"""Recipient lookups consumed by the notification service."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import USER_ROLE_ADMIN, AlertTargetType, Order

from .contractor_repository import ContractorRepository
from .order_repository import OrderRepository
from .user_repository import UserRepository

logger = logging.getLogger(__name__)


class RecipientDirectory:
    """Membership, order and admin-alert audience lookups backed by SQL."""

    def __init__(self, session: AsyncSession) -> None:
        self.contractors = ContractorRepository(session)
        self.orders = OrderRepository(session)
        self.users = UserRepository(session)

    async def get_members_with_matching_role(
        self, contractor_id: str, permissions: Mapping[str, bool]
    ) -> list[str]:
        return await self.contractors.get_members_with_matching_role(
            contractor_id, permissions
        )

    async def get_order(self, order_id: str) -> Order:
        return await self.orders.get_order(order_id)

    async def get_chat_id(
        self, *, order_id: str | None = None, session_id: str | None = None
    ) -> str | None:
        return await self.orders.get_chat_id(order_id=order_id, session_id=session_id)

    async def get_users_for_alert_target(
        self, target_type: AlertTargetType | str, contractor_id: str | None = None
    ) -> list[str]:
        """Return the user ids an admin alert addressed to ``target_type`` reaches."""

        target = AlertTargetType(target_type)
        if target is AlertTargetType.ALL_USERS:
            return await self.users.list_ids()
        if target is AlertTargetType.ADMINS_ONLY:
            return await self.users.list_ids(role=USER_ROLE_ADMIN)
        if target is AlertTargetType.ORG_MEMBERS:
            return await self.contractors.get_member_ids()
        if target is AlertTargetType.ORG_OWNERS:
            return await self.contractors.get_owner_ids()
        if not contractor_id:
            logger.warning("Alert targets a specific contractor but none was given")
            return []
        return await self.contractors.get_member_ids(contractor_id)


__all__ = ["RecipientDirectory"]
