"""Read-only access to orders and their chats."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import Order
from app.domain.exceptions import NotFoundError
from app.infrastructure.models import ChatModel, OrderModel
from app.utils import ensure_app_timezone


class OrderRepository:
    """Look up orders and the chat attached to an order or offer session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_order(self, order_id: str) -> Order:
        model = await self.session.get(OrderModel, order_id)
        if model is None:
            raise NotFoundError(f"Order {order_id} not found")
        return self._to_entity(model)

    async def get_chat_id(
        self, *, order_id: str | None = None, session_id: str | None = None
    ) -> str | None:
        if order_id is None and session_id is None:
            raise ValueError("Either order_id or session_id is required")
        statement = select(ChatModel.chat_id)
        if order_id is not None:
            statement = statement.where(ChatModel.order_id == order_id)
        if session_id is not None:
            statement = statement.where(ChatModel.session_id == session_id)
        result = await self.session.execute(statement.limit(1))
        return result.scalar_one_or_none()

    @staticmethod
    def _to_entity(model: OrderModel) -> Order:
        return Order(
            order_id=model.order_id,
            customer_id=model.customer_id,
            title=model.title,
            description=model.description,
            assigned_id=model.assigned_id,
            contractor_id=model.contractor_id,
            status=model.status,
            kind=model.kind,
            cost=model.cost,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["OrderRepository"]
