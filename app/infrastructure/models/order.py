"""SQLAlchemy models for orders and the chats attached to orders or offers."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class OrderModel(Base):
    """Minimal order row read by the notification service."""

    __tablename__ = "order"

    order_id = Column(String(64), primary_key=True)
    customer_id = Column(String(64), nullable=False, index=True)
    assigned_id = Column(String(64), nullable=True, index=True)
    contractor_id = Column(String(64), nullable=True, index=True)
    title = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="not-started")
    kind = Column(String(32), nullable=True)
    cost = Column(Integer, nullable=True)
    created_at = Column(
        DateTime,
        nullable=False,
        default=now_in_app_naive_datetime,
        server_default=func.now(),
    )


class ChatModel(Base):
    """Chat linked either to an order or to an offer session."""

    __tablename__ = "chat"

    chat_id = Column(String(64), primary_key=True)
    order_id = Column(String(64), nullable=True, index=True)
    session_id = Column(String(64), nullable=True, index=True)


__all__ = ["ChatModel", "OrderModel"]
