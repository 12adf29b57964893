"""SQLAlchemy models for notification objects, changes and fan-out rows."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class NotificationActionModel(Base):
    """Static catalog of notification actions."""

    __tablename__ = "notification_action"

    action_type_id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(64), nullable=False, unique=True)
    entity = Column(String(64), nullable=False)


class NotificationObjectModel(Base):
    """Record that an action happened to an entity."""

    __tablename__ = "notification_object"
    __table_args__ = (
        Index("ix_notification_object_entity_action", "entity_id", "action_type_id"),
    )

    notification_object_id = Column(Integer, primary_key=True, autoincrement=True)
    action_type_id = Column(
        Integer, ForeignKey("notification_action.action_type_id"), nullable=False
    )
    entity_id = Column(String(64), nullable=False)
    contractor_id = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    action = relationship("NotificationActionModel", lazy="joined")


class NotificationChangeModel(Base):
    """Actor attributed to a notification object; rows are never updated."""

    __tablename__ = "notification_change"

    notification_change_id = Column(Integer, primary_key=True, autoincrement=True)
    notification_object_id = Column(
        Integer,
        ForeignKey("notification_object.notification_object_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    actor_id = Column(String(64), nullable=False)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


class NotificationModel(Base):
    """Per-recipient fan-out row."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_notifier_object", "notifier_id", "notification_object_id"),
    )

    notification_id = Column(Integer, primary_key=True, autoincrement=True)
    notification_object_id = Column(
        Integer,
        ForeignKey("notification_object.notification_object_id", ondelete="CASCADE"),
        nullable=False,
    )
    notifier_id = Column(String(64), nullable=False, index=True)
    read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    notification_object = relationship("NotificationObjectModel", lazy="joined")


class NotificationPreferenceModel(Base):
    """Per-user opt-in state for a delivery channel."""

    __tablename__ = "notification_preference"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "action_type_id",
            "contractor_id",
            "channel",
            name="uq_notification_preference_scope",
        ),
    )

    preference_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    action_type_id = Column(
        Integer, ForeignKey("notification_action.action_type_id"), nullable=False
    )
    contractor_id = Column(String(64), nullable=True)
    channel = Column(String(16), nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = [
    "NotificationActionModel",
    "NotificationChangeModel",
    "NotificationModel",
    "NotificationObjectModel",
    "NotificationPreferenceModel",
]
