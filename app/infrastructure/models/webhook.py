"""SQLAlchemy model for registered outgoing webhooks."""

from sqlalchemy import JSON, Column, String

from app.infrastructure.database import Base


class WebhookModel(Base):
    """Endpoint registered by a user or contractor to receive notifications."""

    __tablename__ = "webhook"

    webhook_id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)
    webhook_url = Column(String(500), nullable=False)
    actions = Column(JSON, nullable=False, default=list)
    contractor_id = Column(String(64), nullable=True, index=True)
    user_id = Column(String(64), nullable=True, index=True)


__all__ = ["WebhookModel"]
