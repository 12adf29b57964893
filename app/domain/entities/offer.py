"""Domain entity representing an offer negotiation session."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class OfferSession:
    """Negotiation between a customer and a contractor or individual seller."""

    id: str
    customer_id: str
    assigned_id: str | None = None
    contractor_id: str | None = None
    status: str = "waiting-seller"
    title: str | None = None
    created_at: datetime | None = None


__all__ = ["OfferSession"]
