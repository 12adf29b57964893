"""Domain entities for market listings and the bids/offers placed on them."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class MarketListing:
    """Item put up for sale by an individual or a contractor."""

    listing_id: str
    price: int
    user_seller_id: str | None = None
    contractor_seller_id: str | None = None
    quantity_available: int = 1
    sale_type: str = "sale"
    status: str = "active"
    created_at: datetime | None = None


@dataclass
class MarketListingDetails:
    """Descriptive fields of a listing."""

    title: str
    description: str = ""


@dataclass
class MarketListingComplete:
    """Listing together with its descriptive details."""

    listing: MarketListing
    details: MarketListingDetails = field(
        default_factory=lambda: MarketListingDetails(title="")
    )


@dataclass
class MarketBid:
    """Bid placed on an auction listing."""

    bid_id: str
    listing_id: str
    bid: int
    user_bidder_id: str | None = None
    contractor_bidder_id: str | None = None
    created_at: datetime | None = None


@dataclass
class MarketOffer:
    """Price offer made by a buyer on a listing."""

    offer_id: str
    listing_id: str
    offer: int
    buyer_user_id: str | None = None
    buyer_contractor_id: str | None = None
    created_at: datetime | None = None


__all__ = [
    "MarketBid",
    "MarketListing",
    "MarketListingComplete",
    "MarketListingDetails",
    "MarketOffer",
]
