from __future__ import annotations

import pytest

from app.application.use_cases.notifications import NotificationContext, NotificationEvent
from app.domain.entities import (
    AdminAlert,
    AlertTargetType,
    ContractorInvite,
    MarketBid,
    MarketListing,
    MarketListingComplete,
    MarketListingDetails,
    MarketOffer,
    Message,
    OfferSession,
    Order,
    OrderComment,
    Review,
)
from app.domain.exceptions import NotificationConfigurationError

ORDER = Order(order_id="o-1", customer_id="c", assigned_id="w", title="Escort run")
LISTING = MarketListingComplete(
    listing=MarketListing(listing_id="l-1", price=5000, user_seller_id="s"),
    details=MarketListingDetails(title="Hull plating"),
)

FULL_CONTEXT = NotificationContext(
    order=ORDER,
    message=Message(message_id="m-1", author="c", content="hello"),
    comment=OrderComment(comment_id="c-1", order_id="o-1", author="c", content="note"),
    review=Review(review_id="r-1", order_id="o-1", rating=4.5, user_author="c"),
    offer=OfferSession(id="s-1", customer_id="c", title="Bulk haul"),
    listing=LISTING,
    bid=MarketBid(bid_id="b-1", listing_id="l-1", bid=6000),
    market_offer=MarketOffer(offer_id="mo-1", listing_id="l-1", offer=4000),
    invite=ContractorInvite(invite_id="i-1", contractor_id="org", user_id="u"),
    alert=AdminAlert(
        alert_id="a-1",
        title="Patch day",
        content="Servers restart at noon",
        target_type=AlertTargetType.ALL_USERS,
        created_by="admin",
    ),
    chat_id="chat-1",
    requester_id="w",
)


def test_action_names_are_unique():
    actions = [event.action for event in NotificationEvent]
    assert len(actions) == len(set(actions)) == 17


def test_only_message_events_are_deduplicated():
    deduped = {event for event in NotificationEvent if event.dedupe_by_entity_and_action}
    assert deduped == {NotificationEvent.ORDER_MESSAGE, NotificationEvent.OFFER_MESSAGE}


@pytest.mark.parametrize("event", list(NotificationEvent))
def test_every_event_builds_a_payload(event):
    payload = event.build_payload(FULL_CONTEXT)

    assert payload.title
    assert payload.body
    assert payload.url


@pytest.mark.parametrize("event", list(NotificationEvent))
def test_payloads_tolerate_empty_context(event):
    payload = event.build_payload(NotificationContext())

    assert payload.title


@pytest.mark.parametrize(
    ("status", "action"),
    [
        ("fulfilled", "order_status_fulfilled"),
        ("in-progress", "order_status_in_progress"),
        ("not-started", "order_status_not_started"),
        ("cancelled", "order_status_cancelled"),
    ],
)
def test_for_order_status(status, action):
    assert NotificationEvent.for_order_status(status).action == action


def test_for_unknown_order_status():
    with pytest.raises(NotificationConfigurationError):
        NotificationEvent.for_order_status("paused")


def test_from_action_round_trip():
    assert NotificationEvent.from_action("admin_alert") is NotificationEvent.ADMIN_ALERT
    with pytest.raises(NotificationConfigurationError):
        NotificationEvent.from_action("order_archived")


def test_message_preview_is_truncated():
    context = NotificationContext(
        order=ORDER, message=Message(message_id="m", author="c", content="x" * 250)
    )

    payload = NotificationEvent.ORDER_MESSAGE.build_payload(context)

    assert len(payload.body) == 100
    assert payload.body.endswith("...")


def test_specific_payload_text():
    assert NotificationEvent.ADMIN_ALERT.build_payload(FULL_CONTEXT).title == (
        "Admin Alert: Patch day"
    )
    bid = NotificationEvent.MARKET_ITEM_BID.build_payload(FULL_CONTEXT)
    assert bid.body == 'A bid of 6,000 was placed on "Hull plating"'
    assert bid.url == "/market/l-1"
    review = NotificationEvent.ORDER_REVIEW.build_payload(FULL_CONTEXT)
    assert review.body == 'A 4.5-star review was left on order "Escort run"'


def test_context_to_dict_serializes_enums():
    data = FULL_CONTEXT.to_dict()

    assert data["alert"]["target_type"] == "all_users"
    assert data["listing"]["details"]["title"] == "Hull plating"
    assert data["chat_id"] == "chat-1"
    assert "invite" in data


async def test_seed_notification_actions_is_idempotent(session):
    from app.application.use_cases.notifications import seed_notification_actions

    assert await seed_notification_actions(session) == 0
