"""Webhook delivery against registrations stored in SQLite."""

from __future__ import annotations

import json

import httpx
import pytest

from app.domain.entities import MarketBid, MarketListing, OfferSession, Order, OrderComment
from app.infrastructure.models import WebhookModel
from app.infrastructure.repositories import WebhookRepository
from app.infrastructure import webhooks as webhooks_module
from app.infrastructure.webhooks import WebhookService


@pytest.fixture()
async def registrations(session):
    session.add_all(
        [
            WebhookModel(
                webhook_id="w-org",
                name="Org hook",
                webhook_url="https://org.example.com/hook",
                actions=["order_create", "order_status_fulfilled", "offer_create"],
                contractor_id="org",
            ),
            WebhookModel(
                webhook_id="w-user",
                name="User hook",
                webhook_url="https://user.example.com/hook",
                actions=["order_create", "market_item_bid", "counter_offer_create"],
                user_id="worker",
            ),
            WebhookModel(
                webhook_id="w-other",
                name="Other hook",
                webhook_url="https://other.example.com/hook",
                actions=["order_create"],
                contractor_id="other",
            ),
        ]
    )
    await session.commit()
    return WebhookRepository(session)


def _service(registrations, handler) -> tuple[WebhookService, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WebhookService(registrations, client=client, timeout=1.0), client


async def test_order_webhooks_reach_contractor_and_assignee(registrations):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(204)

    service, client = _service(registrations, handler)
    async with client:
        delivered = await service.send_order_webhooks(
            Order(order_id="o-1", customer_id="c", assigned_id="worker", contractor_id="org")
        )

    assert delivered == 2
    assert sorted(request.url.host for request in requests) == [
        "org.example.com",
        "user.example.com",
    ]
    body = json.loads(requests[0].content)
    assert body["action"] == "order_create"
    assert body["data"]["order"]["order_id"] == "o-1"
    assert "timestamp" in body


async def test_only_subscribed_actions_are_sent(registrations):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    service, client = _service(registrations, handler)
    order = Order(order_id="o-1", customer_id="c", assigned_id="worker", contractor_id="org")
    async with client:
        fulfilled = await service.send_order_status_webhooks(order, "fulfilled", "worker")
        cancelled = await service.send_order_status_webhooks(order, "cancelled", "worker")
        counter = await service.send_offer_webhooks(
            OfferSession(id="s-1", customer_id="c", assigned_id="worker"), "counteroffer"
        )
        comment = await service.send_order_comment_webhooks(
            order, OrderComment(comment_id="c-1", order_id="o-1", author="c", content="hi")
        )

    assert (fulfilled, cancelled, counter, comment) == (1, 0, 1, 0)
    assert json.loads(requests[0].content)["data"]["status"] == "fulfilled"
    assert json.loads(requests[1].content)["action"] == "counter_offer_create"


async def test_failed_target_does_not_stop_the_rest(registrations, caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "org.example.com":
            return httpx.Response(500)
        return httpx.Response(200)

    service, client = _service(registrations, handler)
    async with client:
        with caplog.at_level("ERROR"):
            delivered = await service.send_order_webhooks(
                Order(order_id="o-1", customer_id="c", assigned_id="worker", contractor_id="org")
            )

    assert delivered == 1
    assert "Webhook w-org failed for action order_create" in caplog.text


async def test_connection_errors_are_logged(registrations, caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service, client = _service(registrations, handler)
    listing = MarketListing(listing_id="l-1", price=10, user_seller_id="worker")
    async with client:
        with caplog.at_level("ERROR"):
            delivered = await service.send_bid_webhooks(
                listing, MarketBid(bid_id="b-1", listing_id="l-1", bid=12)
            )

    assert delivered == 0
    assert "connection refused" in caplog.text


async def test_no_owners_means_no_requests(registrations):
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - never called
        raise AssertionError("unexpected webhook request")

    service, client = _service(registrations, handler)
    async with client:
        assert await service.send_order_webhooks(Order(order_id="o-1", customer_id="c")) == 0


@pytest.mark.parametrize(("timeout", "expected"), [(0, None), (2.5, 2.5), (None, 10.0)])
async def test_owned_client_timeout(registrations, monkeypatch, timeout, expected):
    timeouts = []
    real_client = httpx.AsyncClient

    def build_client(*, timeout):
        timeouts.append(timeout)
        return real_client(
            timeout=timeout, transport=httpx.MockTransport(lambda _: httpx.Response(200))
        )

    monkeypatch.setattr(webhooks_module.httpx, "AsyncClient", build_client)
    service = WebhookService(registrations, timeout=timeout)

    assert await service.send_order_webhooks(
        Order(order_id="o-1", customer_id="c", contractor_id="org")
    ) == 1
    assert timeouts == [expected]
