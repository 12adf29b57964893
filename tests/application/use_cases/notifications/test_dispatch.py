from __future__ import annotations

import logging

import anyio

from app.application.use_cases.notifications import DeliveryOutcome, best_effort


async def test_successful_call_is_delivered():
    async def call():
        return 3

    assert await best_effort("push", call) == DeliveryOutcome("push", True)


async def test_false_result_is_skipped_not_failed(caplog):
    async def call():
        return False

    with caplog.at_level(logging.DEBUG):
        outcome = await best_effort("email", call, user_id="u1")

    assert outcome == DeliveryOutcome("email", False)
    assert "email delivery skipped (user_id=u1)" in caplog.text


async def test_exception_is_logged_and_contained(caplog):
    async def call():
        raise ConnectionError("refused")

    with caplog.at_level(logging.ERROR):
        outcome = await best_effort("order_webhook", call, entity_id="o1", contractor_id=None)

    assert outcome.delivered is False
    assert outcome.error == "refused"
    [record] = caplog.records
    assert record.channel == "order_webhook"
    assert record.entity_id == "o1"
    assert record.exc_info is not None


async def test_timeout_is_reported():
    async def call():
        await anyio.sleep(5)

    outcome = await best_effort("push", call, timeout=0.05)

    assert outcome == DeliveryOutcome("push", False, "timeout")


async def test_non_positive_timeout_means_unbounded():
    async def call():
        await anyio.sleep(0.01)
        return True

    assert (await best_effort("push", call, timeout=0)).delivered is True
