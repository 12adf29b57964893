from __future__ import annotations

import pytest

from app.application.use_cases.notifications import (
    delete_notification,
    delete_notifications,
    list_notifications,
    list_unread_notifications,
    set_notification_preference,
    update_all_read_state,
    update_notification_read_state,
)
from app.domain.entities import Notification, NotificationChange, NotificationObject
from app.domain.exceptions import NotFoundError
from app.infrastructure.repositories import (
    NotificationPreferenceRepository,
    NotificationRepository,
)
from tests.factories import add_contractor, add_user


async def _notify(
    session,
    user_id: str,
    action: str,
    entity_id: str,
    *,
    actor_id: str | None = None,
    contractor_id: str | None = None,
) -> int:
    repository = NotificationRepository(session)
    notification_action = await repository.get_notification_action_by_name(action)
    [notification_object] = await repository.insert_notification_objects(
        [
            NotificationObject(
                notification_object_id=None,
                action_type_id=notification_action.action_type_id,
                entity_id=entity_id,
                contractor_id=contractor_id,
            )
        ]
    )
    if actor_id:
        await repository.insert_notification_changes(
            [
                NotificationChange(
                    notification_change_id=None,
                    notification_object_id=notification_object.notification_object_id,
                    actor_id=actor_id,
                )
            ]
        )
    [notification] = await repository.insert_notifications(
        [
            Notification(
                notification_id=None,
                notification_object_id=notification_object.notification_object_id,
                notifier_id=user_id,
            )
        ]
    )
    return notification.notification_id


async def test_list_notifications_paginates_and_counts_unread(session):
    for index in range(5):
        await _notify(session, "u1", "order_assigned", f"order-{index}")
    await _notify(session, "u2", "order_assigned", "other")

    page = await list_notifications(session, user_id="u1", page=1, page_size=2)

    assert page.total_count == 5
    assert page.unread_count == 5
    assert page.total_pages == 3
    assert len(page.notifications) == 2
    assert page.has_next and page.has_previous
    assert {item.notifier_id for item in page.notifications} == {"u1"}


async def test_list_notifications_includes_actor_and_contractor(session):
    await add_user(session, "customer")
    await add_contractor(session, "org", {"m1": {"manage_orders": True}})
    await _notify(
        session, "m1", "order_create", "order-1", actor_id="customer", contractor_id="org"
    )

    page = await list_notifications(session, user_id="m1")

    [item] = page.notifications
    assert item.action == "order_create"
    assert item.entity == "orders"
    assert item.actor_id == "customer"
    assert item.actor_username == "customer"
    assert item.contractor_name == "org"


async def test_scope_and_filters(session):
    await _notify(session, "u1", "order_assigned", "order-1")
    await _notify(session, "u1", "order_create", "order-2", contractor_id="org")
    await _notify(session, "u1", "order_create", "order-3", contractor_id="other")

    individual = await list_notifications(session, user_id="u1", scope="individual")
    organization = await list_notifications(session, user_id="u1", scope="organization")
    by_contractor = await list_notifications(session, user_id="u1", contractor_id="org")
    by_action = await list_notifications(session, user_id="u1", action="order_assigned")
    by_entity = await list_notifications(session, user_id="u1", entity_id="order-3")

    assert [n.entity_id for n in individual.notifications] == ["order-1"]
    assert organization.total_count == 2
    assert [n.entity_id for n in by_contractor.notifications] == ["order-2"]
    assert by_action.total_count == 1
    assert [n.entity_id for n in by_entity.notifications] == ["order-3"]


@pytest.mark.parametrize(
    "kwargs",
    [{"page": -1}, {"page_size": 0}, {"page_size": 101}, {"scope": "team"}],
)
async def test_list_notifications_rejects_bad_arguments(session, kwargs):
    with pytest.raises(ValueError):
        await list_notifications(session, user_id="u1", **kwargs)


async def test_update_read_state_for_single_notification(session):
    notification_id = await _notify(session, "u1", "order_assigned", "order-1")

    updated = await update_notification_read_state(
        session, user_id="u1", notification_id=notification_id, read=True
    )

    assert updated.read is True
    assert await list_unread_notifications(session, user_id="u1") == []


async def test_update_read_state_of_other_users_notification_is_not_found(session):
    notification_id = await _notify(session, "u1", "order_assigned", "order-1")

    with pytest.raises(NotFoundError):
        await update_notification_read_state(
            session, user_id="u2", notification_id=notification_id, read=True
        )


async def test_update_all_read_state_counts_only_changed_rows(session):
    first = await _notify(session, "u1", "order_assigned", "order-1")
    await _notify(session, "u1", "order_assigned", "order-2")
    await _notify(session, "u1", "order_assigned", "order-3")
    await update_notification_read_state(session, user_id="u1", notification_id=first, read=True)

    assert await update_all_read_state(session, user_id="u1", read=True) == 2
    assert await update_all_read_state(session, user_id="u1", read=False) == 3


async def test_delete_notification(session):
    notification_id = await _notify(session, "u1", "order_assigned", "order-1")

    with pytest.raises(NotFoundError):
        await delete_notification(session, user_id="u2", notification_id=notification_id)
    await delete_notification(session, user_id="u1", notification_id=notification_id)

    assert (await list_notifications(session, user_id="u1")).total_count == 0


async def test_delete_notifications_by_ids_or_all(session):
    first = await _notify(session, "u1", "order_assigned", "order-1")
    await _notify(session, "u1", "order_assigned", "order-2")
    await _notify(session, "u1", "order_assigned", "order-3")
    await _notify(session, "u2", "order_assigned", "order-4")

    assert await delete_notifications(session, user_id="u1", notification_ids=[first]) == 1
    assert await delete_notifications(session, user_id="u1") == 2
    assert (await list_notifications(session, user_id="u2")).total_count == 1


async def test_set_notification_preference(session):
    preference = await set_notification_preference(
        session, user_id="u1", action="order_message", channel="email", enabled=False
    )

    assert preference.enabled is False
    preferences = NotificationPreferenceRepository(session)
    assert not await preferences.is_enabled_for_action("u1", "order_message", "email")
    assert await preferences.is_enabled_for_action("u1", "order_message", "push")


async def test_set_notification_preference_rejects_unknown_values(session):
    with pytest.raises(ValueError):
        await set_notification_preference(
            session, user_id="u1", action="order_message", channel="sms", enabled=True
        )
    with pytest.raises(NotFoundError):
        await set_notification_preference(
            session, user_id="u1", action="order_archived", channel="push", enabled=True
        )
