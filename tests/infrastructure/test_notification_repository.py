"""SQLite-backed tests for the notification and preference repositories."""

from __future__ import annotations

import pytest

from app.domain.entities import (
    Notification,
    NotificationChange,
    NotificationObject,
    NotificationPreference,
)
from app.domain.exceptions import NotificationConfigurationError
from app.infrastructure.repositories import (
    NotificationPreferenceRepository,
    NotificationRepository,
)


async def _object(repository: NotificationRepository, action: str, entity_id: str, **kwargs):
    notification_action = await repository.get_notification_action_by_name(action)
    [created] = await repository.insert_notification_objects(
        [
            NotificationObject(
                notification_object_id=None,
                action_type_id=notification_action.action_type_id,
                entity_id=entity_id,
                **kwargs,
            )
        ]
    )
    return created


async def test_unknown_action_raises(session):
    repository = NotificationRepository(session)

    with pytest.raises(NotificationConfigurationError):
        await repository.get_notification_action_by_name("order_archived")


async def test_catalog_is_seeded_once(session):
    repository = NotificationRepository(session)

    actions = await repository.list_notification_actions()
    created = await repository.ensure_notification_actions([("order_create", "orders")])

    assert len(actions) == 17
    assert created == 0


async def test_ensure_notification_actions_adds_missing_rows(session):
    repository = NotificationRepository(session)

    created = await repository.ensure_notification_actions(
        [("order_archived", "orders"), ("order_archived", "orders")]
    )

    assert created == 1
    assert (await repository.get_notification_action_by_name("order_archived")).entity == "orders"


async def test_object_lookup_returns_latest_match(session):
    repository = NotificationRepository(session)
    first = await _object(repository, "order_message", "order-1")
    second = await _object(repository, "order_message", "order-1")
    await _object(repository, "order_comment", "order-1")

    action = await repository.get_notification_action_by_name("order_message")
    found = await repository.get_notification_object_by_entity_and_action(
        "order-1", action.action_type_id
    )
    missing = await repository.get_notification_object_by_entity_and_action(
        "order-2", action.action_type_id
    )

    assert found.notification_object_id == second.notification_object_id
    assert found.notification_object_id != first.notification_object_id
    assert missing is None


async def test_touching_an_object_moves_updated_at(session):
    repository = NotificationRepository(session)
    created = await _object(repository, "order_message", "order-1")

    await repository.update_notification_object_timestamp(created.notification_object_id)
    action = await repository.get_notification_action_by_name("order_message")
    found = await repository.get_notification_object_by_entity_and_action(
        "order-1", action.action_type_id
    )

    assert found.updated_at >= created.updated_at
    assert found.created_at == created.created_at


async def test_changes_are_appended_in_order(session):
    repository = NotificationRepository(session)
    created = await _object(repository, "order_message", "order-1")
    object_id = created.notification_object_id

    for actor in ("a", "b", "a"):
        await repository.insert_notification_changes(
            [NotificationChange(None, object_id, actor)]
        )

    changes = await repository.list_notification_changes(object_id)
    assert [change.actor_id for change in changes] == ["a", "b", "a"]


async def test_unread_lookup_ignores_read_rows(session):
    repository = NotificationRepository(session)
    created = await _object(repository, "order_message", "order-1")
    object_id = created.notification_object_id
    [row] = await repository.insert_notifications([Notification(None, object_id, "u1")])

    assert (
        await repository.get_unread_notification_by_user_and_object("u1", object_id)
    ).notification_id == row.notification_id

    await repository.update_read_state("u1", read=True, notification_ids=[row.notification_id])

    assert await repository.get_unread_notification_by_user_and_object("u1", object_id) is None
    assert await repository.get_unread_notification_by_user_and_object("u2", object_id) is None


async def test_read_state_and_delete_are_scoped_to_user(session):
    repository = NotificationRepository(session)
    created = await _object(repository, "order_assigned", "order-1")
    object_id = created.notification_object_id
    rows = await repository.insert_notifications(
        [Notification(None, object_id, "u1"), Notification(None, object_id, "u2")]
    )
    other_id = rows[1].notification_id

    assert await repository.update_read_state("u1", read=True, notification_ids=[other_id]) == 0
    assert await repository.update_read_state("u1", read=True, notification_ids=[]) == 0
    assert await repository.delete_for_user("u1", [other_id]) == 0
    assert await repository.delete_for_user("u1") == 1
    assert len(await repository.list_notifications_for_object(object_id)) == 1


async def test_invalid_scope_is_rejected(session):
    with pytest.raises(ValueError):
        await NotificationRepository(session).count_unread("u1", scope="everyone")


async def test_preferences_default_to_enabled(session):
    preferences = NotificationPreferenceRepository(session)
    action = await NotificationRepository(session).get_notification_action_by_name(
        "order_assigned"
    )

    assert await preferences.is_enabled("u1", action.action_type_id, "push")
    assert await preferences.is_enabled("u1", action.action_type_id, "email", "org")


async def test_contractor_preference_overrides_global(session):
    preferences = NotificationPreferenceRepository(session)
    action = await NotificationRepository(session).get_notification_action_by_name(
        "order_create"
    )
    action_id = action.action_type_id

    await preferences.set_preference(NotificationPreference("u1", action_id, "email", False))
    await preferences.set_preference(
        NotificationPreference("u1", action_id, "email", True, contractor_id="org")
    )

    assert not await preferences.is_enabled("u1", action_id, "email")
    assert await preferences.is_enabled("u1", action_id, "email", "org")
    assert not await preferences.is_enabled("u1", action_id, "email", "other")


async def test_set_preference_updates_existing_row(session):
    preferences = NotificationPreferenceRepository(session)
    action = await NotificationRepository(session).get_notification_action_by_name(
        "order_create"
    )

    await preferences.set_preference(
        NotificationPreference("u1", action.action_type_id, "push", False)
    )
    await preferences.set_preference(
        NotificationPreference("u1", action.action_type_id, "push", True)
    )

    stored = await preferences.list_for_user("u1")
    assert [(item.channel, item.enabled) for item in stored] == [("push", True)]


async def test_preference_for_unknown_action_is_enabled(session, caplog):
    preferences = NotificationPreferenceRepository(session)

    with caplog.at_level("WARNING"):
        enabled = await preferences.is_enabled_for_action("u1", "order_archived", "push")

    assert enabled is True
    assert "order_archived not found" in caplog.text


async def test_unknown_channel_is_rejected(session):
    with pytest.raises(ValueError):
        await NotificationPreferenceRepository(session).is_enabled("u1", 1, "sms")
