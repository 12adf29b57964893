"""Serialization helpers for notifications sent over websockets."""

from __future__ import annotations

from typing import Any

from app.domain.entities import CompleteNotification, PushPayload


def serialize_notification(notification: CompleteNotification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "notification_id": notification.notification_id,
        "action": notification.action,
        "entity": notification.entity,
        "entity_id": notification.entity_id,
        "read": notification.read,
        "timestamp": notification.created_at.isoformat()
        if notification.created_at
        else None,
        "actor_id": notification.actor_id,
        "actor_username": notification.actor_username,
        "contractor_id": notification.contractor_id,
        "contractor_name": notification.contractor_name,
    }


def serialize_push_payload(
    payload: PushPayload, event_name: str, contractor_id: str | None = None
) -> dict[str, Any]:
    """Wrap ``payload`` in the realtime ``notification`` envelope."""

    return {
        "type": "notification",
        "data": {
            "event": event_name,
            "contractor_id": contractor_id,
            **payload.to_dict(),
        },
    }


__all__ = ["serialize_notification", "serialize_push_payload"]
