"""Endpoints and websocket handler for the notification inbox."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import (
    APIRouter,
    Body,
    Depends,
    HTTPException,
    Path,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.use_cases.notifications import (
    NotificationPage,
    acknowledge_notifications,
    delete_notification,
    delete_notifications,
    list_notifications,
    list_unread_notifications,
    set_notification_preference,
    update_all_read_state,
    update_notification_read_state,
)
from app.domain.entities import CompleteNotification, User
from app.domain.exceptions import NotFoundError
from app.infrastructure.database import SessionLocal, get_db
from app.infrastructure.notifications import notification_manager, serialize_notification
from app.interfaces.api.dependencies import get_current_user, resolve_current_user
from app.interfaces.api.schemas import (
    NotificationBulkDelete,
    NotificationBulkResult,
    NotificationPageRead,
    NotificationPagination,
    NotificationPreferenceRead,
    NotificationPreferenceUpdate,
    NotificationRead,
    NotificationReadUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notification", tags=["notifications"])


def _notification_to_schema(notification: CompleteNotification) -> NotificationRead:
    return NotificationRead(
        notification_id=notification.notification_id,
        action=notification.action,
        entity=notification.entity,
        entity_id=notification.entity_id,
        read=notification.read,
        timestamp=notification.created_at,
        actor_id=notification.actor_id,
        actor_username=notification.actor_username,
        contractor_id=notification.contractor_id,
        contractor_name=notification.contractor_name,
    )


def _page_to_schema(page: NotificationPage) -> NotificationPageRead:
    return NotificationPageRead(
        notifications=[_notification_to_schema(item) for item in page.notifications],
        pagination=NotificationPagination(
            current_page=page.page,
            page_size=page.page_size,
            total_items=page.total_count,
            total_pages=page.total_pages,
            has_next=page.has_next,
            has_previous=page.has_previous,
        ),
        unread_count=page.unread_count,
    )


@router.put("/preferences", response_model=NotificationPreferenceRead)
async def update_preference(
    payload: NotificationPreferenceUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationPreferenceRead:
    """Enable or disable push or email delivery for one notification action."""

    try:
        preference = await set_notification_preference(
            db,
            user_id=current_user.user_id,
            action=payload.action,
            channel=payload.channel,
            enabled=payload.enabled,
            contractor_id=payload.contractor_id,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return NotificationPreferenceRead.model_validate(preference)


@router.get("/{page}", response_model=NotificationPageRead)
async def get_notifications(
    page: int = Path(..., ge=0),
    page_size: int = Query(20, ge=1, le=100),
    action: str | None = Query(None),
    entity_id: str | None = Query(None),
    scope: str = Query("all"),
    contractor_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationPageRead:
    """Return a page of the authenticated user's notifications."""

    try:
        result = await list_notifications(
            db,
            user_id=current_user.user_id,
            page=page,
            page_size=page_size,
            action=action,
            entity_id=entity_id,
            scope=scope,
            contractor_id=contractor_id,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _page_to_schema(result)


@router.patch("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_notification(
    payload: NotificationReadUpdate,
    notification_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    """Mark a single notification as read or unread."""

    try:
        await update_notification_read_state(
            db,
            user_id=current_user.user_id,
            notification_id=notification_id,
            read=payload.read,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.patch("", response_model=NotificationBulkResult)
async def update_all_notifications(
    payload: NotificationReadUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationBulkResult:
    """Mark every notification of the user as read or unread."""

    affected = await update_all_read_state(db, user_id=current_user.user_id, read=payload.read)
    state = "read" if payload.read else "unread"
    return NotificationBulkResult(
        message=f"Marked {affected} notification(s) as {state}", affected_count=affected
    )


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_notification(
    notification_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    """Delete a single notification owned by the user."""

    try:
        await delete_notification(
            db, user_id=current_user.user_id, notification_id=notification_id
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.delete("", response_model=NotificationBulkResult)
async def remove_notifications(
    payload: NotificationBulkDelete | None = Body(default=None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationBulkResult:
    """Delete the listed notifications, or all of them when no ids are given."""

    ids = payload.unique_ids() if payload else []
    affected = await delete_notifications(
        db, user_id=current_user.user_id, notification_ids=ids
    )
    return NotificationBulkResult(
        message=f"Deleted {affected} notification(s)", affected_count=affected
    )


def _notification_to_payload(notification: CompleteNotification) -> dict[str, Any]:
    return serialize_notification(notification)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    async with SessionLocal() as session:
        try:
            user = await resolve_current_user(token, session)
            pending_notifications = await list_unread_notifications(
                session, user_id=user.user_id
            )
        except HTTPException:
            await websocket.close(code=1008)
            return

    await notification_manager.connect(user.user_id, websocket)
    try:
        await websocket.send_json(
            {
                "type": "init",
                "data": [_notification_to_payload(n) for n in pending_notifications],
            }
        )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                raw_ids = message.get("ids")
                if not isinstance(raw_ids, list):
                    continue
                ids = [value for value in raw_ids if isinstance(value, int)]
                if ids:
                    async with SessionLocal() as ack_session:
                        await acknowledge_notifications(
                            ack_session, user_id=user.user_id, notification_ids=ids
                        )
                continue
    except WebSocketDisconnect:
        notification_manager.disconnect(user.user_id, websocket)
    except Exception:  # pragma: no cover - connection errors depend on the client
        notification_manager.disconnect(user.user_id, websocket)
        raise
