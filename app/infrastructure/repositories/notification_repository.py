"""Persistence helpers for notification objects, changes and fan-out rows."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import (
    CompleteNotification,
    Notification,
    NotificationAction,
    NotificationChange,
    NotificationObject,
)
from app.domain.exceptions import NotificationConfigurationError
from app.infrastructure.models import (
    ContractorModel,
    NotificationActionModel,
    NotificationChangeModel,
    NotificationModel,
    NotificationObjectModel,
    UserModel,
)
from app.utils import ensure_app_timezone, now_in_app_naive_datetime

SCOPE_ALL = "all"
SCOPE_INDIVIDUAL = "individual"
SCOPE_ORGANIZATION = "organization"
NOTIFICATION_SCOPES = (SCOPE_INDIVIDUAL, SCOPE_ORGANIZATION, SCOPE_ALL)


class NotificationRepository:
    """Action catalog, object store, change log and fan-out table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # -- action catalog -------------------------------------------------

    async def get_notification_action_by_name(self, name: str) -> NotificationAction:
        result = await self.session.execute(
            select(NotificationActionModel).where(NotificationActionModel.action == name)
        )
        model = result.scalar_one_or_none()
        if model is None:
            raise NotificationConfigurationError(f"Unknown notification action '{name}'")
        return self._action_to_entity(model)

    async def list_notification_actions(self) -> Sequence[NotificationAction]:
        result = await self.session.execute(
            select(NotificationActionModel).order_by(NotificationActionModel.action_type_id)
        )
        return [self._action_to_entity(model) for model in result.scalars().all()]

    async def ensure_notification_actions(
        self, actions: Iterable[tuple[str, str]]
    ) -> int:
        """Insert the ``(action, entity)`` pairs missing from the catalog."""

        existing = {action.action for action in await self.list_notification_actions()}
        created = 0
        for name, entity in actions:
            if name in existing:
                continue
            self.session.add(NotificationActionModel(action=name, entity=entity))
            existing.add(name)
            created += 1
        if created:
            await self.session.commit()
        return created

    # -- notification objects ------------------------------------------

    async def insert_notification_objects(
        self, objects: Sequence[NotificationObject]
    ) -> list[NotificationObject]:
        models = []
        now = now_in_app_naive_datetime()
        for notification_object in objects:
            model = NotificationObjectModel(
                action_type_id=notification_object.action_type_id,
                entity_id=notification_object.entity_id,
                contractor_id=notification_object.contractor_id,
                created_at=now,
                updated_at=now,
            )
            self.session.add(model)
            models.append(model)
        await self.session.commit()
        return [self._object_to_entity(model) for model in models]

    async def get_notification_object_by_entity_and_action(
        self, entity_id: str, action_type_id: int
    ) -> NotificationObject | None:
        result = await self.session.execute(
            select(NotificationObjectModel)
            .where(NotificationObjectModel.entity_id == entity_id)
            .where(NotificationObjectModel.action_type_id == action_type_id)
            .order_by(
                NotificationObjectModel.updated_at.desc(),
                NotificationObjectModel.notification_object_id.desc(),
            )
            .limit(1)
        )
        model = result.unique().scalar_one_or_none()
        return self._object_to_entity(model) if model else None

    async def update_notification_object_timestamp(self, notification_object_id: int) -> None:
        await self.session.execute(
            update(NotificationObjectModel)
            .where(NotificationObjectModel.notification_object_id == notification_object_id)
            .values(updated_at=now_in_app_naive_datetime())
        )
        await self.session.commit()

    # -- change log -----------------------------------------------------

    async def insert_notification_changes(
        self, changes: Sequence[NotificationChange]
    ) -> None:
        if not changes:
            return
        now = now_in_app_naive_datetime()
        for change in changes:
            self.session.add(
                NotificationChangeModel(
                    notification_object_id=change.notification_object_id,
                    actor_id=change.actor_id,
                    created_at=now,
                )
            )
        await self.session.commit()

    async def list_notification_changes(
        self, notification_object_id: int
    ) -> Sequence[NotificationChange]:
        result = await self.session.execute(
            select(NotificationChangeModel)
            .where(NotificationChangeModel.notification_object_id == notification_object_id)
            .order_by(NotificationChangeModel.notification_change_id)
        )
        return [
            NotificationChange(
                notification_change_id=model.notification_change_id,
                notification_object_id=model.notification_object_id,
                actor_id=model.actor_id,
                created_at=ensure_app_timezone(model.created_at),
            )
            for model in result.scalars().all()
        ]

    # -- fan-out rows ---------------------------------------------------

    async def insert_notifications(
        self, notifications: Sequence[Notification]
    ) -> list[Notification]:
        if not notifications:
            return []
        models = []
        now = now_in_app_naive_datetime()
        for notification in notifications:
            model = NotificationModel(
                notification_object_id=notification.notification_object_id,
                notifier_id=notification.notifier_id,
                read=notification.read,
                created_at=now,
            )
            self.session.add(model)
            models.append(model)
        await self.session.commit()
        return [self._to_entity(model) for model in models]

    async def get_unread_notification_by_user_and_object(
        self, user_id: str, notification_object_id: int
    ) -> Notification | None:
        result = await self.session.execute(
            select(NotificationModel)
            .where(NotificationModel.notifier_id == user_id)
            .where(NotificationModel.notification_object_id == notification_object_id)
            .where(NotificationModel.read.is_(False))
            .limit(1)
        )
        model = result.unique().scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_notifications_for_object(
        self, notification_object_id: int
    ) -> Sequence[Notification]:
        result = await self.session.execute(
            select(NotificationModel)
            .where(NotificationModel.notification_object_id == notification_object_id)
            .order_by(NotificationModel.notification_id)
        )
        return [self._to_entity(model) for model in result.unique().scalars().all()]

    async def get_notification_for_user(
        self, notification_id: int, user_id: str
    ) -> Notification | None:
        result = await self.session.execute(
            select(NotificationModel)
            .where(NotificationModel.notification_id == notification_id)
            .where(NotificationModel.notifier_id == user_id)
        )
        model = result.unique().scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def update_read_state(
        self,
        user_id: str,
        *,
        read: bool,
        notification_ids: Iterable[int] | None = None,
        only_with_read: bool | None = None,
    ) -> int:
        """Set ``read`` on the user's rows and return how many rows changed."""

        statement = update(NotificationModel).where(NotificationModel.notifier_id == user_id)
        if notification_ids is not None:
            ids = [value for value in notification_ids if value is not None]
            if not ids:
                return 0
            statement = statement.where(NotificationModel.notification_id.in_(ids))
        if only_with_read is not None:
            statement = statement.where(NotificationModel.read.is_(only_with_read))
        result = await self.session.execute(
            statement.values(read=read).execution_options(synchronize_session="fetch")
        )
        await self.session.commit()
        return result.rowcount or 0

    async def delete_for_user(
        self, user_id: str, notification_ids: Iterable[int] | None = None
    ) -> int:
        statement = delete(NotificationModel).where(NotificationModel.notifier_id == user_id)
        if notification_ids is not None:
            ids = [value for value in notification_ids if value is not None]
            if not ids:
                return 0
            statement = statement.where(NotificationModel.notification_id.in_(ids))
        result = await self.session.execute(
            statement.execution_options(synchronize_session="fetch")
        )
        await self.session.commit()
        return result.rowcount or 0

    # -- inbox views ----------------------------------------------------

    async def list_complete_for_user(
        self,
        user_id: str,
        *,
        page: int = 0,
        page_size: int = 20,
        action: str | None = None,
        entity_id: str | None = None,
        scope: str = SCOPE_ALL,
        contractor_id: str | None = None,
        unread_only: bool = False,
    ) -> tuple[list[CompleteNotification], int]:
        """Return one page of the user's inbox and the total row count."""

        filters = self._inbox_filters(
            user_id,
            action=action,
            entity_id=entity_id,
            scope=scope,
            contractor_id=contractor_id,
        )
        if unread_only:
            filters.append(NotificationModel.read.is_(False))

        total = await self.session.scalar(
            select(func.count(NotificationModel.notification_id))
            .select_from(NotificationModel)
            .join(NotificationObjectModel)
            .join(NotificationActionModel)
            .where(*filters)
        )

        result = await self.session.execute(
            select(NotificationModel, NotificationObjectModel, NotificationActionModel)
            .join(
                NotificationObjectModel,
                NotificationModel.notification_object_id
                == NotificationObjectModel.notification_object_id,
            )
            .join(
                NotificationActionModel,
                NotificationObjectModel.action_type_id
                == NotificationActionModel.action_type_id,
            )
            .where(*filters)
            .order_by(
                NotificationModel.created_at.desc(), NotificationModel.notification_id.desc()
            )
            .offset(page * page_size)
            .limit(page_size)
        )
        rows = result.unique().all()
        actors = await self._latest_actors({obj.notification_object_id for _, obj, _ in rows})
        contractors = await self._contractor_names(
            {obj.contractor_id for _, obj, _ in rows if obj.contractor_id}
        )

        notifications = []
        for notification, notification_object, action_model in rows:
            actor_id, actor_username = actors.get(
                notification_object.notification_object_id, (None, None)
            )
            notifications.append(
                CompleteNotification(
                    notification_id=notification.notification_id,
                    notifier_id=notification.notifier_id,
                    action=action_model.action,
                    entity=action_model.entity,
                    entity_id=notification_object.entity_id,
                    read=bool(notification.read),
                    created_at=ensure_app_timezone(notification.created_at),
                    actor_id=actor_id,
                    actor_username=actor_username,
                    contractor_id=notification_object.contractor_id,
                    contractor_name=contractors.get(notification_object.contractor_id),
                )
            )
        return notifications, int(total or 0)

    async def count_unread(
        self,
        user_id: str,
        *,
        action: str | None = None,
        entity_id: str | None = None,
        scope: str = SCOPE_ALL,
        contractor_id: str | None = None,
    ) -> int:
        filters = self._inbox_filters(
            user_id,
            action=action,
            entity_id=entity_id,
            scope=scope,
            contractor_id=contractor_id,
        )
        total = await self.session.scalar(
            select(func.count(NotificationModel.notification_id))
            .select_from(NotificationModel)
            .join(NotificationObjectModel)
            .join(NotificationActionModel)
            .where(*filters, NotificationModel.read.is_(False))
        )
        return int(total or 0)

    @staticmethod
    def _inbox_filters(
        user_id: str,
        *,
        action: str | None,
        entity_id: str | None,
        scope: str,
        contractor_id: str | None,
    ) -> list[Any]:
        if scope not in NOTIFICATION_SCOPES:
            raise ValueError(
                "Invalid scope filter. Must be 'individual', 'organization', or 'all'"
            )
        filters: list[Any] = [NotificationModel.notifier_id == user_id]
        if action:
            filters.append(NotificationActionModel.action == action)
        if entity_id:
            filters.append(NotificationObjectModel.entity_id == entity_id)
        if scope == SCOPE_INDIVIDUAL:
            filters.append(NotificationObjectModel.contractor_id.is_(None))
        elif scope == SCOPE_ORGANIZATION:
            filters.append(NotificationObjectModel.contractor_id.is_not(None))
        if contractor_id:
            filters.append(NotificationObjectModel.contractor_id == contractor_id)
        return filters

    async def _latest_actors(
        self, object_ids: set[int]
    ) -> dict[int, tuple[str, str | None]]:
        if not object_ids:
            return {}
        latest = (
            select(
                NotificationChangeModel.notification_object_id,
                func.max(NotificationChangeModel.notification_change_id).label("change_id"),
            )
            .where(NotificationChangeModel.notification_object_id.in_(object_ids))
            .group_by(NotificationChangeModel.notification_object_id)
            .subquery()
        )
        result = await self.session.execute(
            select(
                NotificationChangeModel.notification_object_id,
                NotificationChangeModel.actor_id,
                UserModel.username,
            )
            .join(latest, NotificationChangeModel.notification_change_id == latest.c.change_id)
            .outerjoin(UserModel, UserModel.user_id == NotificationChangeModel.actor_id)
        )
        return {row[0]: (row[1], row[2]) for row in result.all()}

    async def _contractor_names(self, contractor_ids: set[str]) -> dict[str, str]:
        if not contractor_ids:
            return {}
        result = await self.session.execute(
            select(ContractorModel.contractor_id, ContractorModel.name).where(
                ContractorModel.contractor_id.in_(contractor_ids)
            )
        )
        return {row[0]: row[1] for row in result.all()}

    # -- mapping --------------------------------------------------------

    @staticmethod
    def _action_to_entity(model: NotificationActionModel) -> NotificationAction:
        return NotificationAction(
            action_type_id=model.action_type_id,
            action=model.action,
            entity=model.entity,
        )

    @staticmethod
    def _object_to_entity(model: NotificationObjectModel) -> NotificationObject:
        return NotificationObject(
            notification_object_id=model.notification_object_id,
            action_type_id=model.action_type_id,
            entity_id=model.entity_id,
            contractor_id=model.contractor_id,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            notification_id=model.notification_id,
            notification_object_id=model.notification_object_id,
            notifier_id=model.notifier_id,
            read=bool(model.read),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = [
    "NOTIFICATION_SCOPES",
    "NotificationRepository",
    "SCOPE_ALL",
    "SCOPE_INDIVIDUAL",
    "SCOPE_ORGANIZATION",
]
