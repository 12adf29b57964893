"""Read access to webhook registrations."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import Webhook
from app.infrastructure.models import WebhookModel


class WebhookRepository:
    """Find the webhooks owned by a contractor or user."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_owners(
        self,
        *,
        contractor_id: str | None = None,
        user_id: str | None = None,
        action: str | None = None,
    ) -> Sequence[Webhook]:
        """Return webhooks owned by either owner, optionally filtered by action."""

        conditions = []
        if contractor_id:
            conditions.append(WebhookModel.contractor_id == contractor_id)
        if user_id:
            conditions.append(WebhookModel.user_id == user_id)
        if not conditions:
            return []
        result = await self.session.execute(
            select(WebhookModel).where(or_(*conditions)).order_by(WebhookModel.webhook_id)
        )
        webhooks = [self._to_entity(model) for model in result.scalars().all()]
        if action is None:
            return webhooks
        return [webhook for webhook in webhooks if webhook.subscribes_to(action)]

    @staticmethod
    def _to_entity(model: WebhookModel) -> Webhook:
        return Webhook(
            webhook_id=model.webhook_id,
            name=model.name,
            webhook_url=model.webhook_url,
            actions=list(model.actions or []),
            contractor_id=model.contractor_id,
            user_id=model.user_id,
        )


__all__ = ["WebhookRepository"]
