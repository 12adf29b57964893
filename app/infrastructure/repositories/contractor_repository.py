"""Read-only access to contractors and their role-based membership."""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities import CONTRACTOR_PERMISSIONS, Contractor
from app.infrastructure.models import (
    ContractorMemberRoleModel,
    ContractorModel,
    ContractorRoleModel,
)


class ContractorRepository:
    """Resolve contractor members filtered by role permission flags."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, contractor_id: str) -> Contractor | None:
        model = await self.session.get(ContractorModel, contractor_id)
        return self._to_entity(model) if model else None

    async def get_members_with_matching_role(
        self, contractor_id: str, permissions: Mapping[str, bool]
    ) -> list[str]:
        """Return ids of members holding a role that matches every flag given."""

        statement = (
            select(ContractorMemberRoleModel.user_id)
            .join(
                ContractorRoleModel,
                ContractorMemberRoleModel.role_id == ContractorRoleModel.role_id,
            )
            .where(ContractorRoleModel.contractor_id == contractor_id)
        )
        for flag, value in permissions.items():
            if flag not in CONTRACTOR_PERMISSIONS:
                raise ValueError(f"Unknown contractor permission '{flag}'")
            statement = statement.where(getattr(ContractorRoleModel, flag).is_(value))
        result = await self.session.execute(
            statement.distinct().order_by(ContractorMemberRoleModel.user_id)
        )
        return list(result.scalars().all())

    async def get_member_ids(self, contractor_id: str | None = None) -> list[str]:
        """Return members of ``contractor_id``, or of any contractor when omitted."""

        statement = select(ContractorMemberRoleModel.user_id).join(
            ContractorRoleModel,
            ContractorMemberRoleModel.role_id == ContractorRoleModel.role_id,
        )
        if contractor_id is not None:
            statement = statement.where(ContractorRoleModel.contractor_id == contractor_id)
        result = await self.session.execute(
            statement.distinct().order_by(ContractorMemberRoleModel.user_id)
        )
        return list(result.scalars().all())

    async def get_owner_ids(self, contractor_id: str | None = None) -> list[str]:
        """Return users holding the owner role of ``contractor_id`` or of any contractor."""

        statement = (
            select(ContractorMemberRoleModel.user_id)
            .join(
                ContractorRoleModel,
                ContractorMemberRoleModel.role_id == ContractorRoleModel.role_id,
            )
            .join(
                ContractorModel,
                ContractorModel.owner_role_id == ContractorRoleModel.role_id,
            )
        )
        if contractor_id is not None:
            statement = statement.where(ContractorModel.contractor_id == contractor_id)
        result = await self.session.execute(
            statement.distinct().order_by(ContractorMemberRoleModel.user_id)
        )
        return list(result.scalars().all())

    @staticmethod
    def _to_entity(model: ContractorModel) -> Contractor:
        return Contractor(
            contractor_id=model.contractor_id,
            spectrum_id=model.spectrum_id,
            name=model.name,
            owner_role_id=model.owner_role_id,
        )


__all__ = ["ContractorRepository"]
