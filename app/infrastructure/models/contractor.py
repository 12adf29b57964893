"""SQLAlchemy models for contractors, their roles and role membership."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from app.infrastructure.database import Base


class ContractorModel(Base):
    """Organization that owns orders and market listings."""

    __tablename__ = "contractor"

    contractor_id = Column(String(64), primary_key=True)
    spectrum_id = Column(String(64), nullable=False, unique=True)
    name = Column(String(100), nullable=False)
    owner_role_id = Column(Integer, nullable=True)


class ContractorRoleModel(Base):
    """Named role holding boolean permission flags within a contractor."""

    __tablename__ = "contractor_role"

    role_id = Column(Integer, primary_key=True, autoincrement=True)
    contractor_id = Column(
        String(64),
        ForeignKey("contractor.contractor_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(50), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    manage_orders = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    manage_market = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    manage_invites = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    manage_roles = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )


class ContractorMemberRoleModel(Base):
    """Assignment of a role to a contractor member."""

    __tablename__ = "contractor_member_role"

    user_id = Column(String(64), ForeignKey("user.user_id"), primary_key=True)
    role_id = Column(
        Integer,
        ForeignKey("contractor_role.role_id", ondelete="CASCADE"),
        primary_key=True,
    )

    role = relationship("ContractorRoleModel", lazy="joined")


__all__ = ["ContractorMemberRoleModel", "ContractorModel", "ContractorRoleModel"]
