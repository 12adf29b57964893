"""SQLAlchemy model for the user table."""

from sqlalchemy import Boolean, Column, DateTime, String, func
from sqlalchemy.sql import expression

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class UserModel(Base):
    """Database representation of a platform user."""

    __tablename__ = "user"

    user_id = Column(String(64), primary_key=True)
    username = Column(String(50), nullable=False, unique=True)
    display_name = Column(String(100), nullable=True)
    email = Column(String(120), nullable=True, index=True)
    email_verified = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    role = Column(String(20), nullable=False, default="user")
    created_at = Column(
        DateTime,
        nullable=False,
        default=now_in_app_naive_datetime,
        server_default=func.now(),
    )


__all__ = ["UserModel"]
