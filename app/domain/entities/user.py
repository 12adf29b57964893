"""Domain entity representing a user."""

from dataclasses import dataclass
from datetime import datetime

USER_ROLE_ADMIN = "admin"
USER_ROLE_USER = "user"


@dataclass
class User:
    """Core attributes describing a platform user."""

    user_id: str
    username: str
    display_name: str | None = None
    email: str | None = None
    email_verified: bool = False
    role: str = USER_ROLE_USER
    created_at: datetime | None = None

    def has_role(self, role: str) -> bool:
        """Return ``True`` when the user's role matches ``role``."""

        return self.role.lower() == role.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.has_role(USER_ROLE_ADMIN)


__all__ = ["USER_ROLE_ADMIN", "USER_ROLE_USER", "User"]
