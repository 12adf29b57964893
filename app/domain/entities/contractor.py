"""Domain entities describing contractors (organizations) and their invites."""

from dataclasses import dataclass

PERMISSION_MANAGE_ORDERS = "manage_orders"
PERMISSION_MANAGE_MARKET = "manage_market"
PERMISSION_MANAGE_INVITES = "manage_invites"
PERMISSION_MANAGE_ROLES = "manage_roles"

CONTRACTOR_PERMISSIONS = (
    PERMISSION_MANAGE_ORDERS,
    PERMISSION_MANAGE_MARKET,
    PERMISSION_MANAGE_INVITES,
    PERMISSION_MANAGE_ROLES,
)


@dataclass
class Contractor:
    """Organization whose members hold role-based permissions."""

    contractor_id: str
    spectrum_id: str
    name: str
    owner_role_id: int | None = None


@dataclass
class ContractorInvite:
    """Invitation for a user to join a contractor."""

    invite_id: str
    contractor_id: str
    user_id: str
    message: str = ""


__all__ = [
    "CONTRACTOR_PERMISSIONS",
    "PERMISSION_MANAGE_INVITES",
    "PERMISSION_MANAGE_MARKET",
    "PERMISSION_MANAGE_ORDERS",
    "PERMISSION_MANAGE_ROLES",
    "Contractor",
    "ContractorInvite",
]
