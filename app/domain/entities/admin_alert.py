"""Domain entity representing an alert broadcast by an administrator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AlertTargetType(str, Enum):
    """Audience an admin alert is addressed to."""

    ALL_USERS = "all_users"
    ORG_MEMBERS = "org_members"
    ORG_OWNERS = "org_owners"
    ADMINS_ONLY = "admins_only"
    SPECIFIC_ORG = "specific_org"


@dataclass
class AdminAlert:
    """Announcement created by an administrator."""

    alert_id: str
    title: str
    content: str
    target_type: AlertTargetType
    created_by: str
    target_contractor_id: str | None = None
    created_at: datetime | None = None


__all__ = ["AdminAlert", "AlertTargetType"]
