from .notification import (
    NotificationBulkDelete,
    NotificationBulkResult,
    NotificationPageRead,
    NotificationPagination,
    NotificationPreferenceRead,
    NotificationPreferenceUpdate,
    NotificationRead,
    NotificationReadUpdate,
)

__all__ = [
    "NotificationBulkDelete",
    "NotificationBulkResult",
    "NotificationPageRead",
    "NotificationPagination",
    "NotificationPreferenceRead",
    "NotificationPreferenceUpdate",
    "NotificationRead",
    "NotificationReadUpdate",
]
