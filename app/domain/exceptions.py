"""Errors raised by the notification domain."""


class NotFoundError(LookupError):
    """Raised when a requested record does not exist."""


class NotificationConfigurationError(NotFoundError):
    """Raised when an event refers to an action missing from the catalog."""


__all__ = ["NotFoundError", "NotificationConfigurationError"]
