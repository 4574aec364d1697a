"""Push notification domain errors."""

from typing import Any

from orgnotify.core.errors import (
    DomainError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)


class PushNotificationError(DomainError):
    """Base error for the push notification domain."""

    default_code = "PUSH_NOTIFICATION_ERROR"


class InvalidPushTokenError(ValidationError):
    """Raised when a device token does not match its platform format."""

    default_code = "INVALID_PUSH_TOKEN"

    def __init__(self, reason: str, platform: str | None = None, **kwargs: Any):
        super().__init__(f"Invalid push token: {reason}", field="push_token", **kwargs)
        if platform:
            self.details["platform"] = platform


class InvalidPushContentError(ValidationError):
    """Raised when title, body or media URLs are invalid."""

    default_code = "INVALID_PUSH_CONTENT"

    def __init__(self, reason: str, field: str | None = None, **kwargs: Any):
        super().__init__(f"Invalid push content: {reason}", field=field, **kwargs)


class InvalidPushStatusTransitionError(InvalidStateTransitionError):
    """Raised when a push status move is not in the transition table."""

    default_code = "INVALID_PUSH_STATUS_TRANSITION"

    def __init__(self, from_status: Any, to_status: Any, **kwargs: Any):
        super().__init__("PushNotification", from_status, to_status, **kwargs)


class InvalidPushNotifError(PushNotificationError):
    """Raised when an aggregate operation's precondition does not hold."""

    default_code = "INVALID_PUSH_NOTIFICATION"

    def __init__(self, message: str, notif_id: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if notif_id:
            self.details["notif_id"] = notif_id


class PushNotifNotFoundError(NotFoundError):
    """Raised when a push notification is not found."""

    def __init__(self, notif_id: Any, **kwargs: Any):
        super().__init__(resource="PushNotification", identifier=notif_id, **kwargs)


__all__ = [
    "InvalidPushContentError",
    "InvalidPushNotifError",
    "InvalidPushStatusTransitionError",
    "InvalidPushTokenError",
    "PushNotifNotFoundError",
    "PushNotificationError",
]
