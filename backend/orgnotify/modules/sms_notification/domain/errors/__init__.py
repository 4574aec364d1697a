"""SMS notification domain errors."""

from typing import Any

from orgnotify.core.errors import (
    DomainError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)


class SmsNotificationError(DomainError):
    """Base error for the SMS notification domain."""

    default_code = "SMS_NOTIFICATION_ERROR"


class InvalidPhoneNumberError(ValidationError):
    """Raised when a phone number is malformed for its region."""

    default_code = "INVALID_PHONE_NUMBER"

    def __init__(self, reason: str, number: str | None = None, **kwargs: Any):
        super().__init__(f"Invalid phone number: {reason}", field="phone_number", **kwargs)
        if number:
            # Only the last digits are kept for diagnostics.
            self.details["number_suffix"] = number[-4:]


class InvalidSmsContentError(ValidationError):
    """Raised when SMS text or signature break the content rules."""

    default_code = "INVALID_SMS_CONTENT"

    def __init__(self, reason: str, field: str | None = None, **kwargs: Any):
        super().__init__(f"Invalid SMS content: {reason}", field=field, **kwargs)


class InvalidSmsProviderError(ValidationError):
    """Raised when a provider definition is incomplete."""

    default_code = "INVALID_SMS_PROVIDER"

    def __init__(self, reason: str, provider_type: str | None = None, **kwargs: Any):
        super().__init__(f"Invalid SMS provider: {reason}", field="provider", **kwargs)
        if provider_type:
            self.details["provider_type"] = provider_type


class InvalidSmsStatusTransitionError(InvalidStateTransitionError):
    """Raised when an SMS status move is not in the transition table."""

    default_code = "INVALID_SMS_STATUS_TRANSITION"

    def __init__(self, from_status: Any, to_status: Any, **kwargs: Any):
        super().__init__("SmsNotification", from_status, to_status, **kwargs)


class InvalidSmsOperationError(SmsNotificationError):
    """Raised when an SMS notification operation is not allowed in its state."""

    default_code = "INVALID_SMS_OPERATION"

    def __init__(self, message: str, notif_id: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if notif_id:
            self.details["notif_id"] = notif_id


class SmsNotifNotFoundError(NotFoundError):
    """Raised when an SMS notification is not found."""

    def __init__(self, notif_id: Any, **kwargs: Any):
        super().__init__(resource="SmsNotification", identifier=notif_id, **kwargs)


__all__ = [
    "InvalidPhoneNumberError",
    "InvalidSmsContentError",
    "InvalidSmsOperationError",
    "InvalidSmsProviderError",
    "InvalidSmsStatusTransitionError",
    "SmsNotifNotFoundError",
    "SmsNotificationError",
]
