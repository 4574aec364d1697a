"""SMS notification domain layer.

Phone numbers, message content, gateway providers and the SMS lifecycle
aggregate, plus the service that picks providers and estimates costs.
"""

from .aggregates import SmsNotif
from .entities import SmsNotifEntity
from .enums import PhoneRegion, SmsEncoding, SmsProviderType, SmsStatus
from .errors import (
    InvalidPhoneNumberError,
    InvalidSmsContentError,
    InvalidSmsOperationError,
    InvalidSmsProviderError,
    InvalidSmsStatusTransitionError,
    SmsNotificationError,
    SmsNotifNotFoundError,
)
from .events import (
    SmsNotifCancelled,
    SmsNotifCreated,
    SmsNotifDelivered,
    SmsNotifFailed,
    SmsNotifPermanentlyFailed,
    SmsNotifRetrying,
    SmsNotifScheduled,
    SmsNotifSending,
    SmsNotifSent,
)
from .services import SmsNotifService
from .value_objects import PhoneNumber, SmsContent, SmsProvider, SmsStatusValue

__all__ = [
    "InvalidPhoneNumberError",
    "InvalidSmsContentError",
    "InvalidSmsOperationError",
    "InvalidSmsProviderError",
    "InvalidSmsStatusTransitionError",
    "PhoneNumber",
    "PhoneRegion",
    "SmsContent",
    "SmsEncoding",
    "SmsNotif",
    "SmsNotifCancelled",
    "SmsNotifCreated",
    "SmsNotifDelivered",
    "SmsNotifEntity",
    "SmsNotifFailed",
    "SmsNotifNotFoundError",
    "SmsNotifPermanentlyFailed",
    "SmsNotifRetrying",
    "SmsNotifScheduled",
    "SmsNotifSending",
    "SmsNotifSent",
    "SmsNotifService",
    "SmsNotificationError",
    "SmsProvider",
    "SmsProviderType",
    "SmsStatus",
    "SmsStatusValue",
]
