"""Push notification domain layer.

Aggregates, entities, value objects, events and services for delivering
notifications to FCM, APNS, HUAWEI and XIAOMI devices.
"""

from .aggregates import PushNotifAggregate
from .entities import PushNotifEntity
from .enums import PushPlatform, PushPriority, PushStatus
from .errors import (
    InvalidPushContentError,
    InvalidPushNotifError,
    InvalidPushStatusTransitionError,
    InvalidPushTokenError,
    PushNotificationError,
    PushNotifNotFoundError,
)
from .events import (
    PushNotifCreated,
    PushNotifDelivered,
    PushNotifFailed,
    PushNotifPermanentlyFailed,
    PushNotifRetrying,
    PushNotifScheduled,
    PushNotifSending,
    PushNotifSent,
)
from .services import PushNotifService
from .value_objects import PushContent, PushStatusValue, PushToken

__all__ = [
    "InvalidPushContentError",
    "InvalidPushNotifError",
    "InvalidPushStatusTransitionError",
    "InvalidPushTokenError",
    "PushContent",
    "PushNotifAggregate",
    "PushNotifCreated",
    "PushNotifDelivered",
    "PushNotifEntity",
    "PushNotifFailed",
    "PushNotifNotFoundError",
    "PushNotifPermanentlyFailed",
    "PushNotifRetrying",
    "PushNotifScheduled",
    "PushNotifSending",
    "PushNotifSent",
    "PushNotifService",
    "PushNotificationError",
    "PushPlatform",
    "PushPriority",
    "PushStatus",
    "PushStatusValue",
    "PushToken",
]
