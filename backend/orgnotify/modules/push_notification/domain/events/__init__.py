"""Push notification domain events.

One event per lifecycle transition. Payload fields are plain values (ids as
strings, enums, aware datetimes, dicts) so every event survives a
``to_dict``/``from_dict`` round trip.
"""

from datetime import UTC, datetime
from typing import Any

from orgnotify.core.events.types import DomainEvent, EventFactory, EventValidator
from orgnotify.modules.push_notification.domain.enums import PushPriority


class PushNotifEvent(DomainEvent):
    """Fields shared by every push notification event."""

    def __init__(
        self,
        notif_id: str,
        tenant_id: str,
        user_id: str,
        priority: PushPriority | str = PushPriority.NORMAL,
        **kwargs: Any,
    ):
        self.notif_id = notif_id
        self.tenant_id = tenant_id
        self.user_id = user_id
        self.priority = priority
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        self.notif_id = EventValidator.validate_string(self.notif_id, "notif_id")
        self.tenant_id = EventValidator.validate_string(self.tenant_id, "tenant_id")
        self.user_id = EventValidator.validate_string(self.user_id, "user_id")
        self.priority = EventValidator.validate_enum(
            self.priority, PushPriority, "priority"
        )


class PushNotifCreated(PushNotifEvent):
    """Emitted when a push notification is created."""

    def __init__(
        self,
        push_token: dict[str, Any],
        content: dict[str, Any],
        max_retries: int,
        scheduled_at: datetime | str | None = None,
        notif_metadata: dict[str, Any] | None = None,
        **kwargs: Any,
    ):
        self.push_token = push_token
        self.content = content
        self.max_retries = max_retries
        self.scheduled_at = scheduled_at
        self.notif_metadata = notif_metadata or {}
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.push_token = EventValidator.validate_dict(self.push_token, "push_token")
        self.content = EventValidator.validate_dict(self.content, "content")
        self.max_retries = EventValidator.validate_integer(
            self.max_retries, "max_retries", min_value=0
        )
        self.scheduled_at = EventValidator.validate_datetime(
            self.scheduled_at, "scheduled_at", required=False
        )


class PushNotifScheduled(PushNotifEvent):
    """Emitted when a pending notification is scheduled for later."""

    def __init__(self, scheduled_at: datetime | str, **kwargs: Any):
        self.scheduled_at = scheduled_at
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.scheduled_at = EventValidator.validate_datetime(
            self.scheduled_at, "scheduled_at"
        )


class PushNotifSending(PushNotifEvent):
    """Emitted when delivery to the platform starts."""


class PushNotifSent(PushNotifEvent):
    """Emitted when the platform accepted the notification."""

    def __init__(self, sent_at: datetime | str | None = None, **kwargs: Any):
        self.sent_at = sent_at or datetime.now(UTC)
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.sent_at = EventValidator.validate_datetime(self.sent_at, "sent_at")


class PushNotifDelivered(PushNotifEvent):
    """Emitted when the device confirmed delivery."""

    def __init__(self, delivered_at: datetime | str | None = None, **kwargs: Any):
        self.delivered_at = delivered_at or datetime.now(UTC)
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.delivered_at = EventValidator.validate_datetime(
            self.delivered_at, "delivered_at"
        )


class PushNotifFailed(PushNotifEvent):
    """Emitted when a delivery attempt failed."""

    def __init__(self, failure_reason: str, retry_count: int = 0, **kwargs: Any):
        self.failure_reason = failure_reason
        self.retry_count = retry_count
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.failure_reason = EventValidator.validate_string(
            self.failure_reason, "failure_reason", max_length=500
        )
        self.retry_count = EventValidator.validate_integer(
            self.retry_count, "retry_count", min_value=0
        )


class PushNotifPermanentlyFailed(PushNotifFailed):
    """Emitted when a failed notification is given up on."""


class PushNotifRetrying(PushNotifEvent):
    """Emitted when a failed notification is sent again."""

    def __init__(
        self,
        retry_count: int,
        next_retry_time: datetime | str | None = None,
        **kwargs: Any,
    ):
        self.retry_count = retry_count
        self.next_retry_time = next_retry_time
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.retry_count = EventValidator.validate_integer(
            self.retry_count, "retry_count", min_value=1
        )
        self.next_retry_time = EventValidator.validate_datetime(
            self.next_retry_time, "next_retry_time", required=False
        )


PUSH_EVENTS = (
    PushNotifCreated,
    PushNotifScheduled,
    PushNotifSending,
    PushNotifSent,
    PushNotifDelivered,
    PushNotifFailed,
    PushNotifPermanentlyFailed,
    PushNotifRetrying,
)

for _event_class in PUSH_EVENTS:
    EventFactory.register_event_type(_event_class)


__all__ = [
    "PUSH_EVENTS",
    "PushNotifCreated",
    "PushNotifDelivered",
    "PushNotifEvent",
    "PushNotifFailed",
    "PushNotifPermanentlyFailed",
    "PushNotifRetrying",
    "PushNotifScheduled",
    "PushNotifSending",
    "PushNotifSent",
]
