"""SMS notification domain events."""

from datetime import UTC, datetime
from typing import Any

from orgnotify.core.events.types import DomainEvent, EventFactory, EventValidator


class SmsNotifEvent(DomainEvent):
    """Fields shared by every SMS notification event."""

    def __init__(self, notif_id: str, tenant_id: str, user_id: str, **kwargs: Any):
        self.notif_id = notif_id
        self.tenant_id = tenant_id
        self.user_id = user_id
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        self.notif_id = EventValidator.validate_string(self.notif_id, "notif_id")
        self.tenant_id = EventValidator.validate_string(self.tenant_id, "tenant_id")
        self.user_id = EventValidator.validate_string(self.user_id, "user_id")


class SmsNotifCreated(SmsNotifEvent):
    """
    Emitted when an SMS notification is created.

    ``provider`` keeps its unmasked config so replay rebuilds a working
    provider. Event stores must treat the payload as secret.
    """

    def __init__(
        self,
        phone_number: dict[str, Any],
        content: dict[str, Any],
        provider: dict[str, Any],
        max_retries: int,
        created_by: str = "system",
        **kwargs: Any,
    ):
        self.phone_number = phone_number
        self.content = content
        self.provider = provider
        self.max_retries = max_retries
        self.created_by = created_by
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.phone_number = EventValidator.validate_dict(self.phone_number, "phone_number")
        self.content = EventValidator.validate_dict(self.content, "content")
        self.provider = EventValidator.validate_dict(self.provider, "provider")
        self.max_retries = EventValidator.validate_integer(
            self.max_retries, "max_retries", min_value=0
        )
        self.created_by = EventValidator.validate_string(self.created_by, "created_by")


class SmsNotifScheduled(SmsNotifEvent):
    def __init__(self, scheduled_at: datetime | str, **kwargs: Any):
        self.scheduled_at = scheduled_at
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.scheduled_at = EventValidator.validate_datetime(
            self.scheduled_at, "scheduled_at"
        )


class SmsNotifSending(SmsNotifEvent):
    """Emitted when the message is handed to the provider."""


class SmsNotifSent(SmsNotifEvent):
    def __init__(self, sent_at: datetime | str | None = None, **kwargs: Any):
        self.sent_at = sent_at or datetime.now(UTC)
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.sent_at = EventValidator.validate_datetime(self.sent_at, "sent_at")


class SmsNotifDelivered(SmsNotifEvent):
    def __init__(self, delivered_at: datetime | str | None = None, **kwargs: Any):
        self.delivered_at = delivered_at or datetime.now(UTC)
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.delivered_at = EventValidator.validate_datetime(
            self.delivered_at, "delivered_at"
        )


class SmsNotifFailed(SmsNotifEvent):
    """Emitted when the provider rejected or lost the message."""

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


class SmsNotifPermanentlyFailed(SmsNotifFailed):
    """Emitted when no further attempts will be made."""


class SmsNotifRetrying(SmsNotifEvent):
    def __init__(self, retry_count: int, **kwargs: Any):
        self.retry_count = retry_count
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.retry_count = EventValidator.validate_integer(
            self.retry_count, "retry_count", min_value=1
        )


class SmsNotifCancelled(SmsNotifEvent):
    def __init__(self, reason: str, **kwargs: Any):
        self.reason = reason
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.reason = EventValidator.validate_string(self.reason, "reason", max_length=500)


SMS_EVENTS = (
    SmsNotifCreated,
    SmsNotifScheduled,
    SmsNotifSending,
    SmsNotifSent,
    SmsNotifDelivered,
    SmsNotifFailed,
    SmsNotifPermanentlyFailed,
    SmsNotifRetrying,
    SmsNotifCancelled,
)

for _event_class in SMS_EVENTS:
    EventFactory.register_event_type(_event_class)


__all__ = [
    "SMS_EVENTS",
    "SmsNotifCancelled",
    "SmsNotifCreated",
    "SmsNotifDelivered",
    "SmsNotifEvent",
    "SmsNotifFailed",
    "SmsNotifPermanentlyFailed",
    "SmsNotifRetrying",
    "SmsNotifScheduled",
    "SmsNotifSending",
    "SmsNotifSent",
]
