"""SMS notification entity."""

from datetime import datetime, timedelta
from typing import Any

from orgnotify.core.config import get_settings
from orgnotify.core.domain.base import Entity, utc_now
from orgnotify.modules.sms_notification.domain.enums import SmsStatus
from orgnotify.modules.sms_notification.domain.errors import InvalidSmsOperationError
from orgnotify.modules.sms_notification.domain.value_objects import (
    PhoneNumber,
    SmsContent,
    SmsProvider,
    SmsStatusValue,
)
from orgnotify.shared.value_objects import NotifId, TenantId, UserId

SENDABLE_STATUSES = (SmsStatus.PENDING, SmsStatus.SCHEDULED, SmsStatus.RETRYING)


class SmsNotifEntity(Entity):
    """
    An SMS addressed to one phone number through one provider.

    The provider must cover the phone's region and the content encoding for
    the whole life of the entity, including after ``update_provider``.
    """

    def __init__(
        self,
        notif_id: NotifId,
        tenant_id: TenantId,
        user_id: UserId,
        phone_number: PhoneNumber,
        content: SmsContent,
        provider: SmsProvider,
        status: SmsStatus = SmsStatus.PENDING,
        retry_count: int = 0,
        max_retries: int = 3,
        created_by: str = "system",
    ):
        self.tenant_id = tenant_id
        self.user_id = user_id
        self.phone_number = phone_number
        self.content = content
        self.provider = provider
        self.scheduled_at: datetime | None = None
        self.sent_at: datetime | None = None
        self.delivered_at: datetime | None = None
        self.failure_reason: str | None = None
        self.retry_count = retry_count
        self.max_retries = max_retries
        self._status = SmsStatusValue(status)

        super().__init__(notif_id, created_by)

    def _validate_entity(self) -> None:
        super()._validate_entity()

        if not self.tenant_id or not self.user_id:
            raise InvalidSmsOperationError("tenant_id and user_id are required")
        if not self.phone_number.can_receive_sms():
            raise InvalidSmsOperationError(
                "Phone number cannot receive SMS", notif_id=str(self.id)
            )
        if not self.provider.supports_region(self.phone_number.region):
            raise InvalidSmsOperationError(
                f"Provider {self.provider.name} does not cover {self.phone_number.region.value}",
                notif_id=str(self.id),
            )
        if not self.provider.supports_encoding(self.content.encoding):
            raise InvalidSmsOperationError(
                f"Provider {self.provider.name} does not support {self.content.encoding.value}",
                notif_id=str(self.id),
            )
        if self.max_retries < 0 or self.retry_count < 0:
            raise InvalidSmsOperationError("Retry counters cannot be negative")
        if self.retry_count > self.max_retries:
            raise InvalidSmsOperationError("retry_count cannot exceed max_retries")

    @property
    def status(self) -> SmsStatus:
        return self._status.status

    # Queries

    def can_send(self) -> bool:
        return (
            self.status in SENDABLE_STATUSES
            and self.phone_number.can_receive_sms()
            and self.provider.is_available()
        )

    def can_retry(self) -> bool:
        return self.status == SmsStatus.FAILED and self.retry_count < self.max_retries

    def is_expired(self, now: datetime | None = None, expiry_hours: int | None = None) -> bool:
        """An SMS scheduled more than ``expiry_hours`` ago is no longer sent."""
        if self.scheduled_at is None:
            return False
        hours = expiry_hours if expiry_hours is not None else get_settings().sms.expiry_hours
        return self.scheduled_at + timedelta(hours=hours) < (now or utc_now())

    # Transitions

    def _transition(self, target: SmsStatus) -> None:
        self._status = self._status.transition_to(target)
        self.mark_modified()

    def mark_as_sending(self) -> None:
        self._transition(SmsStatus.SENDING)

    def mark_as_sent(self, sent_at: datetime | None = None) -> None:
        self._transition(SmsStatus.SENT)
        self.sent_at = sent_at or utc_now()

    def mark_as_delivered(self, delivered_at: datetime | None = None) -> None:
        self._transition(SmsStatus.DELIVERED)
        self.delivered_at = delivered_at or utc_now()

    def mark_as_failed(self, reason: str) -> None:
        self._transition(SmsStatus.FAILED)
        self.failure_reason = reason

    def mark_as_permanently_failed(self, reason: str) -> None:
        self._transition(SmsStatus.PERMANENTLY_FAILED)
        self.failure_reason = reason

    def mark_as_retrying(self) -> None:
        if not self.can_retry():
            raise InvalidSmsOperationError(
                f"Retry limit reached ({self.retry_count}/{self.max_retries})"
                if self.status == SmsStatus.FAILED
                else f"Cannot retry an SMS in status {self.status.value}",
                notif_id=str(self.id),
            )
        self._transition(SmsStatus.RETRYING)
        self.retry_count += 1

    def cancel(self, reason: str) -> None:
        self._transition(SmsStatus.CANCELLED)
        self.failure_reason = reason

    def schedule(
        self,
        scheduled_at: datetime,
        now: datetime | None = None,
        check_future: bool = True,
    ) -> None:
        """Move a pending SMS to SCHEDULED; replays pass ``check_future=False``."""
        if check_future and scheduled_at <= (now or utc_now()):
            raise InvalidSmsOperationError(
                "Scheduled time must be in the future", notif_id=str(self.id)
            )
        self._transition(SmsStatus.SCHEDULED)
        self.scheduled_at = scheduled_at

    # Updates

    def _require_pending(self, action: str) -> None:
        if self.status != SmsStatus.PENDING:
            raise InvalidSmsOperationError(
                f"Only a pending SMS can {action} (status={self.status.value})",
                notif_id=str(self.id),
            )

    def update_content(self, content: SmsContent) -> None:
        self._require_pending("change its content")
        if not self.provider.supports_encoding(content.encoding):
            raise InvalidSmsOperationError(
                f"Provider {self.provider.name} does not support {content.encoding.value}",
                notif_id=str(self.id),
            )
        self.content = content
        self.mark_modified()

    def update_provider(self, provider: SmsProvider) -> None:
        self._require_pending("change its provider")
        if not provider.supports_region(self.phone_number.region):
            raise InvalidSmsOperationError(
                f"Provider {provider.name} does not cover {self.phone_number.region.value}",
                notif_id=str(self.id),
            )
        self.provider = provider
        self.mark_modified()

    def summary(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "phone_number": self.phone_number.masked(),
            "content": self.content.summary(),
            "status": self.status.value,
            "provider": self.provider.name,
            "retry_count": self.retry_count,
            "max_retries": self.max_retries,
            "scheduled_at": _iso(self.scheduled_at),
            "sent_at": _iso(self.sent_at),
            "delivered_at": _iso(self.delivered_at),
        }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
