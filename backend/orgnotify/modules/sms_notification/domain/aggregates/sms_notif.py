"""SmsNotif aggregate.

Coordinates the SMS lifecycle: guards each command, delegates to the entity
and records one event per transition. Content and provider changes are only
possible while the SMS is pending and are not recorded as events.
"""

from datetime import datetime
from typing import Any

from orgnotify.core.config import get_settings
from orgnotify.core.domain.base import AggregateRoot
from orgnotify.core.events.types import DomainEvent
from orgnotify.core.logging import get_logger
from orgnotify.modules.sms_notification.domain.entities.sms_notif import SmsNotifEntity
from orgnotify.modules.sms_notification.domain.enums import SmsStatus
from orgnotify.modules.sms_notification.domain.errors import InvalidSmsOperationError
from orgnotify.modules.sms_notification.domain.events import (
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
from orgnotify.modules.sms_notification.domain.value_objects import (
    PhoneNumber,
    SmsContent,
    SmsProvider,
)
from orgnotify.shared.value_objects import NotifId, TenantId, UserId

logger = get_logger(__name__)


class SmsNotif(AggregateRoot):
    """Aggregate root wrapping a ``SmsNotifEntity``."""

    def __init__(
        self,
        notif: SmsNotifEntity | None = None,
        notif_id: NotifId | None = None,
    ):
        self.notif = notif
        super().__init__(notif.id if notif else notif_id or NotifId.generate())

    @classmethod
    def create(
        cls,
        tenant_id: TenantId,
        user_id: UserId,
        phone_number: PhoneNumber,
        content: SmsContent,
        provider: SmsProvider,
        max_retries: int | None = None,
        created_by: str = "system",
        notif_id: NotifId | None = None,
    ) -> "SmsNotif":
        """Create a pending SMS and record ``SmsNotifCreated``."""
        if max_retries is None:
            max_retries = get_settings().sms.default_max_retries

        notif = SmsNotifEntity(
            notif_id=notif_id or NotifId.generate(),
            tenant_id=tenant_id,
            user_id=user_id,
            phone_number=phone_number,
            content=content,
            provider=provider,
            max_retries=max_retries,
            created_by=created_by,
        )
        aggregate = cls(notif)
        aggregate.add_event(
            SmsNotifCreated(
                phone_number=phone_number.to_dict(),
                content=content.to_dict(),
                provider=provider.to_dict(mask_config=False),
                max_retries=max_retries,
                created_by=created_by,
                **aggregate._event_fields(),
            )
        )

        logger.info(
            "SMS notification created",
            notif_id=str(notif.id),
            tenant_id=str(tenant_id),
            phone_number=phone_number.masked(),
            provider=provider.name,
            segments=content.segments,
        )
        return aggregate

    @classmethod
    def from_events(cls, events: list[DomainEvent]) -> "SmsNotif":
        """Rebuild an aggregate from its full event stream."""
        if not events or not isinstance(events[0], SmsNotifCreated):
            raise InvalidSmsOperationError("Event stream must start with SmsNotifCreated")

        aggregate = cls(notif_id=NotifId(events[0].notif_id))
        aggregate.replay_events(events)
        return aggregate

    def _require_notif(self) -> SmsNotifEntity:
        if self.notif is None:
            raise InvalidSmsOperationError(
                "SMS notification has not been created", notif_id=str(self.id)
            )
        return self.notif

    def _event_fields(self) -> dict[str, Any]:
        notif = self._require_notif()
        return {
            "notif_id": str(notif.id),
            "tenant_id": str(notif.tenant_id),
            "user_id": str(notif.user_id),
        }

    def _require_status(self, expected: SmsStatus, action: str) -> SmsNotifEntity:
        notif = self._require_notif()
        if notif.status != expected:
            raise InvalidSmsOperationError(
                f"Only a {expected.value.lower()} SMS can {action} "
                f"(status={notif.status.value})",
                notif_id=str(notif.id),
            )
        return notif

    def _log_transition(self, message: str, from_status: SmsStatus, **fields: Any) -> None:
        notif = self._require_notif()
        logger.info(
            message,
            notif_id=str(notif.id),
            from_status=from_status.value,
            to_status=notif.status.value,
            **fields,
        )

    # Commands

    def start_sending(self) -> None:
        notif = self._require_notif()
        if not notif.can_send():
            raise InvalidSmsOperationError(
                f"SMS cannot be sent in status {notif.status.value}",
                notif_id=str(notif.id),
            )

        previous = notif.status
        notif.mark_as_sending()
        self.add_event(SmsNotifSending(**self._event_fields()))
        self._log_transition("SMS sending", previous, provider=notif.provider.name)

    def mark_as_sent(self, sent_at: datetime | None = None) -> None:
        notif = self._require_status(SmsStatus.SENDING, "be marked as sent")
        notif.mark_as_sent(sent_at)
        self.add_event(SmsNotifSent(sent_at=notif.sent_at, **self._event_fields()))
        self._log_transition("SMS sent", SmsStatus.SENDING)

    def mark_as_delivered(self, delivered_at: datetime | None = None) -> None:
        notif = self._require_status(SmsStatus.SENT, "be marked as delivered")
        notif.mark_as_delivered(delivered_at)
        self.add_event(
            SmsNotifDelivered(delivered_at=notif.delivered_at, **self._event_fields())
        )
        self._log_transition("SMS delivered", SmsStatus.SENT)

    def mark_as_failed(self, reason: str) -> None:
        notif = self._require_status(SmsStatus.SENDING, "fail")
        notif.mark_as_failed(reason)
        self.add_event(
            SmsNotifFailed(
                failure_reason=reason,
                retry_count=notif.retry_count,
                **self._event_fields(),
            )
        )
        self._log_transition(
            "SMS failed", SmsStatus.SENDING, reason=reason, retry_count=notif.retry_count
        )

    def mark_as_permanently_failed(self, reason: str) -> None:
        notif = self._require_status(SmsStatus.FAILED, "be marked as permanently failed")
        notif.mark_as_permanently_failed(reason)
        self.add_event(
            SmsNotifPermanentlyFailed(
                failure_reason=reason,
                retry_count=notif.retry_count,
                **self._event_fields(),
            )
        )
        self._log_transition("SMS permanently failed", SmsStatus.FAILED, reason=reason)

    def retry(self) -> None:
        notif = self._require_notif()
        if not notif.can_retry():
            raise InvalidSmsOperationError(
                f"SMS cannot be retried "
                f"(status={notif.status.value}, retries={notif.retry_count}/{notif.max_retries})",
                notif_id=str(notif.id),
            )

        notif.mark_as_retrying()
        self.add_event(
            SmsNotifRetrying(retry_count=notif.retry_count, **self._event_fields())
        )
        self._log_transition(
            "SMS retrying",
            SmsStatus.FAILED,
            retry_count=notif.retry_count,
            max_retries=notif.max_retries,
        )

    def schedule(self, scheduled_at: datetime, now: datetime | None = None) -> None:
        notif = self._require_status(SmsStatus.PENDING, "be scheduled")
        notif.schedule(scheduled_at, now)
        self.add_event(SmsNotifScheduled(scheduled_at=scheduled_at, **self._event_fields()))
        self._log_transition(
            "SMS scheduled", SmsStatus.PENDING, scheduled_at=scheduled_at.isoformat()
        )

    def cancel(self, reason: str) -> None:
        notif = self._require_notif()
        if notif.status.is_final():
            raise InvalidSmsOperationError(
                f"Cannot cancel an SMS in final status {notif.status.value}",
                notif_id=str(notif.id),
            )

        previous = notif.status
        notif.cancel(reason)
        self.add_event(SmsNotifCancelled(reason=reason, **self._event_fields()))
        self._log_transition("SMS cancelled", previous, reason=reason)

    def update_content(self, content: SmsContent) -> None:
        self._require_notif().update_content(content)
        self.mark_modified()

    def update_provider(self, provider: SmsProvider) -> None:
        self._require_notif().update_provider(provider)
        self.mark_modified()
        logger.info(
            "SMS provider changed", notif_id=str(self.id), provider=provider.name
        )

    def summary(self) -> dict[str, Any]:
        return self._require_notif().summary()

    # Event sourcing

    def apply_event(self, event: DomainEvent) -> None:
        handlers = {
            SmsNotifCreated: self._apply_created,
            SmsNotifScheduled: lambda e: self._require_notif().schedule(
                e.scheduled_at, check_future=False
            ),
            SmsNotifSending: lambda e: self._require_notif().mark_as_sending(),
            SmsNotifSent: lambda e: self._require_notif().mark_as_sent(e.sent_at),
            SmsNotifDelivered: lambda e: self._require_notif().mark_as_delivered(
                e.delivered_at
            ),
            SmsNotifFailed: lambda e: self._require_notif().mark_as_failed(
                e.failure_reason
            ),
            SmsNotifPermanentlyFailed: lambda e: self._require_notif().mark_as_permanently_failed(
                e.failure_reason
            ),
            SmsNotifRetrying: lambda e: self._require_notif().mark_as_retrying(),
            SmsNotifCancelled: lambda e: self._require_notif().cancel(e.reason),
        }

        handler = handlers.get(type(event))
        if handler is None:
            logger.warning(
                "Ignoring unknown event during replay",
                aggregate_id=str(self.id),
                event_type=event.event_type,
            )
            return
        handler(event)

    def _apply_created(self, event: SmsNotifCreated) -> None:
        self.notif = SmsNotifEntity(
            notif_id=NotifId(event.notif_id),
            tenant_id=TenantId(event.tenant_id),
            user_id=UserId(event.user_id),
            phone_number=PhoneNumber.from_dict(event.phone_number),
            content=SmsContent.from_dict(event.content),
            provider=SmsProvider.from_dict(event.provider),
            max_retries=event.max_retries,
            created_by=event.created_by,
        )
        self.notif.created_at = event.timestamp
        self.notif.updated_at = event.timestamp
        self.id = self.notif.id

    def __str__(self) -> str:
        status = self.notif.status.value if self.notif else "UNINITIALIZED"
        return f"SmsNotif({self.id}, {status})"
