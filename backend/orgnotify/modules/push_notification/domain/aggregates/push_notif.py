"""PushNotifAggregate: lifecycle of a single push notification.

Every command checks its precondition, mutates the entity, records the
matching event and logs the transition. ``apply_event`` rebuilds the same
state from a stored event stream.
"""

from datetime import datetime
from typing import Any

from orgnotify.core.domain.base import AggregateRoot, utc_now
from orgnotify.core.events.types import DomainEvent
from orgnotify.core.logging import get_logger
from orgnotify.modules.push_notification.domain.entities.push_notif import (
    PushNotifEntity,
)
from orgnotify.modules.push_notification.domain.enums import PushPriority, PushStatus
from orgnotify.modules.push_notification.domain.errors import InvalidPushNotifError
from orgnotify.modules.push_notification.domain.events import (
    PushNotifCreated,
    PushNotifDelivered,
    PushNotifFailed,
    PushNotifPermanentlyFailed,
    PushNotifRetrying,
    PushNotifScheduled,
    PushNotifSending,
    PushNotifSent,
)
from orgnotify.modules.push_notification.domain.value_objects import (
    PushContent,
    PushToken,
)
from orgnotify.shared.value_objects import NotifId, TenantId, UserId

logger = get_logger(__name__)


class PushNotifAggregate(AggregateRoot):
    """Aggregate root wrapping a ``PushNotifEntity``."""

    def __init__(
        self,
        notif: PushNotifEntity | None = None,
        notif_id: NotifId | None = None,
    ):
        self.notif = notif
        super().__init__(notif.id if notif else notif_id or NotifId.generate())

    @classmethod
    def create(
        cls,
        tenant_id: TenantId,
        user_id: UserId,
        push_token: PushToken,
        content: PushContent,
        priority: PushPriority = PushPriority.NORMAL,
        scheduled_at: datetime | None = None,
        metadata: dict[str, Any] | None = None,
        notif_id: NotifId | None = None,
    ) -> "PushNotifAggregate":
        """Create a pending notification and record ``PushNotifCreated``."""
        notif = PushNotifEntity(
            notif_id=notif_id or NotifId.generate(),
            tenant_id=tenant_id,
            user_id=user_id,
            push_token=push_token,
            content=content,
            priority=priority,
            scheduled_at=scheduled_at,
            metadata=metadata,
        )
        aggregate = cls(notif)
        aggregate.add_event(
            PushNotifCreated(
                push_token=push_token.to_dict(),
                content=content.to_dict(),
                max_retries=notif.max_retries,
                scheduled_at=scheduled_at,
                notif_metadata=dict(notif.metadata),
                **aggregate._event_fields(),
            )
        )

        logger.info(
            "Push notification created",
            notif_id=str(notif.id),
            tenant_id=str(tenant_id),
            platform=push_token.platform.value,
            push_token=push_token.masked(),
            priority=priority.value,
        )
        return aggregate

    @classmethod
    def from_events(cls, events: list[DomainEvent]) -> "PushNotifAggregate":
        """Rebuild an aggregate from its full event stream."""
        if not events or not isinstance(events[0], PushNotifCreated):
            raise InvalidPushNotifError("Event stream must start with PushNotifCreated")

        aggregate = cls(notif_id=NotifId(events[0].notif_id))
        aggregate.replay_events(events)
        return aggregate

    def _require_notif(self) -> PushNotifEntity:
        if self.notif is None:
            raise InvalidPushNotifError(
                "Push notification has not been created", notif_id=str(self.id)
            )
        return self.notif

    def _event_fields(self) -> dict[str, Any]:
        notif = self._require_notif()
        return {
            "notif_id": str(notif.id),
            "tenant_id": str(notif.tenant_id),
            "user_id": str(notif.user_id),
            "priority": notif.priority,
        }

    def _log_transition(self, message: str, from_status: PushStatus, **fields: Any) -> None:
        notif = self._require_notif()
        logger.info(
            message,
            notif_id=str(notif.id),
            from_status=from_status.value,
            to_status=notif.status.value,
            **fields,
        )

    # Commands

    def send(self, now: datetime | None = None) -> None:
        """Start delivery of a pending or scheduled notification."""
        notif = self._require_notif()
        if notif.status not in (PushStatus.PENDING, PushStatus.SCHEDULED):
            raise InvalidPushNotifError(
                f"Cannot send a notification in status {notif.status.value}",
                notif_id=str(notif.id),
            )
        if notif.is_expired(now):
            raise InvalidPushNotifError(
                "Cannot send an expired notification", notif_id=str(notif.id)
            )

        previous = notif.status
        notif.mark_as_sending()
        self.add_event(PushNotifSending(**self._event_fields()))
        self._log_transition("Push notification sending", previous)

    def mark_as_sent(self, sent_at: datetime | None = None) -> None:
        notif = self._require_notif()
        if notif.status != PushStatus.SENDING:
            raise InvalidPushNotifError(
                "Only a sending notification can be marked as sent",
                notif_id=str(notif.id),
            )

        notif.mark_as_sent(sent_at)
        self.add_event(PushNotifSent(sent_at=notif.sent_at, **self._event_fields()))
        self._log_transition("Push notification sent", PushStatus.SENDING)

    def mark_as_delivered(self, delivered_at: datetime | None = None) -> None:
        notif = self._require_notif()
        if notif.status != PushStatus.SENT:
            raise InvalidPushNotifError(
                "Only a sent notification can be marked as delivered",
                notif_id=str(notif.id),
            )

        notif.mark_as_delivered(delivered_at)
        self.add_event(
            PushNotifDelivered(delivered_at=notif.delivered_at, **self._event_fields())
        )
        self._log_transition("Push notification delivered", PushStatus.SENT)

    def mark_as_failed(self, reason: str) -> None:
        notif = self._require_notif()
        if not reason or not reason.strip():
            raise InvalidPushNotifError(
                "A failure reason is required", notif_id=str(notif.id)
            )
        if notif.status != PushStatus.SENDING:
            raise InvalidPushNotifError(
                "Only a sending notification can fail", notif_id=str(notif.id)
            )

        notif.mark_as_failed(reason)
        self.add_event(
            PushNotifFailed(
                failure_reason=reason,
                retry_count=notif.retry_count,
                **self._event_fields(),
            )
        )
        self._log_transition(
            "Push notification failed",
            PushStatus.SENDING,
            reason=reason,
            retry_count=notif.retry_count,
        )

    def mark_as_permanently_failed(self, reason: str) -> None:
        notif = self._require_notif()
        if notif.status != PushStatus.FAILED:
            raise InvalidPushNotifError(
                "Only a failed notification can be marked as permanently failed",
                notif_id=str(notif.id),
            )

        notif.mark_as_permanently_failed(reason)
        self.add_event(
            PushNotifPermanentlyFailed(
                failure_reason=reason,
                retry_count=notif.retry_count,
                **self._event_fields(),
            )
        )
        self._log_transition(
            "Push notification permanently failed", PushStatus.FAILED, reason=reason
        )

    def retry(self, now: datetime | None = None) -> None:
        """Resend a failed notification while its retry budget lasts."""
        notif = self._require_notif()
        if not notif.can_retry():
            raise InvalidPushNotifError(
                f"Notification cannot be retried "
                f"(status={notif.status.value}, retries={notif.retry_count}/{notif.max_retries})",
                notif_id=str(notif.id),
            )

        next_retry_time = notif.next_retry_time(now)
        notif.mark_as_retrying()
        self.add_event(
            PushNotifRetrying(
                retry_count=notif.retry_count,
                next_retry_time=next_retry_time,
                **self._event_fields(),
            )
        )
        self._log_transition(
            "Push notification retrying",
            PushStatus.FAILED,
            retry_count=notif.retry_count,
            max_retries=notif.max_retries,
        )

    def schedule(self, scheduled_at: datetime, now: datetime | None = None) -> None:
        notif = self._require_notif()
        if scheduled_at <= (now or utc_now()):
            raise InvalidPushNotifError(
                "Scheduled time must be in the future", notif_id=str(notif.id)
            )
        if notif.status != PushStatus.PENDING:
            raise InvalidPushNotifError(
                "Only a pending notification can be scheduled", notif_id=str(notif.id)
            )

        notif.schedule(scheduled_at)
        self.add_event(
            PushNotifScheduled(scheduled_at=scheduled_at, **self._event_fields())
        )
        self._log_transition(
            "Push notification scheduled",
            PushStatus.PENDING,
            scheduled_at=scheduled_at.isoformat(),
        )

    def update_content(self, content: PushContent) -> None:
        self._require_notif().update_content(content)
        self.mark_modified()

    def update_priority(self, priority: PushPriority) -> None:
        self._require_notif().update_priority(priority)
        self.mark_modified()

    # Event sourcing

    def apply_event(self, event: DomainEvent) -> None:
        handlers = {
            PushNotifCreated: self._apply_created,
            PushNotifScheduled: lambda e: self._require_notif().schedule(e.scheduled_at),
            PushNotifSending: lambda e: self._require_notif().mark_as_sending(),
            PushNotifSent: lambda e: self._require_notif().mark_as_sent(e.sent_at),
            PushNotifDelivered: lambda e: self._require_notif().mark_as_delivered(
                e.delivered_at
            ),
            PushNotifFailed: lambda e: self._require_notif().mark_as_failed(
                e.failure_reason
            ),
            PushNotifPermanentlyFailed: lambda e: self._require_notif().mark_as_permanently_failed(
                e.failure_reason
            ),
            PushNotifRetrying: lambda e: self._require_notif().mark_as_retrying(),
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

    def _apply_created(self, event: PushNotifCreated) -> None:
        self.notif = PushNotifEntity(
            notif_id=NotifId(event.notif_id),
            tenant_id=TenantId(event.tenant_id),
            user_id=UserId(event.user_id),
            push_token=PushToken.from_dict(event.push_token),
            content=PushContent.from_dict(event.content),
            priority=event.priority,
            scheduled_at=event.scheduled_at,
            max_retries=event.max_retries,
            metadata=event.notif_metadata,
        )
        self.notif.created_at = event.timestamp
        self.notif.updated_at = event.timestamp
        self.id = self.notif.id

    def __str__(self) -> str:
        status = self.notif.status.value if self.notif else "UNINITIALIZED"
        return f"PushNotifAggregate({self.id}, {status})"
