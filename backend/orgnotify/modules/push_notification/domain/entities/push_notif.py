"""Push notification entity."""

from datetime import datetime, timedelta
from typing import Any

from orgnotify.core.domain.base import Entity, utc_now
from orgnotify.modules.push_notification.domain.enums import PushPriority, PushStatus
from orgnotify.modules.push_notification.domain.errors import InvalidPushNotifError
from orgnotify.modules.push_notification.domain.value_objects import (
    PushContent,
    PushStatusValue,
    PushToken,
)
from orgnotify.shared.value_objects import NotifId, TenantId, UserId


class PushNotifEntity(Entity):
    """
    A push notification addressed to one device.

    Status changes go through ``PushStatusValue`` so an illegal move raises
    ``InvalidPushStatusTransitionError`` and leaves the entity untouched.
    """

    def __init__(
        self,
        notif_id: NotifId,
        tenant_id: TenantId,
        user_id: UserId,
        push_token: PushToken,
        content: PushContent,
        priority: PushPriority = PushPriority.NORMAL,
        scheduled_at: datetime | None = None,
        max_retries: int | None = None,
        metadata: dict[str, Any] | None = None,
        status: PushStatus = PushStatus.PENDING,
        created_by: str = "system",
    ):
        self.tenant_id = tenant_id
        self.user_id = user_id
        self.push_token = push_token
        self.content = content
        self.priority = priority
        self.scheduled_at = scheduled_at
        self.sent_at: datetime | None = None
        self.delivered_at: datetime | None = None
        self.failure_reason: str | None = None
        self.retry_count = 0
        self.max_retries = priority.retry_count() if max_retries is None else max_retries
        self.metadata = dict(metadata) if metadata else {}
        self._status = PushStatusValue(status)

        super().__init__(notif_id, created_by)

    def _validate_entity(self) -> None:
        super()._validate_entity()

        if not isinstance(self.push_token, PushToken):
            raise InvalidPushNotifError("push_token must be a PushToken")
        if not isinstance(self.content, PushContent):
            raise InvalidPushNotifError("content must be a PushContent")
        if not isinstance(self.priority, PushPriority):
            raise InvalidPushNotifError("priority must be a PushPriority")
        if self.max_retries < 0:
            raise InvalidPushNotifError("max_retries cannot be negative")

    @property
    def status(self) -> PushStatus:
        return self._status.status

    # Queries

    def is_retrying(self) -> bool:
        return self.status == PushStatus.FAILED and self.retry_count > 0

    def can_retry(self) -> bool:
        return self.status == PushStatus.FAILED and self.retry_count < self.max_retries

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the priority's expiration window has passed."""
        now = now or utc_now()
        start = self.scheduled_at or self.created_at
        return start + timedelta(milliseconds=self.priority.expiration_ms()) < now

    def should_send_now(self, now: datetime | None = None) -> bool:
        now = now or utc_now()
        if self.status == PushStatus.PENDING:
            return True
        return (
            self.status == PushStatus.SCHEDULED
            and self.scheduled_at is not None
            and now >= self.scheduled_at
        )

    def next_retry_time(self, now: datetime | None = None) -> datetime | None:
        if not self.can_retry():
            return None
        now = now or utc_now()
        return now + timedelta(milliseconds=self.priority.retry_interval_ms())

    # Transitions

    def _transition(self, target: PushStatus) -> None:
        self._status = self._status.transition_to(target)
        self.mark_modified()

    def mark_as_sending(self) -> None:
        self._transition(PushStatus.SENDING)

    def mark_as_sent(self, sent_at: datetime | None = None) -> None:
        self._transition(PushStatus.SENT)
        self.sent_at = sent_at or utc_now()

    def mark_as_delivered(self, delivered_at: datetime | None = None) -> None:
        self._transition(PushStatus.DELIVERED)
        self.delivered_at = delivered_at or utc_now()

    def mark_as_failed(self, reason: str) -> None:
        self._transition(PushStatus.FAILED)
        self.failure_reason = reason

    def mark_as_permanently_failed(self, reason: str) -> None:
        self._transition(PushStatus.PERMANENTLY_FAILED)
        self.failure_reason = reason

    def mark_as_retrying(self) -> None:
        """Move a failed notification back to SENDING and count the attempt."""
        if not self.can_retry():
            raise InvalidPushNotifError(
                f"Retry limit reached ({self.retry_count}/{self.max_retries})"
                if self.status == PushStatus.FAILED
                else f"Cannot retry a notification in status {self.status.value}",
                notif_id=str(self.id),
            )
        self._transition(PushStatus.SENDING)
        self.retry_count += 1

    def schedule(self, scheduled_at: datetime) -> None:
        self._transition(PushStatus.SCHEDULED)
        self.scheduled_at = scheduled_at

    # Updates

    def update_content(self, content: PushContent) -> None:
        if self.status in (PushStatus.SENT, PushStatus.DELIVERED):
            raise InvalidPushNotifError(
                "Cannot update content of a notification that was already sent",
                notif_id=str(self.id),
            )
        self.content = content
        self.mark_modified()

    def update_priority(self, priority: PushPriority) -> None:
        """Change the priority; the retry budget follows the new level."""
        self.priority = priority
        self.max_retries = priority.retry_count()
        self.mark_modified()

    def update_metadata(self, metadata: dict[str, Any]) -> None:
        self.metadata = {**self.metadata, **metadata}
        self.mark_modified()

    def get_platform_content(self) -> dict[str, Any]:
        return self.content.get_platform_content(self.push_token.platform)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "user_id": str(self.user_id),
            "push_token": self.push_token.masked(),
            "platform": self.push_token.platform.value,
            "content": self.content.to_dict(),
            "status": self.status.value,
            "priority": self.priority.value,
            "scheduled_at": _iso(self.scheduled_at),
            "sent_at": _iso(self.sent_at),
            "delivered_at": _iso(self.delivered_at),
            "failure_reason": self.failure_reason,
            "retry_count": self.retry_count,
            "max_retries": self.max_retries,
            "metadata": dict(self.metadata),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
