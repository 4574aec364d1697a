"""Push notification domain service.

Stateless checks and calculations that span several notifications or
combine content, user preferences and sending context.
"""

from datetime import datetime
from typing import Any

from orgnotify.core.config import PushSettings, get_settings
from orgnotify.core.domain.base import DomainService, utc_now
from orgnotify.core.logging import get_logger
from orgnotify.modules.push_notification.domain.entities.push_notif import (
    PushNotifEntity,
)
from orgnotify.modules.push_notification.domain.enums import PushPriority, PushStatus
from orgnotify.modules.push_notification.domain.value_objects import (
    PushContent,
    PushToken,
)

logger = get_logger(__name__)

URGENT_KEYWORDS = ("urgent", "紧急")
IMPORTANT_KEYWORDS = ("important", "重要")

QUIET_HOURS_START = 22
QUIET_HOURS_END = 6

# Context adjustments never push a notification below LOW.
SOFTENABLE = (PushPriority.CRITICAL, PushPriority.HIGH, PushPriority.NORMAL)
BOOSTABLE = (PushPriority.LOW, PushPriority.NORMAL)


class PushNotifService(DomainService):
    """Validation, priority scoring and metrics for push notifications."""

    def __init__(self, settings: PushSettings | None = None):
        self.settings = settings or get_settings().push

    def can_send_push_notif(
        self,
        push_token: PushToken | None,
        content: PushContent | None,
        priority: PushPriority | str | None,
    ) -> bool:
        """Check that a token, content and priority form a sendable notification."""
        return (
            self._is_valid_token(push_token)
            and self._is_valid_content(content)
            and self._is_valid_priority(priority)
        )

    def calculate_optimal_priority(
        self,
        content: PushContent,
        user_preferences: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> PushPriority:
        """
        Score a priority from keywords, then adjust it.

        Adjustments are applied in order: user preference, working hours
        context, then quiet hours (22:00-06:00 of ``context["now"]``).
        """
        user_preferences = user_preferences or {}
        context = context or {}

        priority = self._base_priority(content)

        if user_preferences.get("prefer_low_priority"):
            priority = _soften(priority)

        if context.get("is_working_hours"):
            priority = _boost(priority)
        elif context.get("is_non_working_hours"):
            priority = _soften(priority)

        now: datetime = context.get("now") or utc_now()
        if now.hour >= QUIET_HOURS_START or now.hour < QUIET_HOURS_END:
            priority = _soften(priority)

        logger.debug(
            "Calculated push priority",
            priority=priority.value,
            prefer_low_priority=bool(user_preferences.get("prefer_low_priority")),
        )
        return priority

    def validate_push_notif_batch(
        self, notifs: list[PushNotifEntity]
    ) -> tuple[list[PushNotifEntity], list[PushNotifEntity]]:
        """Split a batch into ``(valid, invalid)`` notifications."""
        if len(notifs) > self.settings.max_batch_size:
            logger.warning(
                "Push batch exceeds configured size",
                batch_size=len(notifs),
                max_batch_size=self.settings.max_batch_size,
            )

        valid: list[PushNotifEntity] = []
        invalid: list[PushNotifEntity] = []
        for notif in notifs:
            if self._is_valid_notif(notif):
                valid.append(notif)
            else:
                invalid.append(notif)
        return valid, invalid

    def calculate_push_notif_metrics(
        self, notifs: list[PushNotifEntity]
    ) -> dict[str, Any]:
        total = len(notifs)
        by_status: dict[str, int] = {}
        by_priority: dict[str, int] = {}
        by_platform: dict[str, int] = {}
        success_count = 0
        total_retry_count = 0

        for notif in notifs:
            by_status[notif.status.value] = by_status.get(notif.status.value, 0) + 1
            by_priority[notif.priority.value] = by_priority.get(notif.priority.value, 0) + 1
            platform = notif.push_token.platform.value
            by_platform[platform] = by_platform.get(platform, 0) + 1

            if notif.status.is_successful():
                success_count += 1
            total_retry_count += notif.retry_count

        return {
            "total": total,
            "by_status": by_status,
            "by_priority": by_priority,
            "by_platform": by_platform,
            "success_rate": success_count / total if total else 0,
            "average_retry_count": total_retry_count / total if total else 0,
            "total_retry_count": total_retry_count,
        }

    def validate_status_consistency(self, notif: PushNotifEntity) -> bool:
        """Check that timestamps and reasons agree with the status."""
        if notif.status == PushStatus.SENT and not notif.sent_at:
            return False
        if notif.status == PushStatus.DELIVERED and not notif.delivered_at:
            return False
        if notif.status == PushStatus.FAILED and not notif.failure_reason:
            return False
        if notif.sent_at and notif.delivered_at and notif.delivered_at < notif.sent_at:
            return False
        return True

    def _base_priority(self, content: PushContent) -> PushPriority:
        text = f"{content.title} {content.body}".lower()
        if any(keyword in text for keyword in URGENT_KEYWORDS):
            return PushPriority.CRITICAL
        if any(keyword in text for keyword in IMPORTANT_KEYWORDS):
            return PushPriority.HIGH
        return PushPriority.NORMAL

    def _is_valid_token(self, push_token: PushToken | None) -> bool:
        return isinstance(push_token, PushToken) and bool(push_token.value)

    def _is_valid_content(self, content: PushContent | None) -> bool:
        if not isinstance(content, PushContent):
            return False
        return content.content_length()["total"] <= self.settings.max_content_length

    def _is_valid_priority(self, priority: PushPriority | str | None) -> bool:
        if isinstance(priority, PushPriority):
            return True
        return priority in {p.value for p in PushPriority}

    def _is_valid_notif(self, notif: PushNotifEntity) -> bool:
        if not notif.id or not notif.tenant_id or not notif.user_id:
            return False
        return (
            self._is_valid_token(notif.push_token)
            and self._is_valid_content(notif.content)
            and self._is_valid_priority(notif.priority)
            and self.validate_status_consistency(notif)
        )

    def __str__(self) -> str:
        return "PushNotifService"


def _soften(priority: PushPriority) -> PushPriority:
    return priority.step_down() if priority in SOFTENABLE else priority


def _boost(priority: PushPriority) -> PushPriority:
    return priority.step_up() if priority in BOOSTABLE else priority
