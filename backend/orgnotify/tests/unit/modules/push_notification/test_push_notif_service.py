"""
Tests for the push notification domain service.
"""

from datetime import UTC, datetime

import pytest

from orgnotify.core.config import PushSettings
from orgnotify.modules.push_notification.domain import (
    PushContent,
    PushNotifAggregate,
    PushNotifEntity,
    PushNotifService,
    PushPriority,
    PushStatus,
)
from orgnotify.shared.value_objects import NotifId

pytestmark = pytest.mark.unit

NOON = datetime(2026, 1, 5, 12, 0, tzinfo=UTC)
LATE_EVENING = datetime(2026, 1, 5, 23, 0, tzinfo=UTC)


@pytest.fixture
def service():
    return PushNotifService(PushSettings(max_batch_size=10, max_content_length=200))


def make_entity(tenant_id, user_id, token, status=PushStatus.PENDING, **fields):
    return PushNotifEntity(
        notif_id=NotifId.generate(),
        tenant_id=tenant_id,
        user_id=user_id,
        push_token=token,
        content=PushContent("Build finished", "All checks passed"),
        status=status,
        **fields,
    )


class TestCanSendPushNotif:
    """Test the sendability check."""

    def test_valid(self, service, apns_token, content):
        """Test enum and string priorities are accepted."""
        assert service.can_send_push_notif(apns_token, content, PushPriority.HIGH)
        assert service.can_send_push_notif(apns_token, content, "LOW")

    def test_missing_parts(self, service, apns_token, content):
        """Test missing token or content is refused."""
        assert not service.can_send_push_notif(None, content, PushPriority.HIGH)
        assert not service.can_send_push_notif(apns_token, None, PushPriority.HIGH)

    def test_unknown_priority(self, service, apns_token, content):
        """Test an unknown priority string is refused."""
        assert not service.can_send_push_notif(apns_token, content, "URGENT")
        assert not service.can_send_push_notif(apns_token, content, None)

    def test_content_too_long(self, apns_token):
        """Test the configured content length limit applies."""
        service = PushNotifService(PushSettings(max_content_length=20))
        content = PushContent("Quarterly report", "The quarterly report is ready")

        assert not service.can_send_push_notif(apns_token, content, PushPriority.NORMAL)


class TestCalculateOptimalPriority:
    """Test priority scoring."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Urgent: database offline", PushPriority.CRITICAL),
            ("紧急通知", PushPriority.CRITICAL),
            ("Important update", PushPriority.HIGH),
            ("重要会议", PushPriority.HIGH),
            ("Lunch menu", PushPriority.NORMAL),
        ],
    )
    def test_keywords(self, service, title, expected):
        """Test keywords in the title set the base priority."""
        priority = service.calculate_optimal_priority(
            PushContent(title, "details inside"), context={"now": NOON}
        )
        assert priority == expected

    def test_prefer_low_priority(self, service):
        """Test the user preference lowers the priority one level."""
        priority = service.calculate_optimal_priority(
            PushContent("Lunch menu", "Noodles"),
            user_preferences={"prefer_low_priority": True},
            context={"now": NOON},
        )
        assert priority == PushPriority.LOW

    def test_working_hours_boost(self, service):
        """Test working hours raise normal notifications but not critical ones."""
        normal = service.calculate_optimal_priority(
            PushContent("Lunch menu", "Noodles"),
            context={"now": NOON, "is_working_hours": True},
        )
        critical = service.calculate_optimal_priority(
            PushContent("Urgent", "Outage"),
            context={"now": NOON, "is_working_hours": True},
        )

        assert normal == PushPriority.HIGH
        assert critical == PushPriority.CRITICAL

    def test_non_working_hours(self, service):
        """Test non-working hours soften urgent notifications."""
        priority = service.calculate_optimal_priority(
            PushContent("Urgent", "Outage"),
            context={"now": NOON, "is_non_working_hours": True},
        )
        assert priority == PushPriority.HIGH

    def test_quiet_hours(self, service):
        """Test quiet hours soften the priority but never below LOW."""
        normal = service.calculate_optimal_priority(
            PushContent("Lunch menu", "Noodles"), context={"now": LATE_EVENING}
        )
        low = service.calculate_optimal_priority(
            PushContent("Lunch menu", "Noodles"),
            user_preferences={"prefer_low_priority": True},
            context={"now": LATE_EVENING},
        )

        assert normal == PushPriority.LOW
        assert low == PushPriority.LOW


class TestValidatePushNotifBatch:
    """Test batch validation."""

    def test_split(self, service, tenant_id, user_id, apns_token, fcm_token):
        """Test inconsistent notifications are separated out."""
        good = make_entity(tenant_id, user_id, apns_token)
        sent_without_time = make_entity(tenant_id, user_id, fcm_token, status=PushStatus.SENT)

        valid, invalid = service.validate_push_notif_batch([good, sent_without_time])

        assert valid == [good]
        assert invalid == [sent_without_time]

    def test_oversized_batch_is_still_checked(self, service, tenant_id, user_id, apns_token):
        """Test a batch over the size limit is validated anyway."""
        notifs = [make_entity(tenant_id, user_id, apns_token) for _ in range(12)]

        valid, invalid = service.validate_push_notif_batch(notifs)

        assert len(valid) == 12
        assert invalid == []


class TestPushNotifMetrics:
    """Test metrics and consistency."""

    def test_metrics(self, service, tenant_id, user_id, apns_token, fcm_token, content):
        """Test counts, success rate and retry totals."""
        delivered = PushNotifAggregate.create(tenant_id, user_id, apns_token, content)
        delivered.send()
        delivered.mark_as_failed("timeout")
        delivered.retry()
        delivered.mark_as_sent()
        delivered.mark_as_delivered()

        failed = PushNotifAggregate.create(
            tenant_id, user_id, fcm_token, content, priority=PushPriority.LOW
        )
        failed.send()
        failed.mark_as_failed("unregistered")

        pending = make_entity(tenant_id, user_id, fcm_token)

        metrics = service.calculate_push_notif_metrics(
            [delivered.notif, failed.notif, pending]
        )

        assert metrics["total"] == 3
        assert metrics["by_status"] == {"DELIVERED": 1, "FAILED": 1, "PENDING": 1}
        assert metrics["by_priority"] == {"NORMAL": 2, "LOW": 1}
        assert metrics["by_platform"] == {"APNS": 1, "FCM": 2}
        assert metrics["success_rate"] == pytest.approx(1 / 3)
        assert metrics["total_retry_count"] == 1
        assert metrics["average_retry_count"] == pytest.approx(1 / 3)

    def test_empty_metrics(self, service):
        """Test an empty list yields zero rates."""
        metrics = service.calculate_push_notif_metrics([])

        assert metrics["total"] == 0
        assert metrics["success_rate"] == 0

    def test_status_consistency(self, service, tenant_id, user_id, apns_token):
        """Test a failed notification needs a reason."""
        failed = make_entity(tenant_id, user_id, apns_token, status=PushStatus.FAILED)
        assert not service.validate_status_consistency(failed)

        failed.failure_reason = "timeout"
        assert service.validate_status_consistency(failed)
