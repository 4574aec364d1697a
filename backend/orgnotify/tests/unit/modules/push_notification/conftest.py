"""Push notification test fixtures."""

import pytest

from orgnotify.modules.push_notification.domain import (
    PushContent,
    PushNotifAggregate,
    PushPriority,
)
from orgnotify.tests.builders import PushTokenBuilder


@pytest.fixture
def apns_token():
    """Valid APNS device token."""
    return PushTokenBuilder.apns()


@pytest.fixture
def fcm_token():
    """Valid FCM registration token."""
    return PushTokenBuilder.fcm()


@pytest.fixture
def content():
    """Notification content with an image and custom data."""
    return PushContent(
        title="Weekly report",
        body="Your team report is ready",
        image="https://cdn.example.com/report.png",
        data={"report_id": "r-1"},
    )


@pytest.fixture
def aggregate(tenant_id, user_id, apns_token, content):
    """Pending high priority push notification."""
    return PushNotifAggregate.create(
        tenant_id=tenant_id,
        user_id=user_id,
        push_token=apns_token,
        content=content,
        priority=PushPriority.HIGH,
    )
