"""SMS notification test fixtures."""

import pytest

from orgnotify.modules.sms_notification.domain import PhoneNumber, SmsContent, SmsNotif
from orgnotify.tests.builders import SmsProviderBuilder


@pytest.fixture
def phone():
    """Mainland China mobile number."""
    return PhoneNumber.create("138-1234-5678")


@pytest.fixture
def us_phone():
    return PhoneNumber.create("2025550123", "+1")


@pytest.fixture
def sms_content():
    """Single segment verification message."""
    return SmsContent.create_from_template(
        "verify-code", {"code": "482913", "minutes": "5"}, "【Acme】"
    )


@pytest.fixture
def aliyun():
    return SmsProviderBuilder.aliyun()


@pytest.fixture
def sms(tenant_id, user_id, phone, sms_content, aliyun):
    """Pending SMS through the mainland provider."""
    return SmsNotif.create(tenant_id, user_id, phone, sms_content, aliyun)
