"""SMS notification domain services."""

from orgnotify.modules.sms_notification.domain.services.sms_notif_service import (
    SmsNotifService,
)

__all__ = ["SmsNotifService"]
