"""SMS notification entities."""

from orgnotify.modules.sms_notification.domain.entities.sms_notif import SmsNotifEntity

__all__ = ["SmsNotifEntity"]
