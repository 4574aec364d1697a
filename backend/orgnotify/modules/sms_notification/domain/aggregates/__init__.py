"""SMS notification aggregates."""

from orgnotify.modules.sms_notification.domain.aggregates.sms_notif import SmsNotif

__all__ = ["SmsNotif"]
