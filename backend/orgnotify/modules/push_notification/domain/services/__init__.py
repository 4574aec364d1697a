"""Push notification domain services."""

from orgnotify.modules.push_notification.domain.services.push_notif_service import (
    PushNotifService,
)

__all__ = ["PushNotifService"]
