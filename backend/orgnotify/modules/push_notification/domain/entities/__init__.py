"""Push notification entities."""

from orgnotify.modules.push_notification.domain.entities.push_notif import (
    PushNotifEntity,
)

__all__ = ["PushNotifEntity"]
