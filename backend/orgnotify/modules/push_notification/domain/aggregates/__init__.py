"""Push notification aggregates."""

from orgnotify.modules.push_notification.domain.aggregates.push_notif import (
    PushNotifAggregate,
)

__all__ = ["PushNotifAggregate"]
