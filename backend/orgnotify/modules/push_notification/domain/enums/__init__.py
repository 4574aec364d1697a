"""Push notification domain enums.

Delivery status state machine, priority levels with their retry/expiry
policy, and the supported push platforms.
"""

from enum import Enum


class PushPlatform(Enum):
    """Push delivery platforms."""

    FCM = "FCM"
    APNS = "APNS"
    HUAWEI = "HUAWEI"
    XIAOMI = "XIAOMI"


class PushStatus(Enum):
    """Push notification delivery status."""

    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    SENDING = "SENDING"
    SENT = "SENT"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    PERMANENTLY_FAILED = "PERMANENTLY_FAILED"

    def allowed_transitions(self) -> list["PushStatus"]:
        """Statuses reachable from this one."""
        valid_transitions: dict[PushStatus, list[PushStatus]] = {
            PushStatus.PENDING: [PushStatus.SENDING, PushStatus.SCHEDULED],
            PushStatus.SCHEDULED: [PushStatus.SENDING],
            PushStatus.SENDING: [PushStatus.SENT, PushStatus.FAILED],
            PushStatus.SENT: [PushStatus.DELIVERED],
            PushStatus.DELIVERED: [],
            PushStatus.FAILED: [PushStatus.SENDING, PushStatus.PERMANENTLY_FAILED],
            PushStatus.PERMANENTLY_FAILED: [],
        }
        return valid_transitions[self]

    def can_transition_to(self, new_status: "PushStatus") -> bool:
        """Check if transition to new status is valid."""
        return new_status in self.allowed_transitions()

    def is_final(self) -> bool:
        """Check if no further transitions are possible."""
        return self in [PushStatus.DELIVERED, PushStatus.PERMANENTLY_FAILED]

    def is_retryable(self) -> bool:
        """Check if a notification in this status may still be (re)sent."""
        return self in [PushStatus.PENDING, PushStatus.SCHEDULED, PushStatus.FAILED]

    def is_in_progress(self) -> bool:
        return self == PushStatus.SENDING

    def is_successful(self) -> bool:
        """Check if the notification reached the provider or the device."""
        return self in [PushStatus.SENT, PushStatus.DELIVERED]


class PushPriority(Enum):
    """
    Push priority levels.

    Each level fixes a weight used for ordering and the retry policy of the
    notifications created with it.
    """

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"
    BACKGROUND = "BACKGROUND"

    def weight(self) -> int:
        weights = {
            PushPriority.CRITICAL: 100,
            PushPriority.HIGH: 80,
            PushPriority.NORMAL: 60,
            PushPriority.LOW: 40,
            PushPriority.BACKGROUND: 20,
        }
        return weights[self]

    def retry_count(self) -> int:
        """Maximum retry attempts for notifications with this priority."""
        retries = {
            PushPriority.CRITICAL: 5,
            PushPriority.HIGH: 3,
            PushPriority.NORMAL: 2,
            PushPriority.LOW: 1,
            PushPriority.BACKGROUND: 0,
        }
        return retries[self]

    def retry_interval_ms(self) -> int:
        intervals = {
            PushPriority.CRITICAL: 1000,
            PushPriority.HIGH: 5000,
            PushPriority.NORMAL: 30000,
            PushPriority.LOW: 60000,
            PushPriority.BACKGROUND: 300000,
        }
        return intervals[self]

    def expiration_ms(self) -> int:
        """Time after which an undelivered notification is stale."""
        expirations = {
            PushPriority.CRITICAL: 300000,  # 5 minutes
            PushPriority.HIGH: 1800000,  # 30 minutes
            PushPriority.NORMAL: 3600000,  # 1 hour
            PushPriority.LOW: 7200000,  # 2 hours
            PushPriority.BACKGROUND: 86400000,  # 24 hours
        }
        return expirations[self]

    def platform_priority(self, platform: PushPlatform | str) -> str:
        """Translate to the priority string a platform's API expects."""
        platform_value = getattr(platform, "value", platform)
        urgent = self in [PushPriority.CRITICAL, PushPriority.HIGH]
        background = self == PushPriority.BACKGROUND

        if platform_value == PushPlatform.FCM.value:
            return "high" if urgent else "normal"
        if platform_value == PushPlatform.APNS.value:
            if urgent:
                return "10"
            return "1" if background else "5"
        if platform_value == PushPlatform.HUAWEI.value:
            if urgent:
                return "HIGH"
            return "LOW" if background else "NORMAL"
        if platform_value == PushPlatform.XIAOMI.value:
            if urgent:
                return "high"
            return "low" if background else "normal"
        return "normal"

    def is_higher_than(self, other: "PushPriority") -> bool:
        return self.weight() > other.weight()

    def is_lower_than(self, other: "PushPriority") -> bool:
        return self.weight() < other.weight()

    def step_up(self) -> "PushPriority":
        """One level more urgent; CRITICAL stays CRITICAL."""
        order = _PRIORITY_ORDER
        index = order.index(self)
        return order[max(index - 1, 0)]

    def step_down(self) -> "PushPriority":
        """One level less urgent; BACKGROUND stays BACKGROUND."""
        order = _PRIORITY_ORDER
        index = order.index(self)
        return order[min(index + 1, len(order) - 1)]


_PRIORITY_ORDER = [
    PushPriority.CRITICAL,
    PushPriority.HIGH,
    PushPriority.NORMAL,
    PushPriority.LOW,
    PushPriority.BACKGROUND,
]


__all__ = ["PushPlatform", "PushPriority", "PushStatus"]
