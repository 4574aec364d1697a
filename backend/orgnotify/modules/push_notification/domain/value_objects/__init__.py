"""Push notification value objects.

Immutable wrappers around the device token, the message content and the
delivery status. Each validates on construction and raises the module's
narrow errors.
"""

import re
from types import MappingProxyType
from typing import Any
from urllib.parse import urlparse

from orgnotify.core.domain.base import ValueObject
from orgnotify.modules.push_notification.domain.enums import PushPlatform, PushStatus
from orgnotify.modules.push_notification.domain.errors import (
    InvalidPushContentError,
    InvalidPushStatusTransitionError,
    InvalidPushTokenError,
)

FCM_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{140,180}$")
APNS_TOKEN_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")

MAX_TITLE_LENGTH = 100
MAX_BODY_LENGTH = 1000


class PushStatusValue(ValueObject):
    """Current delivery status with guarded transitions."""

    def __init__(self, status: PushStatus | str = PushStatus.PENDING):
        super().__init__()
        self.status = status if isinstance(status, PushStatus) else PushStatus(status)
        self._freeze()

    def can_transition_to(self, target: PushStatus) -> bool:
        return self.status.can_transition_to(target)

    def transition_to(self, target: PushStatus) -> "PushStatusValue":
        """
        Return the status value for ``target``.

        Raises:
            InvalidPushStatusTransitionError: If the move is not allowed
        """
        if not self.status.can_transition_to(target):
            raise InvalidPushStatusTransitionError(self.status, target)
        return PushStatusValue(target)

    def __str__(self) -> str:
        return self.status.value


class PushToken(ValueObject):
    """
    Device token for one push platform.

    FCM tokens are 140-180 URL-safe characters, APNS tokens 64 hex digits,
    HUAWEI and XIAOMI tokens 100-200 characters.
    """

    def __init__(self, value: str, platform: PushPlatform | str):
        super().__init__()

        try:
            platform = platform if isinstance(platform, PushPlatform) else PushPlatform(platform)
        except ValueError as e:
            raise InvalidPushTokenError(f"unsupported platform {platform!r}") from e

        if not value or not isinstance(value, str) or not value.strip():
            raise InvalidPushTokenError("token cannot be empty", platform.value)

        self.value = value.strip()
        self.platform = platform
        self._validate_format()
        self._freeze()

    def _validate_format(self) -> None:
        if self.platform == PushPlatform.FCM:
            valid = bool(FCM_TOKEN_PATTERN.match(self.value))
        elif self.platform == PushPlatform.APNS:
            valid = bool(APNS_TOKEN_PATTERN.match(self.value))
        else:
            valid = 100 <= len(self.value) <= 200

        if not valid:
            raise InvalidPushTokenError(
                f"token does not match the {self.platform.value} format",
                self.platform.value,
            )

    def masked(self) -> str:
        """Loggable form of the token."""
        if len(self.value) <= 8:
            return f"{self.platform.value}:****"
        return f"{self.value[:4]}****{self.value[-4:]}"

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "platform": self.platform.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PushToken":
        return cls(data["value"], data["platform"])

    def __repr__(self) -> str:
        return f"PushToken(platform={self.platform.value}, value={self.masked()})"

    def __str__(self) -> str:
        return f"{self.platform.value}:{self.value}"


class PushContent(ValueObject):
    """Title, body and optional media/action/data of a push message."""

    def __init__(
        self,
        title: str,
        body: str,
        icon: str | None = None,
        image: str | None = None,
        action: str | None = None,
        data: dict[str, Any] | None = None,
    ):
        super().__init__()

        if not title or not title.strip():
            raise InvalidPushContentError("title cannot be empty", field="title")
        if len(title) > MAX_TITLE_LENGTH:
            raise InvalidPushContentError(
                f"title cannot exceed {MAX_TITLE_LENGTH} characters", field="title"
            )
        if not body or not body.strip():
            raise InvalidPushContentError("body cannot be empty", field="body")
        if len(body) > MAX_BODY_LENGTH:
            raise InvalidPushContentError(
                f"body cannot exceed {MAX_BODY_LENGTH} characters", field="body"
            )
        if icon and not _is_http_url(icon):
            raise InvalidPushContentError("icon must be an http(s) URL", field="icon")
        if image and not _is_http_url(image):
            raise InvalidPushContentError("image must be an http(s) URL", field="image")

        self.title = title
        self.body = body
        self.icon = icon
        self.image = image
        self.action = action
        self.data = MappingProxyType(dict(data or {}))
        self._freeze()

    def get_platform_content(self, platform: PushPlatform | str) -> dict[str, Any]:
        """Build the payload shape a platform's API expects."""
        platform_value = getattr(platform, "value", platform)

        if platform_value == PushPlatform.FCM.value:
            return {
                "title": self.title,
                "body": self.body,
                "icon": self.icon,
                "image": self.image,
                "data": dict(self.data),
            }

        if platform_value == PushPlatform.APNS.value:
            return {
                "aps": {
                    "alert": {"title": self.title, "body": self.body},
                    "badge": 1,
                    "sound": "default",
                    "mutable-content": 1 if self.image else 0,
                },
                **self.data,
            }

        if platform_value == PushPlatform.HUAWEI.value:
            return {
                "notification": {
                    "title": self.title,
                    "body": self.body,
                    "icon": self.icon,
                    "image": self.image,
                    "click_action": self.action,
                },
                "data": dict(self.data),
            }

        if platform_value == PushPlatform.XIAOMI.value:
            return {
                "title": self.title,
                "description": self.body,
                "icon": self.icon,
                "image": self.image,
                "click_action": self.action,
                "extra": dict(self.data),
            }

        return {"title": self.title, "body": self.body}

    def content_length(self) -> dict[str, int]:
        return {
            "title": len(self.title),
            "body": len(self.body),
            "total": len(self.title) + len(self.body),
        }

    def has_media(self) -> bool:
        return bool(self.icon or self.image)

    def has_action(self) -> bool:
        return bool(self.action)

    def has_data(self) -> bool:
        return bool(self.data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "body": self.body,
            "icon": self.icon,
            "image": self.image,
            "action": self.action,
            "data": dict(self.data),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PushContent":
        return cls(
            title=data["title"],
            body=data["body"],
            icon=data.get("icon"),
            image=data.get("image"),
            action=data.get("action"),
            data=data.get("data"),
        )

    def __str__(self) -> str:
        return f"{self.title}: {self.body}"


def _is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


__all__ = ["PushContent", "PushStatusValue", "PushToken"]
