"""
Push token test data builder.

Provides device tokens in the format each platform accepts.
"""

import secrets
import string

from orgnotify.modules.push_notification.domain import PushPlatform, PushToken

URL_SAFE = string.ascii_letters + string.digits + "_-"


class PushTokenBuilder:
    """Builder for PushToken value objects with unique values."""

    @staticmethod
    def apns_value() -> str:
        """Random 64 hex digit APNS token."""
        return secrets.token_hex(32)

    @staticmethod
    def fcm_value(length: int = 152) -> str:
        """Random URL-safe FCM token."""
        return "".join(secrets.choice(URL_SAFE) for _ in range(length))

    @staticmethod
    def apns() -> PushToken:
        return PushToken(PushTokenBuilder.apns_value(), PushPlatform.APNS)

    @staticmethod
    def fcm() -> PushToken:
        return PushToken(PushTokenBuilder.fcm_value(), PushPlatform.FCM)

    @staticmethod
    def huawei() -> PushToken:
        return PushToken("hw" + secrets.token_hex(60), PushPlatform.HUAWEI)
