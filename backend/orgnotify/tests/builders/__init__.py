"""Test data builders."""

from orgnotify.tests.builders.push_token_builder import PushTokenBuilder
from orgnotify.tests.builders.sms_provider_builder import SmsProviderBuilder

__all__ = ["PushTokenBuilder", "SmsProviderBuilder"]
