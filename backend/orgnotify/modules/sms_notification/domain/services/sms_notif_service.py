"""SMS notification domain service.

Provider selection, cost and latency estimates, pre-send rule checks and
batch metrics. Costs are in cents, delays in milliseconds.
"""

import math
from typing import Any

from orgnotify.core.config import SmsSettings, get_settings
from orgnotify.core.domain.base import DomainService
from orgnotify.core.logging import get_logger
from orgnotify.modules.sms_notification.domain.entities.sms_notif import SmsNotifEntity
from orgnotify.modules.sms_notification.domain.enums import (
    PhoneRegion,
    SmsEncoding,
    SmsProviderType,
)
from orgnotify.modules.sms_notification.domain.value_objects import (
    PhoneNumber,
    SmsContent,
    SmsProvider,
)

logger = get_logger(__name__)

PROVIDER_BASE_COST: dict[SmsProviderType, int] = {
    SmsProviderType.ALIYUN: 5,
    SmsProviderType.TENCENT: 5,
    SmsProviderType.HUAWEI: 4,
    SmsProviderType.TWILIO: 8,
    SmsProviderType.AWS_SNS: 7,
    SmsProviderType.CUSTOM: 6,
}

PROVIDER_BASE_DELAY_MS: dict[SmsProviderType, int] = {
    SmsProviderType.ALIYUN: 1000,
    SmsProviderType.TENCENT: 1200,
    SmsProviderType.HUAWEI: 1500,
    SmsProviderType.TWILIO: 2000,
    SmsProviderType.AWS_SNS: 1800,
    SmsProviderType.CUSTOM: 2500,
}

REGION_COST_MULTIPLIER: dict[PhoneRegion, float] = {
    PhoneRegion.CHINA_MAINLAND: 1.0,
    PhoneRegion.HONG_KONG: 1.2,
    PhoneRegion.TAIWAN: 1.2,
    PhoneRegion.USA: 1.5,
    PhoneRegion.UK: 1.3,
    PhoneRegion.JAPAN: 1.4,
    PhoneRegion.SOUTH_KOREA: 1.3,
    PhoneRegion.SINGAPORE: 1.1,
    PhoneRegion.MALAYSIA: 1.1,
    PhoneRegion.THAILAND: 1.1,
    PhoneRegion.VIETNAM: 1.1,
    PhoneRegion.PHILIPPINES: 1.1,
    PhoneRegion.INDONESIA: 1.1,
    PhoneRegion.INDIA: 1.2,
    PhoneRegion.AUSTRALIA: 1.4,
    PhoneRegion.GERMANY: 1.3,
    PhoneRegion.FRANCE: 1.3,
    PhoneRegion.ITALY: 1.3,
    PhoneRegion.SPAIN: 1.3,
    PhoneRegion.RUSSIA: 1.2,
    PhoneRegion.BRAZIL: 1.3,
    PhoneRegion.MEXICO: 1.2,
    PhoneRegion.ARGENTINA: 1.3,
    PhoneRegion.CHILE: 1.3,
    PhoneRegion.COLOMBIA: 1.3,
    PhoneRegion.PERU: 1.3,
    PhoneRegion.VENEZUELA: 1.3,
    PhoneRegion.SOUTH_AFRICA: 1.4,
    PhoneRegion.EGYPT: 1.3,
    PhoneRegion.NIGERIA: 1.3,
    PhoneRegion.KENYA: 1.3,
    PhoneRegion.GHANA: 1.3,
    PhoneRegion.LANDLINE: 0.0,
    PhoneRegion.OTHER: 1.5,
}
DEFAULT_COST_MULTIPLIER = 1.5

REGION_DELAY_MS: dict[PhoneRegion, int] = {
    PhoneRegion.CHINA_MAINLAND: 0,
    PhoneRegion.HONG_KONG: 200,
    PhoneRegion.TAIWAN: 200,
    PhoneRegion.USA: 500,
    PhoneRegion.UK: 300,
    PhoneRegion.JAPAN: 300,
    PhoneRegion.SOUTH_KOREA: 300,
    PhoneRegion.SINGAPORE: 100,
    PhoneRegion.MALAYSIA: 100,
    PhoneRegion.THAILAND: 100,
    PhoneRegion.VIETNAM: 100,
    PhoneRegion.PHILIPPINES: 100,
    PhoneRegion.INDONESIA: 100,
    PhoneRegion.INDIA: 200,
    PhoneRegion.AUSTRALIA: 400,
    PhoneRegion.GERMANY: 300,
    PhoneRegion.FRANCE: 300,
    PhoneRegion.ITALY: 300,
    PhoneRegion.SPAIN: 300,
    PhoneRegion.RUSSIA: 200,
    PhoneRegion.BRAZIL: 300,
    PhoneRegion.MEXICO: 200,
    PhoneRegion.ARGENTINA: 300,
    PhoneRegion.CHILE: 300,
    PhoneRegion.COLOMBIA: 300,
    PhoneRegion.PERU: 300,
    PhoneRegion.VENEZUELA: 300,
    PhoneRegion.SOUTH_AFRICA: 400,
    PhoneRegion.EGYPT: 300,
    PhoneRegion.NIGERIA: 300,
    PhoneRegion.KENYA: 300,
    PhoneRegion.GHANA: 300,
    PhoneRegion.OTHER: 500,
}
DEFAULT_REGION_DELAY_MS = 500

EXTRA_SEGMENT_DELAY_MS = 200
UTF8_DELAY_MS = 100

EXACT_REGION_SCORE = 100
ALIAS_REGION_SCORE = 80


class SmsNotifService(DomainService):
    """
    Stateless SMS rules.

    Usage Example:
        service = SmsNotifService()
        provider = service.select_best_provider(providers, phone, content)
        cost = service.calculate_sending_cost(provider, phone, content)
    """

    def __init__(self, settings: SmsSettings | None = None):
        self.settings = settings or get_settings().sms

    def select_best_provider(
        self,
        providers: list[SmsProvider],
        phone_number: PhoneNumber,
        content: SmsContent,
    ) -> SmsProvider | None:
        """
        Pick the provider to send through.

        Candidates must be available and support the phone region and the
        content encoding. Lowest priority number wins; ties go to the better
        region match.
        """
        candidates = [
            provider
            for provider in providers
            if provider.is_available()
            and provider.supports_region(phone_number.region)
            and provider.supports_encoding(content.encoding)
        ]
        if not candidates:
            logger.warning(
                "No SMS provider supports the destination",
                region=phone_number.region.value,
                encoding=content.encoding.value,
                provider_count=len(providers),
            )
            return None

        candidates.sort(
            key=lambda p: (p.priority, -self._region_match_score(phone_number.region, p))
        )
        return candidates[0]

    def calculate_sending_cost(
        self, provider: SmsProvider, phone_number: PhoneNumber, content: SmsContent
    ) -> int:
        base = PROVIDER_BASE_COST.get(provider.provider_type, 5)
        multiplier = REGION_COST_MULTIPLIER.get(phone_number.region, DEFAULT_COST_MULTIPLIER)
        # Halves round up.
        return math.floor(base * content.segments * multiplier + 0.5)

    def calculate_sending_delay(
        self, provider: SmsProvider, phone_number: PhoneNumber, content: SmsContent
    ) -> int:
        delay = PROVIDER_BASE_DELAY_MS.get(provider.provider_type, 2000)
        delay += REGION_DELAY_MS.get(phone_number.region, DEFAULT_REGION_DELAY_MS)
        delay += (content.segments - 1) * EXTRA_SEGMENT_DELAY_MS
        if content.encoding == SmsEncoding.UTF8:
            delay += UTF8_DELAY_MS
        return delay

    def validate_sending_rules(self, notif: SmsNotifEntity) -> list[str]:
        """Return the reasons ``notif`` must not be sent; empty when it may."""
        errors: list[str] = []

        if notif.content.segments > self.settings.max_segments:
            errors.append(
                f"Content needs {notif.content.segments} segments, "
                f"more than the allowed {self.settings.max_segments}"
            )
        if not notif.phone_number.can_receive_sms():
            errors.append("Phone number cannot receive SMS")
        if not notif.provider.is_available():
            errors.append(f"Provider {notif.provider.name} is not available")
        if not notif.provider.supports_region(notif.phone_number.region):
            errors.append(f"Provider {notif.provider.name} does not cover the phone region")
        if not notif.provider.supports_encoding(notif.content.encoding):
            errors.append(f"Provider {notif.provider.name} does not support the encoding")
        if not notif.can_send():
            errors.append(f"SMS cannot be sent in status {notif.status.value}")
        if notif.is_expired(expiry_hours=self.settings.expiry_hours):
            errors.append("SMS has expired")

        return errors

    def calculate_sms_notif_metrics(self, notifs: list[SmsNotifEntity]) -> dict[str, Any]:
        total = len(notifs)
        by_status: dict[str, int] = {}
        by_provider: dict[str, int] = {}
        by_region: dict[str, int] = {}
        by_encoding: dict[str, int] = {}
        success_count = 0
        total_retry_count = 0
        total_cost = 0
        total_segments = 0

        for notif in notifs:
            by_status[notif.status.value] = by_status.get(notif.status.value, 0) + 1
            by_provider[notif.provider.name] = by_provider.get(notif.provider.name, 0) + 1
            region = notif.phone_number.region.value
            by_region[region] = by_region.get(region, 0) + 1
            encoding = notif.content.encoding.value
            by_encoding[encoding] = by_encoding.get(encoding, 0) + 1

            if notif.status.is_successful():
                success_count += 1
            total_retry_count += notif.retry_count
            total_segments += notif.content.segments
            total_cost += self.calculate_sending_cost(
                notif.provider, notif.phone_number, notif.content
            )

        return {
            "total": total,
            "by_status": by_status,
            "by_provider": by_provider,
            "by_region": by_region,
            "by_encoding": by_encoding,
            "success_rate": success_count / total * 100 if total else 0,
            "average_retry_count": total_retry_count / total if total else 0,
            "average_segments": total_segments / total if total else 0,
            "total_cost": total_cost,
        }

    def _region_match_score(self, region: PhoneRegion, provider: SmsProvider) -> int:
        if region.value in provider.regions:
            return EXACT_REGION_SCORE
        if provider.supports_region(region):
            return ALIAS_REGION_SCORE
        return 0

    def __str__(self) -> str:
        return "SmsNotifService"
