"""SMS notification domain enums."""

from enum import Enum


class SmsStatus(Enum):
    """SMS delivery status."""

    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    SENDING = "SENDING"
    SENT = "SENT"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    RETRYING = "RETRYING"
    PERMANENTLY_FAILED = "PERMANENTLY_FAILED"
    CANCELLED = "CANCELLED"

    def allowed_transitions(self) -> list["SmsStatus"]:
        valid_transitions: dict[SmsStatus, list[SmsStatus]] = {
            SmsStatus.PENDING: [
                SmsStatus.SENDING,
                SmsStatus.SCHEDULED,
                SmsStatus.CANCELLED,
            ],
            SmsStatus.SCHEDULED: [SmsStatus.SENDING, SmsStatus.CANCELLED],
            SmsStatus.SENDING: [SmsStatus.SENT, SmsStatus.FAILED, SmsStatus.CANCELLED],
            SmsStatus.SENT: [SmsStatus.DELIVERED, SmsStatus.FAILED],
            SmsStatus.DELIVERED: [],
            SmsStatus.FAILED: [
                SmsStatus.RETRYING,
                SmsStatus.PERMANENTLY_FAILED,
                SmsStatus.CANCELLED,
            ],
            SmsStatus.RETRYING: [
                SmsStatus.SENDING,
                SmsStatus.PERMANENTLY_FAILED,
                SmsStatus.CANCELLED,
            ],
            SmsStatus.PERMANENTLY_FAILED: [],
            SmsStatus.CANCELLED: [],
        }
        return valid_transitions[self]

    def can_transition_to(self, new_status: "SmsStatus") -> bool:
        """Check if transition to new status is valid."""
        return new_status in self.allowed_transitions()

    def is_final(self) -> bool:
        return self in [
            SmsStatus.DELIVERED,
            SmsStatus.PERMANENTLY_FAILED,
            SmsStatus.CANCELLED,
        ]

    def is_successful(self) -> bool:
        return self == SmsStatus.DELIVERED

    def is_retryable(self) -> bool:
        return self in [SmsStatus.PENDING, SmsStatus.FAILED]


class PhoneRegion(Enum):
    """Phone number regions detected from the country calling code."""

    CHINA_MAINLAND = "CHINA_MAINLAND"
    HONG_KONG = "HONG_KONG"
    MACAU = "MACAU"
    TAIWAN = "TAIWAN"
    USA = "USA"
    UK = "UK"
    JAPAN = "JAPAN"
    SOUTH_KOREA = "SOUTH_KOREA"
    SINGAPORE = "SINGAPORE"
    MALAYSIA = "MALAYSIA"
    THAILAND = "THAILAND"
    VIETNAM = "VIETNAM"
    PHILIPPINES = "PHILIPPINES"
    INDONESIA = "INDONESIA"
    INDIA = "INDIA"
    AUSTRALIA = "AUSTRALIA"
    GERMANY = "GERMANY"
    FRANCE = "FRANCE"
    ITALY = "ITALY"
    SPAIN = "SPAIN"
    RUSSIA = "RUSSIA"
    BRAZIL = "BRAZIL"
    MEXICO = "MEXICO"
    ARGENTINA = "ARGENTINA"
    CHILE = "CHILE"
    COLOMBIA = "COLOMBIA"
    PERU = "PERU"
    VENEZUELA = "VENEZUELA"
    SOUTH_AFRICA = "SOUTH_AFRICA"
    EGYPT = "EGYPT"
    NIGERIA = "NIGERIA"
    KENYA = "KENYA"
    GHANA = "GHANA"
    LANDLINE = "LANDLINE"
    OTHER = "OTHER"

    @classmethod
    def from_country_code(cls, country_code: str) -> "PhoneRegion":
        """Detect the region of a ``+CC`` country code; unknown codes map to OTHER."""
        return COUNTRY_CODE_REGIONS.get(country_code, cls.OTHER)

    def is_greater_china(self) -> bool:
        return self in [
            PhoneRegion.CHINA_MAINLAND,
            PhoneRegion.HONG_KONG,
            PhoneRegion.MACAU,
            PhoneRegion.TAIWAN,
        ]


COUNTRY_CODE_REGIONS: dict[str, PhoneRegion] = {
    "+86": PhoneRegion.CHINA_MAINLAND,
    "+852": PhoneRegion.HONG_KONG,
    "+853": PhoneRegion.MACAU,
    "+886": PhoneRegion.TAIWAN,
    "+1": PhoneRegion.USA,
    "+44": PhoneRegion.UK,
    "+81": PhoneRegion.JAPAN,
    "+82": PhoneRegion.SOUTH_KOREA,
    "+65": PhoneRegion.SINGAPORE,
    "+60": PhoneRegion.MALAYSIA,
    "+66": PhoneRegion.THAILAND,
    "+84": PhoneRegion.VIETNAM,
    "+63": PhoneRegion.PHILIPPINES,
    "+62": PhoneRegion.INDONESIA,
    "+91": PhoneRegion.INDIA,
    "+61": PhoneRegion.AUSTRALIA,
    "+49": PhoneRegion.GERMANY,
    "+33": PhoneRegion.FRANCE,
    "+39": PhoneRegion.ITALY,
    "+34": PhoneRegion.SPAIN,
    "+7": PhoneRegion.RUSSIA,
    "+55": PhoneRegion.BRAZIL,
    "+52": PhoneRegion.MEXICO,
    "+54": PhoneRegion.ARGENTINA,
    "+56": PhoneRegion.CHILE,
    "+57": PhoneRegion.COLOMBIA,
    "+51": PhoneRegion.PERU,
    "+58": PhoneRegion.VENEZUELA,
    "+27": PhoneRegion.SOUTH_AFRICA,
    "+20": PhoneRegion.EGYPT,
    "+234": PhoneRegion.NIGERIA,
    "+254": PhoneRegion.KENYA,
    "+233": PhoneRegion.GHANA,
}


class SmsEncoding(Enum):
    """Character encodings an SMS can be sent with."""

    UTF8 = "UTF8"
    GSM = "GSM"
    ASCII = "ASCII"

    def segment_size(self) -> int:
        """Characters per segment."""
        return 70 if self == SmsEncoding.UTF8 else 160

    def max_length(self) -> int:
        """Maximum full message length."""
        return 2000 if self == SmsEncoding.GSM else 1000


class SmsProviderType(Enum):
    """Supported SMS gateways."""

    ALIYUN = "ALIYUN"
    TENCENT = "TENCENT"
    HUAWEI = "HUAWEI"
    TWILIO = "TWILIO"
    AWS_SNS = "AWS_SNS"
    CUSTOM = "CUSTOM"

    def required_config_keys(self) -> list[str]:
        """Credential keys a provider of this type must be configured with."""
        keys = {
            SmsProviderType.ALIYUN: ["apiKey", "apiSecret"],
            SmsProviderType.TENCENT: ["secretId", "secretKey"],
            SmsProviderType.HUAWEI: ["appKey", "appSecret"],
            SmsProviderType.TWILIO: ["accountSid", "authToken"],
            SmsProviderType.AWS_SNS: ["accessKeyId", "secretAccessKey", "region"],
            SmsProviderType.CUSTOM: [],
        }
        return keys[self]


__all__ = [
    "COUNTRY_CODE_REGIONS",
    "PhoneRegion",
    "SmsEncoding",
    "SmsProviderType",
    "SmsStatus",
]
