"""SMS notification value objects.

Phone numbers, message content, gateway providers and the delivery status.
Phone numbers are normalised per region and cross-checked with
``phonenumbers`` to recognise landlines, which cannot receive SMS.
"""

import math
import re
from types import MappingProxyType
from typing import Any

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat, PhoneNumberType

from orgnotify.core.domain.base import ValueObject
from orgnotify.modules.sms_notification.domain.enums import (
    PhoneRegion,
    SmsEncoding,
    SmsProviderType,
    SmsStatus,
)
from orgnotify.modules.sms_notification.domain.errors import (
    InvalidPhoneNumberError,
    InvalidSmsContentError,
    InvalidSmsProviderError,
    InvalidSmsStatusTransitionError,
)

MOBILE_PATTERNS: dict[PhoneRegion, re.Pattern] = {
    PhoneRegion.CHINA_MAINLAND: re.compile(r"^1[3-9]\d{9}$"),
    PhoneRegion.HONG_KONG: re.compile(r"^[5-9]\d{7}$"),
    PhoneRegion.TAIWAN: re.compile(r"^09\d{8}$"),
    PhoneRegion.USA: re.compile(r"^\d{10}$"),
}

# Region -> (country prefix, full length when the prefix was typed twice)
DUPLICATED_PREFIXES: dict[PhoneRegion, tuple[str, int]] = {
    PhoneRegion.CHINA_MAINLAND: ("86", 13),
    PhoneRegion.HONG_KONG: ("852", 11),
    PhoneRegion.TAIWAN: ("886", 12),
    PhoneRegion.USA: ("1", 11),
}

INTERNATIONAL_PATTERN = re.compile(r"^\+(\d{1,4})\s*(.+)$")
ILLEGAL_SMS_CHARS = re.compile(r"[<>{}]")

MAX_SIGNATURE_LENGTH = 10
VERIFICATION_CODE_TEMPLATE = "您的验证码是{code}，请在{minutes}分钟内使用。"


class SmsStatusValue(ValueObject):
    """Current SMS status with guarded transitions."""

    def __init__(self, status: SmsStatus | str = SmsStatus.PENDING):
        super().__init__()
        self.status = status if isinstance(status, SmsStatus) else SmsStatus(status)
        self._freeze()

    def transition_to(self, target: SmsStatus) -> "SmsStatusValue":
        """
        Return the status value for ``target``.

        Raises:
            InvalidSmsStatusTransitionError: If the move is not allowed
        """
        if not self.status.can_transition_to(target):
            raise InvalidSmsStatusTransitionError(self.status, target)
        return SmsStatusValue(target)

    def __str__(self) -> str:
        return self.status.value


class PhoneNumber(ValueObject):
    """
    Normalised phone number with its detected region.

    Usage Example:
        phone = PhoneNumber.create("138-1234-5678")
        phone.international_format()  # "+8613812345678"
    """

    def __init__(self, number: str, country_code: str, region: PhoneRegion):
        super().__init__()

        if not number or not country_code or not region:
            raise InvalidPhoneNumberError("number, country code and region are required")

        _validate_number(number, region)

        self.number = number
        self.country_code = country_code
        self.region = region
        self._freeze()

    @classmethod
    def create(cls, number: str, country_code: str = "+86") -> "PhoneNumber":
        """
        Normalise and validate a local number.

        Raises:
            InvalidPhoneNumberError: If the number is invalid for its region
        """
        if not isinstance(number, str):
            raise InvalidPhoneNumberError("number must be a string")

        region = PhoneRegion.from_country_code(country_code)
        normalized = _normalize_number(number, region)
        _validate_number(normalized, region)

        if _is_fixed_line(normalized, country_code):
            region = PhoneRegion.LANDLINE

        return cls(normalized, country_code, region)

    @classmethod
    def from_international_format(cls, international_number: str) -> "PhoneNumber":
        """Parse ``"+CC number"``; spaces inside the number are ignored."""
        match = INTERNATIONAL_PATTERN.match(international_number.strip())
        if not match:
            raise InvalidPhoneNumberError("not in international format")

        country_code = f"+{match.group(1)}"
        number = re.sub(r"\s", "", match.group(2))
        return cls.create(number, country_code)

    @classmethod
    def is_valid(cls, number: str, country_code: str = "+86") -> bool:
        try:
            cls.create(number, country_code)
        except InvalidPhoneNumberError:
            return False
        return True

    def international_format(self) -> str:
        return f"{self.country_code}{self.number}"

    def display_format(self) -> str:
        """Human readable international form, e.g. ``+86 138 1234 5678``."""
        try:
            parsed = phonenumbers.parse(self.international_format(), None)
        except NumberParseException:
            return f"{self.country_code} {self.number}"
        return phonenumbers.format_number(parsed, PhoneNumberFormat.INTERNATIONAL)

    def can_receive_sms(self) -> bool:
        return self.region != PhoneRegion.LANDLINE

    def is_landline(self) -> bool:
        return self.region == PhoneRegion.LANDLINE

    def masked(self) -> str:
        if len(self.number) <= 4:
            return f"{self.country_code}****"
        return f"{self.country_code}****{self.number[-4:]}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "country_code": self.country_code,
            "region": self.region.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PhoneNumber":
        return cls(data["number"], data["country_code"], PhoneRegion(data["region"]))

    def __str__(self) -> str:
        return self.international_format()


def _normalize_number(number: str, region: PhoneRegion) -> str:
    normalized = re.sub(r"\D", "", number)
    prefix = DUPLICATED_PREFIXES.get(region)
    if prefix and normalized.startswith(prefix[0]) and len(normalized) == prefix[1]:
        normalized = normalized[len(prefix[0]) :]
    return normalized


def _validate_number(number: str, region: PhoneRegion) -> None:
    if not number:
        raise InvalidPhoneNumberError("number cannot be empty")

    pattern = MOBILE_PATTERNS.get(region)
    if pattern is not None:
        if not pattern.match(number):
            raise InvalidPhoneNumberError(
                f"invalid mobile number for {region.value}", number
            )
    elif not 7 <= len(number) <= 15:
        raise InvalidPhoneNumberError("number must have 7 to 15 digits", number)


def _is_fixed_line(number: str, country_code: str) -> bool:
    try:
        parsed = phonenumbers.parse(f"{country_code}{number}", None)
    except NumberParseException:
        return False
    return phonenumbers.number_type(parsed) == PhoneNumberType.FIXED_LINE


class SmsContent(ValueObject):
    """
    SMS text plus its 【signature】.

    ``full_content`` is what the gateway sends; its length decides the
    segment count (70 chars per UTF8 segment, 160 otherwise).
    """

    def __init__(
        self,
        text: str,
        signature: str,
        template_id: str | None = None,
        template_params: dict[str, str] | None = None,
        encoding: SmsEncoding | str = SmsEncoding.UTF8,
        language: str = "zh-CN",
    ):
        super().__init__()

        encoding = encoding if isinstance(encoding, SmsEncoding) else SmsEncoding(encoding)

        if not text or not text.strip():
            raise InvalidSmsContentError("text cannot be empty", field="text")
        if not signature or not signature.strip():
            raise InvalidSmsContentError("signature cannot be empty", field="signature")
        if len(signature) > MAX_SIGNATURE_LENGTH:
            raise InvalidSmsContentError(
                f"signature cannot exceed {MAX_SIGNATURE_LENGTH} characters",
                field="signature",
            )
        if not (signature.startswith("【") and signature.endswith("】")):
            raise InvalidSmsContentError(
                "signature must be wrapped in 【】", field="signature"
            )
        if ILLEGAL_SMS_CHARS.search(text):
            raise InvalidSmsContentError("text contains illegal characters", field="text")

        full_length = len(text) + len(signature)
        if full_length > encoding.max_length():
            raise InvalidSmsContentError(
                f"content exceeds {encoding.max_length()} characters", field="text"
            )

        self.text = text
        self.signature = signature
        self.template_id = template_id
        self.template_params = MappingProxyType(dict(template_params or {}))
        self.encoding = encoding
        self.language = language
        self._freeze()

    @classmethod
    def create(
        cls,
        text: str,
        signature: str,
        template_id: str | None = None,
        template_params: dict[str, str] | None = None,
        encoding: SmsEncoding | str = SmsEncoding.UTF8,
        language: str = "zh-CN",
    ) -> "SmsContent":
        """Fill ``{key}`` placeholders from ``template_params`` and validate."""
        rendered = text or ""
        for key, value in (template_params or {}).items():
            rendered = rendered.replace(f"{{{key}}}", str(value))

        return cls(rendered, signature, template_id, template_params, encoding, language)

    @classmethod
    def create_from_template(
        cls,
        template_id: str,
        template_params: dict[str, str],
        signature: str,
        encoding: SmsEncoding | str = SmsEncoding.UTF8,
        language: str = "zh-CN",
    ) -> "SmsContent":
        """Build a verification code message from ``code`` and ``minutes``."""
        return cls.create(
            VERIFICATION_CODE_TEMPLATE,
            signature,
            template_id,
            template_params,
            encoding,
            language,
        )

    @property
    def is_template(self) -> bool:
        return bool(self.template_id)

    @property
    def full_content(self) -> str:
        return f"{self.text}{self.signature}"

    @property
    def length(self) -> int:
        return len(self.full_content)

    @property
    def segments(self) -> int:
        return math.ceil(self.length / self.encoding.segment_size())

    def exceeds_single_sms_limit(self) -> bool:
        return self.segments > 1

    def summary(self, max_length: int = 50) -> str:
        if len(self.text) <= max_length:
            return self.text
        return f"{self.text[:max_length]}..."

    def contains_sensitive_words(self, words: list[str]) -> bool:
        lowered = self.text.lower()
        return any(word.lower() in lowered for word in words)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "signature": self.signature,
            "template_id": self.template_id,
            "template_params": dict(self.template_params),
            "encoding": self.encoding.value,
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SmsContent":
        return cls(
            text=data["text"],
            signature=data["signature"],
            template_id=data.get("template_id"),
            template_params=data.get("template_params"),
            encoding=data.get("encoding", SmsEncoding.UTF8.value),
            language=data.get("language", "zh-CN"),
        )

    def __str__(self) -> str:
        return self.full_content


class SmsProvider(ValueObject):
    """
    SMS gateway definition.

    Lower ``priority`` numbers are preferred; a provider with priority 0 is
    configured but never selected.
    """

    # Provider region aliases that cover mainland China numbers.
    CHINA_ALIASES = ("CHINA", "CN")

    def __init__(
        self,
        provider_type: SmsProviderType | str,
        name: str,
        regions: list[str],
        encodings: list[SmsEncoding | str],
        priority: int = 1,
        is_active: bool = True,
        config: dict[str, Any] | None = None,
    ):
        super().__init__()

        try:
            provider_type = (
                provider_type
                if isinstance(provider_type, SmsProviderType)
                else SmsProviderType(provider_type)
            )
        except ValueError as e:
            raise InvalidSmsProviderError(f"unknown provider type {provider_type!r}") from e

        config = dict(config) if config else {}

        if not name or not name.strip():
            raise InvalidSmsProviderError("name cannot be empty", provider_type.value)
        if not regions:
            raise InvalidSmsProviderError(
                "at least one region is required", provider_type.value
            )
        if not encodings:
            raise InvalidSmsProviderError(
                "at least one encoding is required", provider_type.value
            )
        if priority < 0:
            raise InvalidSmsProviderError("priority cannot be negative", provider_type.value)

        required = provider_type.required_config_keys()
        missing = [key for key in required if not config.get(key)]
        if missing:
            raise InvalidSmsProviderError(
                f"missing configuration keys: {', '.join(missing)}", provider_type.value
            )
        if provider_type == SmsProviderType.CUSTOM and not config:
            raise InvalidSmsProviderError(
                "custom providers need at least one configuration key",
                provider_type.value,
            )

        self.provider_type = provider_type
        self.name = name.strip()
        self.regions = tuple(getattr(region, "value", region) for region in regions)
        self.encodings = tuple(
            e if isinstance(e, SmsEncoding) else SmsEncoding(e) for e in encodings
        )
        self.priority = priority
        self.is_active = is_active
        self.config = MappingProxyType(config)
        self._freeze()

    @classmethod
    def create(
        cls,
        provider_type: SmsProviderType | str,
        name: str,
        regions: list[str],
        encodings: list[SmsEncoding | str],
        priority: int = 1,
        is_active: bool = True,
        config: dict[str, Any] | None = None,
    ) -> "SmsProvider":
        return cls(provider_type, name, regions, encodings, priority, is_active, config)

    def is_available(self) -> bool:
        return self.is_active and self.priority > 0

    def supports_region(self, region: PhoneRegion | str) -> bool:
        region_value = getattr(region, "value", region)
        if region_value in self.regions:
            return True
        return region_value == PhoneRegion.CHINA_MAINLAND.value and any(
            alias in self.regions for alias in self.CHINA_ALIASES
        )

    def supports_encoding(self, encoding: SmsEncoding | str) -> bool:
        encoding = encoding if isinstance(encoding, SmsEncoding) else SmsEncoding(encoding)
        return encoding in self.encodings

    def compare_priority(self, other: "SmsProvider") -> int:
        """Negative when this provider is preferred over ``other``."""
        return self.priority - other.priority

    def to_dict(self, mask_config: bool = True) -> dict[str, Any]:
        return {
            "provider_type": self.provider_type.value,
            "name": self.name,
            "regions": list(self.regions),
            "encodings": [encoding.value for encoding in self.encodings],
            "priority": self.priority,
            "is_active": self.is_active,
            "config": {key: "***" for key in self.config}
            if mask_config
            else dict(self.config),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SmsProvider":
        return cls(
            provider_type=data["provider_type"],
            name=data["name"],
            regions=data["regions"],
            encodings=data["encodings"],
            priority=data.get("priority", 1),
            is_active=data.get("is_active", True),
            config=data.get("config"),
        )

    def __repr__(self) -> str:
        return (
            f"SmsProvider(type={self.provider_type.value}, name={self.name!r}, "
            f"priority={self.priority}, active={self.is_active})"
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.provider_type.value})"


__all__ = [
    "PhoneNumber",
    "SmsContent",
    "SmsProvider",
    "SmsStatusValue",
]
