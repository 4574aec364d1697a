"""Identifier value objects shared across modules.

Identifiers keep the value exactly as given and compare case-insensitively,
so ``UserId("ABC...")`` and ``UserId("abc...")`` refer to the same user.
"""

import re
import secrets
import string
import uuid
from typing import Any, ClassVar

from orgnotify.core.domain.base import ValueObject
from orgnotify.core.errors import ValidationError

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
UUID_V4_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
TENANT_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

TENANT_TYPES = ("enterprise", "community", "team", "personal")


class InvalidIdentifierError(ValidationError):
    """Raised when an identifier value does not match its format."""

    default_code = "INVALID_IDENTIFIER"

    def __init__(self, identifier_type: str, value: Any, reason: str, **kwargs):
        super().__init__(
            f"Invalid {identifier_type}: {reason}",
            field=identifier_type,
            **kwargs,
        )
        self.details["value"] = str(value)


class BaseIdentifier(ValueObject):
    """Base identifier: a non-empty string validated by ``is_valid_format``."""

    def __init__(self, value: str):
        super().__init__()

        if value is None or not isinstance(value, str) or not value.strip():
            raise InvalidIdentifierError(
                self.__class__.__name__, value, "value cannot be empty"
            )

        self._check_format(value)
        self.value = value
        self._freeze()

    def _check_format(self, value: str) -> None:
        if not self.is_valid_format(value):
            raise InvalidIdentifierError(
                self.__class__.__name__, value, f"malformed value {value!r}"
            )

    @classmethod
    def is_valid_format(cls, value: str) -> bool:
        """Return True when ``value`` has the identifier's format."""
        return True

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        """Check a raw value without raising."""
        try:
            cls(value)
        except ValidationError:
            return False
        return True

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.value.lower() == other.value.lower()

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self.value.lower()))

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.value!r})"

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value}


class UUIDIdentifier(BaseIdentifier):
    """Identifier backed by a UUID string; a uuid4 is generated when omitted."""

    pattern: ClassVar[re.Pattern] = UUID_PATTERN

    def __init__(self, value: str | None = None):
        super().__init__(value if value is not None else str(uuid.uuid4()))

    @classmethod
    def is_valid_format(cls, value: str) -> bool:
        return bool(cls.pattern.match(value))

    @classmethod
    def generate(cls):
        return cls(str(uuid.uuid4()))

    def as_uuid(self) -> uuid.UUID:
        return uuid.UUID(self.value)


class UserId(UUIDIdentifier):
    """User identifier."""


class NotifId(UUIDIdentifier):
    """Notification identifier, shared by push and SMS notifications."""


class DepartmentId(UUIDIdentifier):
    """Department identifier."""


class OrganizationId(UUIDIdentifier):
    """Organization identifier."""


class TemplateId(UUIDIdentifier):
    """Template identifier; only version 4 UUIDs are accepted."""

    pattern = UUID_V4_PATTERN


class TenantId(BaseIdentifier):
    """
    Tenant key such as ``enterprise-acme`` or ``tenant-x7k2m9qa``.

    3 to 50 characters of letters, digits, ``-`` and ``_``; it may not start
    or end with a separator. A known prefix encodes the tenant type.
    """

    MIN_LENGTH = 3
    MAX_LENGTH = 50

    def _check_format(self, value: str) -> None:
        if not self.MIN_LENGTH <= len(value) <= self.MAX_LENGTH:
            raise InvalidIdentifierError(
                "TenantId",
                value,
                f"length must be between {self.MIN_LENGTH} and {self.MAX_LENGTH}",
            )
        if not TENANT_PATTERN.match(value):
            raise InvalidIdentifierError(
                "TenantId", value, "only letters, digits, '-' and '_' are allowed"
            )
        if value[0] in "-_" or value[-1] in "-_":
            raise InvalidIdentifierError(
                "TenantId", value, "cannot start or end with '-' or '_'"
            )

    @classmethod
    def is_valid_format(cls, value: str) -> bool:
        return (
            cls.MIN_LENGTH <= len(value) <= cls.MAX_LENGTH
            and bool(TENANT_PATTERN.match(value))
            and value[0] not in "-_"
            and value[-1] not in "-_"
        )

    @classmethod
    def create(cls, tenant_type: str, identifier: str) -> "TenantId":
        """Build a prefixed tenant id, e.g. ``create("team", "core")``."""
        return cls(f"{tenant_type.lower()}-{identifier}")

    @classmethod
    def generate(cls, length: int = 8) -> "TenantId":
        alphabet = string.ascii_lowercase + string.digits
        suffix = "".join(secrets.choice(alphabet) for _ in range(length))
        return cls.create("tenant", suffix)

    def get_type(self) -> str | None:
        lowered = self.value.lower()
        for tenant_type in TENANT_TYPES:
            if lowered.startswith(f"{tenant_type}-"):
                return tenant_type
        return None

    def get_identifier(self) -> str:
        tenant_type = self.get_type()
        if tenant_type:
            return self.value[len(tenant_type) + 1 :]
        return self.value


__all__ = [
    "BaseIdentifier",
    "DepartmentId",
    "InvalidIdentifierError",
    "NotifId",
    "OrganizationId",
    "TemplateId",
    "TenantId",
    "UUIDIdentifier",
    "UserId",
]
