"""Event type definitions.

Framework-free domain events with metadata for tracing and ordering, plus
the validation helpers and the factory used to rebuild events from their
serialized form.

Architecture:
- EventMetadata: identification, aggregate stamping and correlation
- DomainEvent: base event with payload validation and serialization
- EventValidator: coercion/validation helpers for payload fields
- EventFactory: registry of event classes for reconstruction

Payload attributes must be assigned before calling ``DomainEvent.__init__``
because the base constructor validates the payload.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from orgnotify.core.errors import ValidationError
from orgnotify.core.logging import get_logger

logger = get_logger(__name__)


# =====================================================================================
# ENUMS AND CONSTANTS
# =====================================================================================


class EventPriority(Enum):
    """Event priority levels for processing."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class EventStatus(Enum):
    """Event processing status."""

    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"
    RETRYING = "retrying"
    DEAD_LETTER = "dead_letter"


class SerializationFormat(Enum):
    """Event serialization formats."""

    JSON = "json"
    DICT = "dict"
    BINARY = "binary"


# =====================================================================================
# VALIDATION UTILITIES
# =====================================================================================


class EventValidator:
    """Validation and coercion helpers for event fields."""

    @staticmethod
    def validate_uuid(
        value: Any, field_name: str, required: bool = True
    ) -> UUID | None:
        """
        Validate UUID field.

        Raises:
            ValidationError: If the value is missing or not a UUID
        """
        if value is None:
            if required:
                raise ValidationError(f"{field_name} is required", field=field_name)
            return None

        if isinstance(value, UUID):
            return value

        if isinstance(value, str):
            try:
                return UUID(value)
            except ValueError as e:
                raise ValidationError(
                    f"{field_name} must be a valid UUID", field=field_name
                ) from e

        raise ValidationError(
            f"{field_name} must be a UUID or valid UUID string", field=field_name
        )

    @staticmethod
    def validate_string(
        value: Any,
        field_name: str,
        required: bool = True,
        min_length: int = 0,
        max_length: int | None = None,
        allowed_values: list[str] | None = None,
    ) -> str | None:
        """
        Validate string field, stripping surrounding whitespace.

        Raises:
            ValidationError: If validation fails
        """
        if value is None or value == "":
            if required:
                raise ValidationError(f"{field_name} is required", field=field_name)
            return None

        if not isinstance(value, str):
            value = str(value)

        value = value.strip()

        if len(value) < min_length:
            raise ValidationError(
                f"{field_name} must be at least {min_length} characters",
                field=field_name,
            )

        if max_length and len(value) > max_length:
            raise ValidationError(
                f"{field_name} must be at most {max_length} characters",
                field=field_name,
            )

        if allowed_values and value not in allowed_values:
            raise ValidationError(
                f"{field_name} must be one of: {', '.join(allowed_values)}",
                field=field_name,
            )

        return value

    @staticmethod
    def validate_datetime(
        value: Any, field_name: str, required: bool = True
    ) -> datetime | None:
        """
        Validate datetime field; naive values are assumed to be UTC.

        Accepts datetimes, ISO strings and POSIX timestamps.

        Raises:
            ValidationError: If validation fails
        """
        if value is None:
            if required:
                raise ValidationError(f"{field_name} is required", field=field_name)
            return None

        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=UTC)
            return value

        if isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError as e:
                raise ValidationError(
                    f"{field_name} must be a valid ISO datetime string",
                    field=field_name,
                ) from e
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=UTC)
            return parsed

        if isinstance(value, int | float):
            try:
                return datetime.fromtimestamp(value, tz=UTC)
            except (ValueError, OSError) as e:
                raise ValidationError(
                    f"{field_name} timestamp is invalid", field=field_name
                ) from e

        raise ValidationError(
            f"{field_name} must be a datetime, ISO string, or timestamp",
            field=field_name,
        )

    @staticmethod
    def validate_integer(
        value: Any,
        field_name: str,
        required: bool = True,
        min_value: int | None = None,
        max_value: int | None = None,
    ) -> int | None:
        """
        Validate integer field with range checks.

        Raises:
            ValidationError: If validation fails
        """
        if value is None:
            if required:
                raise ValidationError(f"{field_name} is required", field=field_name)
            return None

        try:
            value = int(value)
        except (ValueError, TypeError) as e:
            raise ValidationError(
                f"{field_name} must be a valid integer", field=field_name
            ) from e

        if min_value is not None and value < min_value:
            raise ValidationError(
                f"{field_name} must be at least {min_value}", field=field_name
            )

        if max_value is not None and value > max_value:
            raise ValidationError(
                f"{field_name} must be at most {max_value}", field=field_name
            )

        return value

    @staticmethod
    def validate_dict(
        value: Any, field_name: str, required: bool = True
    ) -> dict[str, Any] | None:
        """
        Validate dictionary field.

        Raises:
            ValidationError: If validation fails
        """
        if value is None:
            if required:
                raise ValidationError(f"{field_name} is required", field=field_name)
            return None

        if not isinstance(value, dict):
            raise ValidationError(f"{field_name} must be a dictionary", field=field_name)

        return value

    @staticmethod
    def validate_enum(
        value: Any, enum_class: type[Enum], field_name: str, required: bool = True
    ) -> Enum | None:
        """
        Coerce a raw value into ``enum_class``.

        Raises:
            ValidationError: If the value is not a member value
        """
        if value is None:
            if required:
                raise ValidationError(f"{field_name} is required", field=field_name)
            return None

        if isinstance(value, enum_class):
            return value

        try:
            return enum_class(value)
        except ValueError as e:
            choices = ", ".join(str(member.value) for member in enum_class)
            raise ValidationError(
                f"{field_name} must be one of: {choices}", field=field_name
            ) from e


# =====================================================================================
# EVENT METADATA
# =====================================================================================


@dataclass
class EventMetadata:
    """
    Event metadata for tracing, versioning, and correlation.

    ``aggregate_id``, ``aggregate_type`` and ``aggregate_version`` are stamped
    by ``AggregateRoot.add_event``. ``tenant_id`` is a free-form tenant key.

    Usage Example:
        metadata = EventMetadata(
            event_type="SmsSent",
            user_id=user_id,
            correlation_id="request-123",
        )
        data = metadata.to_dict()
    """

    event_id: UUID = field(default_factory=uuid4)
    event_type: str = field(default="")

    aggregate_id: UUID | None = field(default=None)
    aggregate_type: str | None = field(default=None)
    aggregate_version: int = field(default=1)

    user_id: UUID | None = field(default=None)
    tenant_id: str | None = field(default=None)

    correlation_id: str | None = field(default=None)
    causation_id: UUID | None = field(default=None)

    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    version: int = field(default=1)

    priority: EventPriority = field(default=EventPriority.NORMAL)
    status: EventStatus = field(default=EventStatus.PENDING)
    retry_count: int = field(default=0)

    source: str = field(default="")

    def __post_init__(self):
        if not self.event_type:
            self.event_type = "DomainEvent"
        if not self.source:
            self.source = "orgnotify"
        if not self.correlation_id:
            self.correlation_id = str(uuid4())

        self.validate()

    def validate(self) -> None:
        """
        Validate and coerce metadata fields.

        Raises:
            ValidationError: If validation fails
        """
        self.event_id = EventValidator.validate_uuid(self.event_id, "event_id")
        self.event_type = EventValidator.validate_string(
            self.event_type, "event_type", min_length=1, max_length=100
        )

        self.aggregate_id = EventValidator.validate_uuid(
            self.aggregate_id, "aggregate_id", required=False
        )
        self.user_id = EventValidator.validate_uuid(
            self.user_id, "user_id", required=False
        )
        self.causation_id = EventValidator.validate_uuid(
            self.causation_id, "causation_id", required=False
        )

        self.aggregate_type = EventValidator.validate_string(
            self.aggregate_type, "aggregate_type", required=False, max_length=50
        )
        self.tenant_id = EventValidator.validate_string(
            self.tenant_id, "tenant_id", required=False, max_length=64
        )
        self.correlation_id = EventValidator.validate_string(
            self.correlation_id, "correlation_id", required=False, max_length=100
        )
        self.source = EventValidator.validate_string(
            self.source, "source", required=False, max_length=50
        )

        self.timestamp = EventValidator.validate_datetime(self.timestamp, "timestamp")

        self.version = EventValidator.validate_integer(
            self.version, "version", min_value=1, max_value=1000
        )
        self.aggregate_version = EventValidator.validate_integer(
            self.aggregate_version, "aggregate_version", min_value=1
        )
        self.retry_count = EventValidator.validate_integer(
            self.retry_count, "retry_count", min_value=0, max_value=100
        )

        self.priority = EventValidator.validate_enum(
            self.priority, EventPriority, "priority"
        )
        self.status = EventValidator.validate_enum(self.status, EventStatus, "status")

    def update_status(self, status: EventStatus) -> None:
        """Update event processing status."""
        if not isinstance(status, EventStatus):
            raise ValidationError("status must be an EventStatus enum")
        self.status = status

    def increment_retry(self) -> None:
        """Increment retry count with bounds checking."""
        if self.retry_count >= 100:
            raise ValidationError("Maximum retry count exceeded")
        self.retry_count += 1

    def to_dict(self) -> dict[str, Any]:
        """Convert metadata to a JSON-friendly dictionary."""
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "aggregate_id": str(self.aggregate_id) if self.aggregate_id else None,
            "aggregate_type": self.aggregate_type,
            "aggregate_version": self.aggregate_version,
            "user_id": str(self.user_id) if self.user_id else None,
            "tenant_id": self.tenant_id,
            "correlation_id": self.correlation_id,
            "causation_id": str(self.causation_id) if self.causation_id else None,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "priority": self.priority.value,
            "status": self.status.value,
            "retry_count": self.retry_count,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EventMetadata":
        """
        Create metadata from dictionary.

        String UUIDs, ISO timestamps and enum values are coerced by ``validate``.

        Raises:
            ValidationError: If data is invalid
        """
        try:
            return cls(**data)
        except TypeError as e:
            logger.exception("Failed to deserialize event metadata", error=str(e))
            raise ValidationError(f"Invalid event metadata: {e}") from e


# =====================================================================================
# DOMAIN EVENT BASE CLASS
# =====================================================================================


def _serialize_value(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list | tuple):
        return [_serialize_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize_value(item) for key, item in value.items()}
    return value


class DomainEvent(ABC):
    """
    Base domain event.

    Usage Example:
        class DepartmentDeleted(DomainEvent):
            def __init__(self, department_id: str, reason: str, **kwargs):
                self.department_id = department_id
                self.reason = reason
                super().__init__(**kwargs)

            def validate_payload(self) -> None:
                self.department_id = EventValidator.validate_string(
                    self.department_id, "department_id"
                )
    """

    def __init__(self, metadata: EventMetadata | None = None, **kwargs: Any):
        """
        Initialize domain event.

        Args:
            metadata: Event metadata (created if not provided)
            **kwargs: Additional event data not set by the subclass
        """
        if metadata is None:
            metadata = EventMetadata(event_type=self.__class__.__name__)
        else:
            metadata.event_type = self.__class__.__name__

        self.metadata = metadata

        for key, value in kwargs.items():
            if not hasattr(self, key):
                setattr(self, key, value)

        self.validate()

    @property
    def event_type(self) -> str:
        """Return the event type name."""
        return self.__class__.__name__

    @property
    def event_id(self) -> UUID:
        """Return the event ID."""
        return self.metadata.event_id

    @property
    def timestamp(self) -> datetime:
        """Return the event timestamp."""
        return self.metadata.timestamp

    @property
    def correlation_id(self) -> str | None:
        """Return the correlation ID."""
        return self.metadata.correlation_id

    def validate(self) -> None:
        """
        Validate complete event including metadata and payload.

        Raises:
            ValidationError: If validation fails
        """
        self.metadata.validate()
        self.validate_payload()

    @abstractmethod
    def validate_payload(self) -> None:
        """
        Validate event-specific payload data.

        Raises:
            ValidationError: If validation fails
        """

    def payload(self) -> dict[str, Any]:
        """Return the serialized payload without metadata."""
        return {
            key: _serialize_value(value)
            for key, value in self.__dict__.items()
            if key != "metadata"
        }

    def with_correlation(self, correlation_id: str) -> "DomainEvent":
        """Return a copy of the event with a new correlation ID."""
        data = self.to_dict()
        data["metadata"]["correlation_id"] = correlation_id
        return self.__class__.from_dict(data)

    def to_dict(
        self, format: SerializationFormat = SerializationFormat.DICT
    ) -> dict[str, Any] | str | bytes:
        """
        Serialize event to the requested format.

        Raises:
            ValidationError: If the format is unsupported
        """
        event_data = self.payload()
        event_data["metadata"] = self.metadata.to_dict()
        event_data["__event_type__"] = self.__class__.__name__

        if format == SerializationFormat.DICT:
            return event_data
        if format == SerializationFormat.JSON:
            return json.dumps(event_data, default=str, separators=(",", ":"))
        if format == SerializationFormat.BINARY:
            return json.dumps(event_data, default=str, separators=(",", ":")).encode(
                "utf-8"
            )
        raise ValidationError(f"Unsupported serialization format: {format}")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | str | bytes) -> "DomainEvent":
        """
        Deserialize event from a dict, JSON string or UTF-8 bytes.

        Raises:
            ValidationError: If deserialization fails
        """
        if isinstance(data, bytes):
            data = data.decode("utf-8")

        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Event data is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ValidationError("Event data must be a dictionary")

        payload = dict(data)
        metadata = EventMetadata.from_dict(dict(payload.pop("metadata", {})))
        payload.pop("__event_type__", None)

        try:
            return cls(metadata=metadata, **payload)
        except TypeError as e:
            logger.exception(
                "Failed to deserialize event", event_type=cls.__name__, error=str(e)
            )
            raise ValidationError(f"Event deserialization failed: {e}") from e

    def get_size(self) -> int:
        """Approximate serialized event size in bytes."""
        return len(self.to_dict(SerializationFormat.BINARY))

    def validate_size(self, max_size_bytes: int = 1024 * 1024) -> None:
        """
        Validate event size against maximum allowed size.

        Raises:
            ValidationError: If event exceeds maximum size
        """
        size = self.get_size()
        if size > max_size_bytes:
            raise ValidationError(
                f"Event size {size} bytes exceeds maximum allowed size {max_size_bytes} bytes"
            )

    def is_expired(self, ttl_seconds: int | None = None) -> bool:
        """Check whether the event is older than ``ttl_seconds``."""
        if not ttl_seconds:
            return False

        age = (datetime.now(UTC) - self.metadata.timestamp).total_seconds()
        return age > ttl_seconds

    def __str__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"event_id={self.metadata.event_id}, "
            f"timestamp={self.metadata.timestamp.isoformat()}"
            f")"
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"event_id={self.metadata.event_id}, "
            f"aggregate_id={self.metadata.aggregate_id}, "
            f"aggregate_version={self.metadata.aggregate_version}, "
            f"correlation_id={self.metadata.correlation_id}"
            f")"
        )


# =====================================================================================
# EVENT FACTORY
# =====================================================================================


class EventFactory:
    """
    Registry of event classes for dynamic creation and reconstruction.

    Every domain package registers its events at import time.
    """

    _event_types: dict[str, type[DomainEvent]] = {}

    @classmethod
    def register_event_type(cls, event_class: type[DomainEvent]) -> None:
        """Register an event class under its class name."""
        cls._event_types[event_class.__name__] = event_class
        logger.debug("Registered event type", event_type=event_class.__name__)

    @classmethod
    def create_event(
        cls,
        event_type: str,
        data: dict[str, Any],
        metadata: EventMetadata | None = None,
    ) -> DomainEvent:
        """
        Create event instance from type name and data.

        Raises:
            ValidationError: If the type is unknown or the payload is invalid
        """
        if event_type not in cls._event_types:
            available_types = ", ".join(sorted(cls._event_types))
            raise ValidationError(
                f"Unknown event type: {event_type}. Available types: {available_types}"
            )

        event_class = cls._event_types[event_type]

        try:
            event = event_class(metadata=metadata, **data)
        except TypeError as e:
            logger.exception(
                "Failed to create event",
                event_type=event_type,
                data_keys=list(data.keys()),
                error=str(e),
            )
            raise ValidationError(f"Failed to create {event_type}: {e}") from e

        event.validate_size()
        return event

    @classmethod
    def reconstruct_event(cls, data: dict[str, Any] | str | bytes) -> DomainEvent:
        """
        Reconstruct event from serialized data.

        Raises:
            ValidationError: If reconstruction fails
        """
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Event data is not valid JSON: {e}") from e

        event_type = data.get("__event_type__") or data.get("metadata", {}).get(
            "event_type"
        )
        if not event_type:
            raise ValidationError("Event type not found in data")

        if event_type not in cls._event_types:
            raise ValidationError(f"Unknown event type: {event_type}")

        return cls._event_types[event_type].from_dict(data)

    @classmethod
    def get_registered_types(cls) -> list[str]:
        """Get list of registered event types."""
        return list(cls._event_types.keys())


__all__ = [
    "DomainEvent",
    "EventFactory",
    "EventMetadata",
    "EventPriority",
    "EventStatus",
    "EventValidator",
    "SerializationFormat",
]
