"""Domain primitives shared by every orgnotify module.

Pure Python building blocks with no framework dependencies:

- ValueObject: immutable objects compared by their public attributes
- Entity: mutable objects with identity, audit fields and soft delete
- AggregateRoot: entities that collect domain events and carry a version
- DomainService: stateless domain logic coordinators

Value objects call ``self._freeze()`` at the end of ``__init__``; any later
assignment raises ``AttributeError``.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeVar
from uuid import UUID, uuid4

from orgnotify.core.errors import ValidationError

if TYPE_CHECKING:
    from orgnotify.core.events.types import DomainEvent


def utc_now() -> datetime:
    """Timezone-aware current time used for every domain timestamp."""
    return datetime.now(UTC)


# =====================================================================================
# VALUE OBJECT BASE CLASS
# =====================================================================================


class ValueObject(ABC):
    """
    Base value object.

    Value objects are immutable objects that are defined entirely by their
    attributes. They have no conceptual identity and are equal when all their
    public attributes are equal.

    Usage Example:
        class Signature(ValueObject):
            def __init__(self, text: str):
                super().__init__()
                self.validate_length(text, 3, 10, "signature")
                self.text = text
                self._freeze()

            def __str__(self) -> str:
                return self.text
    """

    def __init__(self):
        """Initialize value object. Subclasses should override with specific validation."""
        self._frozen = False
        self._hash_cache = None

    def _freeze(self) -> None:
        """Mark the object as frozen (immutable)."""
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if getattr(self, "_frozen", False) and name != "_hash_cache":
            raise AttributeError(f"Cannot modify immutable {self.__class__.__name__}")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        """Prevent deletion of attributes."""
        if getattr(self, "_frozen", False):
            raise AttributeError(
                f"Cannot delete attribute from immutable {self.__class__.__name__}"
            )
        super().__delattr__(name)

    def _public_attributes(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    def __eq__(self, other: Any) -> bool:
        """Check equality based on all public attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self._public_attributes() == other._public_attributes()

    def __hash__(self) -> int:
        """Return hash based on all public attributes."""
        if self._hash_cache is None:
            values = []
            for key, value in sorted(self._public_attributes().items()):
                values.append((key, _hashable(value)))
            self._hash_cache = hash((self.__class__.__name__, tuple(values)))
        return self._hash_cache

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        attrs_str = ", ".join(
            f"{key}={value!r}" for key, value in self._public_attributes().items()
        )
        return f"{self.__class__.__name__}({attrs_str})"

    @abstractmethod
    def __str__(self) -> str:
        """String representation. Must be implemented by subclasses."""

    def to_dict(self) -> dict[str, Any]:
        """Convert value object to a JSON-friendly dictionary."""
        return {key: _serialize(value) for key, value in self._public_attributes().items()}

    @classmethod
    def validate_not_empty(cls, value: Any, field_name: str) -> None:
        """
        Validate that a value is not empty.

        Raises:
            ValidationError: If value is None or a blank string
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"{field_name} cannot be empty", field=field_name)

    @classmethod
    def validate_type(cls, value: Any, expected_type: type, field_name: str) -> None:
        """
        Validate value type.

        Raises:
            ValidationError: If value is wrong type
        """
        if not isinstance(value, expected_type):
            raise ValidationError(
                f"{field_name} must be of type {expected_type.__name__}, got {type(value).__name__}",
                field=field_name,
            )

    @classmethod
    def validate_in_range(
        cls, value: Any, min_val: Any, max_val: Any, field_name: str
    ) -> None:
        """
        Validate value is in range (inclusive).

        Raises:
            ValidationError: If value is out of range
        """
        if value < min_val or value > max_val:
            raise ValidationError(
                f"{field_name} must be between {min_val} and {max_val}", field=field_name
            )

    @classmethod
    def validate_length(
        cls, value: str, min_length: int, max_length: int, field_name: str
    ) -> None:
        """
        Validate string length after stripping whitespace.

        Raises:
            ValidationError: If length is invalid
        """
        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string", field=field_name)

        length = len(value.strip())
        if length < min_length or length > max_length:
            raise ValidationError(
                f"{field_name} length must be between {min_length} and {max_length} characters",
                field=field_name,
            )

    @classmethod
    def validate_pattern(cls, value: str, pattern: str, field_name: str) -> None:
        """
        Validate string against regex pattern.

        Raises:
            ValidationError: If pattern doesn't match
        """
        import re

        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string", field=field_name)

        if not re.match(pattern, value):
            raise ValidationError(
                f"{field_name} does not match required pattern", field=field_name
            )

    @classmethod
    def validate_choices(cls, value: Any, choices: list[Any], field_name: str) -> None:
        """
        Validate value is in allowed choices.

        Raises:
            ValidationError: If value not in choices
        """
        if value not in choices:
            raise ValidationError(
                f"{field_name} must be one of: {', '.join(map(str, choices))}",
                field=field_name,
            )


def _hashable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return tuple(sorted((k, _hashable(v)) for k, v in value.items()))
    if isinstance(value, list | tuple):
        return tuple(_hashable(v) for v in value)
    if isinstance(value, set | frozenset):
        return tuple(sorted(_hashable(v) for v in value))
    return value


def _serialize(value: Any) -> Any:
    from enum import Enum

    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, list | tuple | set | frozenset):
        return [_serialize(v) for v in value]
    if isinstance(value, Mapping):
        return {k: _serialize(v) for k, v in value.items()}
    return value


# =====================================================================================
# ENTITY BASE CLASS
# =====================================================================================


class Entity(ABC):
    """
    Base entity with identity, audit fields and soft delete.

    Entities are mutable objects with a distinct identity that persists over
    time. The identity is either a UUID or an identifier value object.

    Soft delete only stamps ``deleted_at``/``deleted_by``; subclasses that keep
    a status field move it to their own deleted state as well.
    """

    def __init__(self, entity_id: Any = None, created_by: str = "system"):
        """
        Initialize entity with ID, audit fields and timestamps.

        Args:
            entity_id: Identity of the entity (a UUID is generated if not provided)
            created_by: Actor recorded as creator
        """
        self.id = entity_id if entity_id is not None else uuid4()
        self.created_at = utc_now()
        self.updated_at = self.created_at
        self.created_by = created_by
        self.updated_by = created_by
        self.deleted_at: datetime | None = None
        self.deleted_by: str | None = None

        self._validate_entity()

    def _validate_entity(self) -> None:
        """
        Validate entity state. Override in subclasses for specific validation.

        Raises:
            ValidationError: If entity is in invalid state
        """
        if self.id is None or (isinstance(self.id, str) and not self.id.strip()):
            raise ValidationError("Entity ID is required")

        if not isinstance(self.created_at, datetime):
            raise ValidationError("Entity created_at must be a datetime")

    def mark_modified(self, updated_by: str | None = None) -> None:
        """Update the updated_at timestamp and the last actor."""
        self.updated_at = utc_now()
        if updated_by:
            self.updated_by = updated_by

    def is_deleted(self) -> bool:
        """Check whether the entity has been soft deleted."""
        return self.deleted_at is not None

    def soft_delete(self, deleted_by: str = "system") -> None:
        """Mark the entity as deleted without removing it."""
        if self.is_deleted():
            raise ValidationError(f"{self.__class__.__name__} is already deleted")

        self.deleted_at = utc_now()
        self.deleted_by = deleted_by
        self.mark_modified(deleted_by)

    def restore(self, restored_by: str = "system") -> None:
        """Clear the soft delete markers."""
        if not self.is_deleted():
            raise ValidationError(f"{self.__class__.__name__} is not deleted")

        self.deleted_at = None
        self.deleted_by = None
        self.mark_modified(restored_by)

    def __eq__(self, other: Any) -> bool:
        """Check equality based on entity ID."""
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Return hash based on entity ID."""
        return hash((self.__class__.__name__, self.id))

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"{self.__class__.__name__}(id={self.id}, created_at={self.created_at})"

    def __str__(self) -> str:
        """String representation for display."""
        return f"{self.__class__.__name__}({self.id})"

    def to_dict(self) -> dict[str, Any]:
        """Convert entity to dictionary."""
        return {
            key: _serialize(value)
            for key, value in self.__dict__.items()
            if not key.startswith("_")
        }


# =====================================================================================
# AGGREGATE ROOT CLASS
# =====================================================================================


class AggregateRoot(Entity):
    """
    Aggregate root with domain event management.

    Aggregate roots are the consistency boundary for a cluster of objects.
    Each recorded event bumps the aggregate version; the version, id and type
    are stamped into the event metadata so an event store can order them.

    Usage Example:
        class Order(AggregateRoot):
            def confirm(self) -> None:
                if self.status != OrderStatus.PENDING:
                    raise DomainError("Only pending orders can be confirmed")
                self.status = OrderStatus.CONFIRMED
                self.add_event(OrderConfirmed(order_id=str(self.id)))
    """

    def __init__(self, entity_id: Any = None, created_by: str = "system"):
        """
        Initialize aggregate root.

        Args:
            entity_id: Identity of the aggregate (generated if not provided)
            created_by: Actor recorded as creator
        """
        self._events: list[DomainEvent] = []
        self._version = 1
        super().__init__(entity_id, created_by)

    def add_event(self, event: "DomainEvent") -> None:
        """
        Record a domain event and stamp it with aggregate metadata.

        Raises:
            ValidationError: If event is not a DomainEvent
        """
        from orgnotify.core.events.types import DomainEvent

        if not isinstance(event, DomainEvent):
            raise ValidationError("Event must be a DomainEvent instance")

        self._version += 1
        event.metadata.aggregate_id = self._aggregate_uuid()
        event.metadata.aggregate_type = self.__class__.__name__
        event.metadata.aggregate_version = self._version

        self._events.append(event)
        self.mark_modified()

    def _aggregate_uuid(self) -> UUID | None:
        raw = getattr(self.id, "value", self.id)
        try:
            return raw if isinstance(raw, UUID) else UUID(str(raw))
        except ValueError:
            return None

    def clear_events(self) -> list["DomainEvent"]:
        """Clear and return all uncommitted events."""
        events = self._events.copy()
        self._events.clear()
        return events

    def discard_events(self, events: list["DomainEvent"]) -> None:
        """Drop ``events`` from the uncommitted list, keeping the rest in order."""
        committed = {event.event_id for event in events}
        self._events = [event for event in self._events if event.event_id not in committed]

    def get_events(self) -> list["DomainEvent"]:
        """Get copy of uncommitted events without clearing them."""
        return self._events.copy()

    def has_events(self) -> bool:
        """Check if aggregate has uncommitted events."""
        return len(self._events) > 0

    def event_count(self) -> int:
        """Get count of uncommitted events."""
        return len(self._events)

    def increment_version(self) -> None:
        """Increment aggregate version for optimistic locking."""
        self._version += 1
        self.mark_modified()

    def check_version(self, expected_version: int) -> bool:
        """Check if aggregate version matches expected version."""
        return self._version == expected_version

    def apply_event(self, event: "DomainEvent") -> None:
        """
        Apply an event to update aggregate state.

        Subclasses dispatch on the event class to rebuild their state.
        """

    def replay_events(self, events: list["DomainEvent"]) -> None:
        """
        Replay a list of events to rebuild aggregate state.

        Replayed events are not recorded as uncommitted.
        """
        for event in events:
            self.apply_event(event)
            self.increment_version()

    @property
    def version(self) -> int:
        """Get current aggregate version."""
        return self._version

    def _validate_entity(self) -> None:
        super()._validate_entity()

        if not isinstance(self._version, int) or self._version < 1:
            raise ValidationError("Aggregate version must be a positive integer")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"id={self.id}, "
            f"version={self._version}, "
            f"events={len(self._events)})"
        )


# =====================================================================================
# DOMAIN SERVICE BASE CLASS
# =====================================================================================


class DomainService(ABC):
    """
    Base class for domain services.

    Domain services hold logic that spans several aggregates or value objects
    (provider selection, priority scoring, hierarchy checks). They keep no
    state between calls beyond their injected collaborators.
    """

    @abstractmethod
    def __str__(self) -> str:
        """String representation of the service."""


EntityT = TypeVar("EntityT", bound=Entity)
AggregateT = TypeVar("AggregateT", bound=AggregateRoot)
ValueObjectT = TypeVar("ValueObjectT", bound=ValueObject)

__all__ = [
    "AggregateRoot",
    "AggregateT",
    "DomainService",
    "Entity",
    "EntityT",
    "ValueObject",
    "ValueObjectT",
    "utc_now",
]
