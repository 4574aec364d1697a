"""Domain event types and the in-process event bus."""

from orgnotify.core.events.bus import (
    EventBus,
    EventBusError,
    EventProcessingError,
    InMemoryEventBus,
    publish_all,
)
from orgnotify.core.events.types import (
    DomainEvent,
    EventFactory,
    EventMetadata,
    EventPriority,
    EventStatus,
    EventValidator,
    SerializationFormat,
)

__all__ = [
    "DomainEvent",
    "EventBus",
    "EventBusError",
    "EventFactory",
    "EventMetadata",
    "EventPriority",
    "EventProcessingError",
    "EventStatus",
    "EventValidator",
    "InMemoryEventBus",
    "SerializationFormat",
    "publish_all",
]
