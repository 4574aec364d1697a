"""In-process event bus.

Aggregates collect their events; the caller drains them with
``AggregateRoot.clear_events`` and hands them to a bus. Transport to other
processes is outside this package, so only the in-memory implementation
ships here.

Usage Example:
    bus = InMemoryEventBus()
    await bus.start()

    async def on_sms_failed(event):
        ...

    bus.subscribe(SmsFailed, on_sms_failed)
    await publish_all(bus, aggregate)
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from orgnotify.core.errors import InfrastructureError, ValidationError
from orgnotify.core.events.types import DomainEvent
from orgnotify.core.logging import get_logger

if TYPE_CHECKING:
    from orgnotify.core.domain.base import AggregateRoot

logger = get_logger(__name__)

EventHandlerType = Callable[[DomainEvent], None | Awaitable[None]]


class EventBusError(InfrastructureError):
    """Base exception for event bus operations."""

    default_code = "EVENT_BUS_ERROR"
    status_code = 500
    retryable = True


class EventProcessingError(EventBusError):
    """Raised when one or more handlers fail for an event."""

    default_code = "EVENT_PROCESSING_ERROR"


class EventBus(ABC):
    """Contract for publishing and subscribing to domain events."""

    @abstractmethod
    async def publish(
        self, event: DomainEvent, correlation_id: str | None = None
    ) -> None:
        """
        Publish a domain event.

        Raises:
            EventBusError: If bus is not started
            EventProcessingError: If handlers fail and the bus is strict
            ValidationError: If event is invalid
        """

    @abstractmethod
    def subscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        """Subscribe a sync or async handler to an event type."""

    @abstractmethod
    def unsubscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        """Remove a handler subscription for an event type."""

    @abstractmethod
    async def start(self) -> None:
        """Prepare the bus for event processing."""

    @abstractmethod
    async def stop(self) -> None:
        """Shut the bus down. Must not raise."""


class InMemoryEventBus(EventBus):
    """
    Event bus for single-process use.

    Handlers subscribed to a base event class also receive its subclasses.
    Sync handlers run in subscription order, async handlers run concurrently.
    Handler failures are logged; when ``strict`` is set they are re-raised as
    one ``EventProcessingError`` after every handler has run.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self._handlers: dict[str, list[EventHandlerType]] = defaultdict(list)
        self._async_handlers: dict[str, list[EventHandlerType]] = defaultdict(list)
        self._running = False
        self._start_time: datetime | None = None
        self._event_count = 0
        self._error_count = 0

        logger.debug("InMemoryEventBus initialized", strict=strict)

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """
        Start the bus.

        Raises:
            EventBusError: If bus is already running
        """
        if self._running:
            raise EventBusError("Event bus is already running")

        self._running = True
        self._start_time = datetime.now(UTC)
        self._event_count = 0

        logger.info(
            "In-memory event bus started",
            start_time=self._start_time.isoformat(),
            handler_types=len(self._handlers) + len(self._async_handlers),
        )

    async def stop(self) -> None:
        """Stop the bus; registrations are kept for a later restart."""
        if not self._running:
            return

        self._running = False
        uptime = (
            (datetime.now(UTC) - self._start_time).total_seconds()
            if self._start_time
            else 0
        )

        logger.info(
            "In-memory event bus stopped",
            uptime_seconds=uptime,
            events_processed=self._event_count,
            handler_errors=self._error_count,
        )

    async def publish(
        self, event: DomainEvent, correlation_id: str | None = None
    ) -> None:
        if not self._running:
            raise EventBusError("Event bus is not running - call start() first")

        if not isinstance(event, DomainEvent):
            raise ValidationError(
                f"Event must be DomainEvent instance, got {type(event).__name__}"
            )

        if correlation_id:
            event.metadata.correlation_id = correlation_id

        self._event_count += 1
        handlers = self._get_handlers_for_event(event)

        with structlog.contextvars.bound_contextvars(
            correlation_id=event.metadata.correlation_id,
            event_type=event.event_type,
        ):
            if not handlers:
                logger.debug(
                    "No handlers registered for event",
                    event_id=str(event.metadata.event_id),
                )
                return

            logger.debug(
                "Publishing event",
                event_id=str(event.metadata.event_id),
                aggregate_id=str(event.metadata.aggregate_id),
                handler_count=len(handlers),
            )

            failures = await self._execute_handlers(handlers, event)

        if failures and self.strict:
            names = ", ".join(name for name, _ in failures)
            raise EventProcessingError(
                f"{len(failures)} handler(s) failed for {event.event_type}: {names}",
                details={"event_id": str(event.metadata.event_id)},
            ) from failures[0][1]

    async def _execute_handlers(
        self, handlers: list[EventHandlerType], event: DomainEvent
    ) -> list[tuple[str, Exception]]:
        failures: list[tuple[str, Exception]] = []
        sync_handlers = [h for h in handlers if not inspect.iscoroutinefunction(h)]
        async_handlers = [h for h in handlers if inspect.iscoroutinefunction(h)]

        for handler in sync_handlers:
            try:
                handler(event)
            except Exception as e:
                failures.append((self._handler_name(handler), e))

        if async_handlers:
            results = await asyncio.gather(
                *(handler(event) for handler in async_handlers), return_exceptions=True
            )
            for handler, result in zip(async_handlers, results, strict=True):
                if isinstance(result, Exception):
                    failures.append((self._handler_name(handler), result))

        for name, error in failures:
            self._error_count += 1
            logger.error(
                "Event handler failed",
                handler=name,
                error=str(error),
                error_type=type(error).__name__,
            )

        return failures

    def subscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        """
        Subscribe a handler to an event type.

        Raises:
            ValidationError: If the event type or handler signature is invalid
        """
        self._validate_subscription(event_type, handler)

        event_name = event_type.__name__
        if inspect.iscoroutinefunction(handler):
            self._async_handlers[event_name].append(handler)
        else:
            self._handlers[event_name].append(handler)

        logger.debug(
            "Handler subscribed",
            event_type=event_name,
            handler=self._handler_name(handler),
            is_async=inspect.iscoroutinefunction(handler),
        )

    def _validate_subscription(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        if not isinstance(event_type, type) or not issubclass(event_type, DomainEvent):
            raise ValidationError(
                f"event_type must be DomainEvent subclass, got {event_type}"
            )

        if not callable(handler):
            raise ValidationError(f"Handler must be callable, got {type(handler)}")

        try:
            sig = inspect.signature(handler)
        except (ValueError, TypeError) as e:
            raise ValidationError(f"Invalid handler signature: {e}") from e

        if len(sig.parameters) != 1:
            raise ValidationError(
                "Handler must accept exactly one parameter (event), "
                f"got {len(sig.parameters)} parameters"
            )

    def unsubscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        """Remove a handler; no-op when it was never subscribed."""
        event_name = event_type.__name__
        registry = (
            self._async_handlers
            if inspect.iscoroutinefunction(handler)
            else self._handlers
        )

        if handler in registry.get(event_name, []):
            registry[event_name].remove(handler)
            logger.debug(
                "Handler unsubscribed",
                event_type=event_name,
                handler=self._handler_name(handler),
            )

    def _get_handlers_for_event(self, event: DomainEvent) -> list[EventHandlerType]:
        handlers: list[EventHandlerType] = []
        for klass in event.__class__.__mro__:
            if klass is DomainEvent:
                break
            handlers.extend(self._handlers.get(klass.__name__, []))
            handlers.extend(self._async_handlers.get(klass.__name__, []))
        handlers.extend(self._handlers.get(DomainEvent.__name__, []))
        handlers.extend(self._async_handlers.get(DomainEvent.__name__, []))
        return handlers

    @staticmethod
    def _handler_name(handler: EventHandlerType) -> str:
        return getattr(handler, "__name__", repr(handler))

    def get_statistics(self) -> dict[str, Any]:
        """Bus counters for diagnostics."""
        sync_total = sum(len(h) for h in self._handlers.values())
        async_total = sum(len(h) for h in self._async_handlers.values())
        return {
            "bus_type": "in_memory",
            "running": self._running,
            "strict": self.strict,
            "start_time": self._start_time.isoformat() if self._start_time else None,
            "events_processed": self._event_count,
            "handler_errors": self._error_count,
            "handler_registrations": {
                "sync": sync_total,
                "async": async_total,
                "total": sync_total + async_total,
            },
        }


async def publish_all(
    bus: EventBus, aggregate: "AggregateRoot", correlation_id: str | None = None
) -> list[DomainEvent]:
    """
    Publish the aggregate's uncommitted events in order.

    Each event leaves the aggregate once it is published. When a publish
    raises, that event and the ones after it stay on the aggregate.

    Returns the published events.
    """
    published: list[DomainEvent] = []
    try:
        for event in aggregate.get_events():
            await bus.publish(event, correlation_id=correlation_id)
            published.append(event)
    finally:
        aggregate.discard_events(published)
    return published


__all__ = [
    "EventBus",
    "EventBusError",
    "EventHandlerType",
    "EventProcessingError",
    "InMemoryEventBus",
    "publish_all",
]
