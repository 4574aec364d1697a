"""
Tests for domain event serialization and the in-memory event bus.
"""

import pytest
import pytest_asyncio

from orgnotify.core.errors import ValidationError
from orgnotify.core.events import (
    DomainEvent,
    EventBusError,
    EventFactory,
    EventMetadata,
    EventProcessingError,
    InMemoryEventBus,
    SerializationFormat,
    publish_all,
)
from orgnotify.modules.department.domain import (
    DepartmentAggregate,
    DepartmentMoved,
    DepartmentStatusChanged,
)
from orgnotify.modules.department.domain.events import DepartmentEvent
from orgnotify.shared.value_objects import DepartmentId, OrganizationId, TenantId

pytestmark = pytest.mark.unit


@pytest.fixture
def event():
    """A department status change."""
    return DepartmentStatusChanged(
        previous_status="PENDING",
        new_status="ACTIVE",
        reason="approved",
        department_id=str(DepartmentId.generate()),
        tenant_id="enterprise-acme",
        organization_id=str(OrganizationId.generate()),
    )


@pytest_asyncio.fixture
async def bus():
    """Started in-memory bus."""
    bus = InMemoryEventBus()
    await bus.start()
    yield bus
    await bus.stop()


class TestEventSerialization:
    """Test event round trips."""

    def test_dict_round_trip(self, event):
        """Test to_dict/from_dict keep payload and metadata."""
        restored = DepartmentStatusChanged.from_dict(event.to_dict())

        assert restored.payload() == event.payload()
        assert restored.event_id == event.event_id
        assert restored.timestamp == event.timestamp

    def test_json_reconstruction(self, event):
        """Test the factory rebuilds events from JSON."""
        restored = EventFactory.reconstruct_event(event.to_dict(SerializationFormat.JSON))

        assert isinstance(restored, DepartmentStatusChanged)
        assert restored.new_status == "ACTIVE"

    def test_binary_reconstruction(self, event):
        """Test the factory rebuilds events from bytes."""
        restored = EventFactory.reconstruct_event(event.to_dict(SerializationFormat.BINARY))
        assert restored.reason == "approved"

    def test_payload_excludes_metadata(self, event):
        """Test the payload only carries event fields."""
        assert "metadata" not in event.payload()

    def test_datetimes_survive(self):
        """Test datetime fields come back as aware datetimes."""
        moved = DepartmentMoved(
            old_parent_department_id=None,
            new_parent_department_id=str(DepartmentId.generate()),
            old_level=1,
            new_level=2,
            department_id=str(DepartmentId.generate()),
            tenant_id="enterprise-acme",
            organization_id=str(OrganizationId.generate()),
        )
        restored = DepartmentMoved.from_dict(moved.to_dict())

        assert restored.moved_at == moved.moved_at
        assert restored.moved_at.tzinfo is not None

    def test_invalid_payload(self):
        """Test payload validation rejects unknown statuses."""
        with pytest.raises(ValidationError):
            DepartmentStatusChanged(
                previous_status="PENDING",
                new_status="ARCHIVED",
                department_id="d",
                tenant_id="t",
                organization_id="o",
            )

    def test_unknown_event_type(self):
        """Test the factory refuses unregistered types."""
        with pytest.raises(ValidationError):
            EventFactory.reconstruct_event({"__event_type__": "NoSuchEvent"})
        with pytest.raises(ValidationError):
            EventFactory.create_event("NoSuchEvent", {})

    def test_registered_types(self):
        """Test module events register themselves."""
        assert "DepartmentCreated" in EventFactory.get_registered_types()

    def test_with_correlation(self, event):
        """Test the correlation copy keeps the event id."""
        copy = event.with_correlation("req-9")

        assert copy.correlation_id == "req-9"
        assert copy.event_id == event.event_id

    def test_metadata_validation(self):
        """Test invalid metadata is rejected."""
        with pytest.raises(ValidationError):
            EventMetadata(event_type="X", aggregate_id="not-a-uuid")

    def test_is_expired(self, event):
        """Test a ttl of zero never expires."""
        assert not event.is_expired()
        assert not event.is_expired(ttl_seconds=3600)


class TestInMemoryEventBus:
    """Test publishing and subscriptions."""

    @pytest.mark.asyncio
    async def test_sync_and_async_handlers(self, bus, event):
        """Test both handler kinds receive the event."""
        received = []

        def on_sync(evt):
            received.append(("sync", evt.new_status))

        async def on_async(evt):
            received.append(("async", evt.new_status))

        bus.subscribe(DepartmentStatusChanged, on_sync)
        bus.subscribe(DepartmentStatusChanged, on_async)
        await bus.publish(event)

        assert sorted(received) == [("async", "ACTIVE"), ("sync", "ACTIVE")]

    @pytest.mark.asyncio
    async def test_base_class_subscription(self, bus, event):
        """Test handlers on a base class see subclass events."""
        received = []
        bus.subscribe(DepartmentEvent, received.append)
        bus.subscribe(DomainEvent, received.append)

        await bus.publish(event)

        assert received == [event, event]

    @pytest.mark.asyncio
    async def test_correlation_id_applied(self, bus, event):
        """Test the publish correlation id is stamped on the event."""
        await bus.publish(event, correlation_id="req-1")
        assert event.correlation_id == "req-1"

    @pytest.mark.asyncio
    async def test_failures_are_logged_not_raised(self, bus, event):
        """Test a failing handler does not stop the others."""
        received = []

        def broken(evt):
            raise RuntimeError("handler down")

        bus.subscribe(DepartmentStatusChanged, broken)
        bus.subscribe(DepartmentStatusChanged, received.append)
        await bus.publish(event)

        assert received == [event]
        assert bus.get_statistics()["handler_errors"] == 1

    @pytest.mark.asyncio
    async def test_strict_bus_raises_after_all_handlers(self, event):
        """Test strict mode raises once every handler has run."""
        bus = InMemoryEventBus(strict=True)
        await bus.start()
        received = []

        async def broken(evt):
            raise RuntimeError("handler down")

        bus.subscribe(DepartmentStatusChanged, broken)
        bus.subscribe(DepartmentStatusChanged, received.append)

        with pytest.raises(EventProcessingError):
            await bus.publish(event)
        assert received == [event]

    @pytest.mark.asyncio
    async def test_publish_requires_start(self, event):
        """Test publishing on a stopped bus fails."""
        with pytest.raises(EventBusError):
            await InMemoryEventBus().publish(event)

    @pytest.mark.asyncio
    async def test_double_start(self, bus):
        """Test a running bus cannot be started again."""
        with pytest.raises(EventBusError):
            await bus.start()

    def test_handler_signature(self):
        """Test handlers must take exactly one argument."""
        bus = InMemoryEventBus()
        with pytest.raises(ValidationError):
            bus.subscribe(DepartmentStatusChanged, lambda: None)
        with pytest.raises(ValidationError):
            bus.subscribe(str, lambda evt: None)

    @pytest.mark.asyncio
    async def test_unsubscribe(self, bus, event):
        """Test removed handlers no longer run."""
        received = []
        bus.subscribe(DepartmentStatusChanged, received.append)
        bus.unsubscribe(DepartmentStatusChanged, received.append)

        await bus.publish(event)
        assert received == []

    @pytest.mark.asyncio
    async def test_publish_all_drains_aggregate(self, bus):
        """Test aggregate events are published in order and cleared."""
        aggregate = DepartmentAggregate()
        aggregate.create_department(
            TenantId("enterprise-acme"), OrganizationId.generate(), "Engineering"
        )
        aggregate.activate_department()
        received = []
        bus.subscribe(DepartmentEvent, lambda evt: received.append(evt.event_type))

        published = await publish_all(bus, aggregate, correlation_id="req-2")

        assert received == ["DepartmentCreated", "DepartmentStatusChanged"]
        assert len(published) == 2
        assert not aggregate.has_events()
        stats = bus.get_statistics()
        assert stats["events_processed"] == 2
        assert stats["handler_registrations"]["total"] == 1

    @pytest.mark.asyncio
    async def test_publish_all_keeps_events_when_bus_stopped(self):
        """Test nothing is dropped when the bus refuses the first event."""
        aggregate = DepartmentAggregate()
        aggregate.create_department(
            TenantId("enterprise-acme"), OrganizationId.generate(), "Engineering"
        )
        aggregate.activate_department()

        with pytest.raises(EventBusError):
            await publish_all(InMemoryEventBus(), aggregate)

        assert aggregate.event_count() == 2

    @pytest.mark.asyncio
    async def test_publish_all_keeps_unpublished_tail(self):
        """Test events from the failing one onwards stay on the aggregate."""
        bus = InMemoryEventBus(strict=True)
        await bus.start()
        aggregate = DepartmentAggregate()
        aggregate.create_department(
            TenantId("enterprise-acme"), OrganizationId.generate(), "Engineering"
        )
        aggregate.activate_department()

        def broken(evt):
            raise RuntimeError("handler down")

        bus.subscribe(DepartmentStatusChanged, broken)

        with pytest.raises(EventProcessingError):
            await publish_all(bus, aggregate)

        remaining = aggregate.get_events()
        assert [evt.event_type for evt in remaining] == ["DepartmentStatusChanged"]
        await bus.stop()
