"""
Tests for the department aggregate and its events.
"""

import pytest

from orgnotify.core.events.types import EventFactory
from orgnotify.modules.department.domain import (
    DepartmentAggregate,
    DepartmentCreated,
    DepartmentDeleted,
    DepartmentHierarchyError,
    DepartmentMoved,
    DepartmentNotFoundError,
    DepartmentSettings,
    DepartmentStatus,
    DepartmentStatusChanged,
    DepartmentUpdated,
    InvalidDepartmentDescriptionError,
    InvalidDepartmentStateError,
)
from orgnotify.shared.value_objects import DepartmentId

pytestmark = pytest.mark.unit


@pytest.fixture
def aggregate(tenant_id, organization_id):
    """Aggregate holding a freshly created root department."""
    aggregate = DepartmentAggregate()
    aggregate.create_department(
        tenant_id,
        organization_id,
        "Engineering",
        description="Builds things",
        created_by="admin",
    )
    return aggregate


class TestCreateDepartment:
    """Test department creation."""

    def test_creates_root_department(self, aggregate):
        """Test the created event and the entity state."""
        events = aggregate.get_events()

        assert len(events) == 1
        assert isinstance(events[0], DepartmentCreated)
        assert events[0].level == 1
        assert events[0].parent_department_id is None
        assert aggregate.department.status == DepartmentStatus.PENDING
        assert aggregate.department.id == aggregate.id

    def test_child_level_follows_parent(self, tenant_id, organization_id):
        """Test a child sits one level below its parent."""
        aggregate = DepartmentAggregate()
        department = aggregate.create_department(
            tenant_id,
            organization_id,
            "Backend",
            parent_department_id=DepartmentId.generate(),
            parent_level=2,
        )
        assert department.level == 3

    def test_cannot_create_twice(self, aggregate, tenant_id, organization_id):
        """Test a second create is refused."""
        with pytest.raises(InvalidDepartmentStateError):
            aggregate.create_department(tenant_id, organization_id, "Again")

    def test_commands_need_a_department(self):
        """Test an empty aggregate raises not found."""
        with pytest.raises(DepartmentNotFoundError):
            DepartmentAggregate().activate_department()


class TestDepartmentCommands:
    """Test updates, moves and status commands."""

    def test_update_records_changed_fields(self, aggregate):
        """Test only the changed parts are carried by the event."""
        aggregate.clear_events()
        aggregate.update_department(name="Platform", updated_by="editor")

        event = aggregate.get_events()[0]
        assert isinstance(event, DepartmentUpdated)
        assert event.changed_fields() == ["name"]
        assert event.description is None
        assert aggregate.department.name.value == "Platform"

    def test_update_can_clear_description(self, aggregate):
        """Test an empty description is a real change."""
        aggregate.clear_events()
        aggregate.update_department(description="")

        assert aggregate.get_events()[0].changed_fields() == ["description"]
        assert aggregate.department.description.is_empty()

    def test_invalid_update_changes_nothing(self, aggregate):
        """Test a bad description leaves the name and the event stream alone."""
        aggregate.clear_events()

        with pytest.raises(InvalidDepartmentDescriptionError):
            aggregate.update_department(name="Platform", description="x" * 501)

        assert aggregate.department.name.value == "Engineering"
        assert not aggregate.has_events()

    def test_update_without_changes_records_nothing(self, aggregate):
        """Test an empty update emits no event."""
        aggregate.clear_events()
        aggregate.update_department()
        assert not aggregate.has_events()

    def test_move_department(self, aggregate):
        """Test a move records old and new positions."""
        parent_id = DepartmentId.generate()
        aggregate.clear_events()
        aggregate.move_department(parent_id, new_parent_level=2, moved_by="admin")

        event = aggregate.get_events()[0]
        assert isinstance(event, DepartmentMoved)
        assert event.old_level == 1
        assert event.new_level == 3
        assert event.level_change() == 2
        assert not event.is_moved_to_root()
        assert aggregate.department.parent_department_id == parent_id

    def test_move_to_self_rejected(self, aggregate):
        """Test a department cannot become its own parent."""
        with pytest.raises(DepartmentHierarchyError):
            aggregate.move_department(aggregate.department.id)

    def test_status_commands(self, aggregate):
        """Test status commands emit status events."""
        aggregate.activate_department("admin")
        aggregate.suspend_department("admin", reason="audit")
        aggregate.resume_department("admin")
        aggregate.deactivate_department("admin")

        changes = [
            (event.previous_status, event.new_status)
            for event in aggregate.get_events()
            if isinstance(event, DepartmentStatusChanged)
        ]
        assert changes == [
            ("PENDING", "ACTIVE"),
            ("ACTIVE", "SUSPENDED"),
            ("SUSPENDED", "ACTIVE"),
            ("ACTIVE", "DISABLED"),
        ]

    def test_illegal_status_command(self, aggregate):
        """Test the entity guards status commands."""
        with pytest.raises(InvalidDepartmentStateError):
            aggregate.suspend_department()

    def test_delete_blocks_updates(self, aggregate):
        """Test a deleted department cannot be updated or moved."""
        aggregate.delete_department(reason="merged", deleted_by="admin")

        assert isinstance(aggregate.get_events()[-1], DepartmentDeleted)
        with pytest.raises(InvalidDepartmentStateError):
            aggregate.update_department(name="Zombie")
        with pytest.raises(InvalidDepartmentStateError):
            aggregate.move_department(None)

    def test_version_tracks_events(self, aggregate):
        """Test each event bumps the aggregate version."""
        start = aggregate.version
        aggregate.activate_department()
        aggregate.update_department(settings=DepartmentSettings(max_members=20))
        assert aggregate.version == start + 2


class TestDepartmentReplay:
    """Test rebuilding the aggregate from events."""

    def test_replay_rebuilds_state(self, aggregate):
        """Test replaying the history reproduces the department."""
        parent_id = DepartmentId.generate()
        aggregate.activate_department()
        aggregate.update_department(name="Platform", description="Shared services")
        aggregate.move_department(parent_id, new_parent_level=1)
        aggregate.suspend_department()

        rebuilt = DepartmentAggregate.from_events(aggregate.get_events())
        department = rebuilt.department

        assert rebuilt.id == aggregate.id
        assert department.name.value == "Platform"
        assert department.description.value == "Shared services"
        assert department.parent_department_id == parent_id
        assert department.level == 2
        assert department.status == DepartmentStatus.SUSPENDED
        assert not rebuilt.has_events()

    def test_replay_deleted(self, aggregate):
        """Test a deleted department stays deleted after replay."""
        aggregate.delete_department()
        rebuilt = DepartmentAggregate.from_events(aggregate.get_events())

        assert rebuilt.department.is_deleted()
        assert rebuilt.department.status == DepartmentStatus.DELETED

    def test_stream_must_start_with_creation(self, aggregate):
        """Test a stream without the creation event is rejected."""
        aggregate.activate_department()
        with pytest.raises(InvalidDepartmentStateError):
            DepartmentAggregate.from_events(aggregate.get_events()[1:])

    def test_events_survive_serialization(self, aggregate):
        """Test events rebuilt from dictionaries replay the same way."""
        aggregate.activate_department()
        aggregate.move_department(None)
        restored = [
            EventFactory.reconstruct_event(event.to_dict())
            for event in aggregate.get_events()
        ]

        rebuilt = DepartmentAggregate.from_events(restored)
        assert rebuilt.department.status == DepartmentStatus.ACTIVE
        assert rebuilt.department.is_root_department()
