"""
Tests for the value object, entity and aggregate base classes.
"""

import pytest

from orgnotify.core.domain.base import AggregateRoot, Entity, ValueObject
from orgnotify.core.errors import ValidationError
from orgnotify.modules.department.domain import DepartmentStatusChanged
from orgnotify.shared.value_objects import DepartmentId

pytestmark = pytest.mark.unit


class Quota(ValueObject):
    def __init__(self, limit: int, tags: list[str] | None = None):
        super().__init__()
        self.validate_in_range(limit, 0, 100, "limit")
        self.limit = limit
        self.tags = tags or []
        self._freeze()

    def __str__(self) -> str:
        return f"Quota({self.limit})"


class Mailbox(Entity):
    def __init__(self, owner: str, **kwargs):
        self.owner = owner
        super().__init__(**kwargs)


class Board(AggregateRoot):
    def __init__(self, entity_id=None):
        self.applied = []
        super().__init__(entity_id)

    def apply_event(self, event):
        self.applied.append(event.new_status)


def status_event(board, new_status="ACTIVE"):
    return DepartmentStatusChanged(
        previous_status="PENDING",
        new_status=new_status,
        department_id=str(board.id),
        tenant_id="enterprise-acme",
        organization_id=str(DepartmentId.generate()),
    )


class TestValueObject:
    """Test value object semantics."""

    def test_equality_and_hash(self):
        """Test equal attributes mean equal objects, list attributes included."""
        assert Quota(5, ["a"]) == Quota(5, ["a"])
        assert hash(Quota(5, ["a"])) == hash(Quota(5, ["a"]))
        assert Quota(5) != Quota(6)

    def test_frozen(self):
        """Test attributes cannot be changed or deleted."""
        quota = Quota(5)
        with pytest.raises(AttributeError):
            quota.limit = 6
        with pytest.raises(AttributeError):
            del quota.limit

    def test_validation_helpers(self):
        """Test helpers raise validation errors with the field name."""
        with pytest.raises(ValidationError) as exc_info:
            Quota(101)
        assert exc_info.value.details["field"] == "limit"

        with pytest.raises(ValidationError):
            ValueObject.validate_pattern("abc", r"^\d+$", "digits")
        with pytest.raises(ValidationError):
            ValueObject.validate_choices("x", ["a", "b"], "choice")

    def test_to_dict(self):
        """Test public attributes are exported."""
        assert Quota(5, ["a"]).to_dict() == {"limit": 5, "tags": ["a"]}


class TestEntity:
    """Test entity identity and soft delete."""

    def test_identity(self):
        """Test entities compare by id."""
        entity_id = DepartmentId.generate()
        assert Mailbox("a", entity_id=entity_id) == Mailbox("b", entity_id=entity_id)
        assert Mailbox("a") != Mailbox("a")

    def test_soft_delete_and_restore(self):
        """Test delete markers and their reversal."""
        mailbox = Mailbox("a")
        mailbox.soft_delete("admin")

        assert mailbox.is_deleted()
        assert mailbox.deleted_by == "admin"
        with pytest.raises(ValidationError):
            mailbox.soft_delete()

        mailbox.restore("admin")
        assert not mailbox.is_deleted()
        with pytest.raises(ValidationError):
            mailbox.restore()

    def test_mark_modified(self):
        """Test the last actor is tracked."""
        mailbox = Mailbox("a", created_by="creator")
        mailbox.mark_modified("editor")

        assert mailbox.created_by == "creator"
        assert mailbox.updated_by == "editor"
        assert mailbox.updated_at >= mailbox.created_at

    def test_blank_id_rejected(self):
        """Test blank ids are rejected."""
        with pytest.raises(ValidationError):
            Mailbox("a", entity_id="  ")


class TestAggregateRoot:
    """Test event recording and replay."""

    def test_add_event_stamps_metadata(self):
        """Test recorded events carry the aggregate identity and version."""
        board = Board(DepartmentId.generate())
        event = status_event(board)
        board.add_event(event)

        assert board.version == 2
        assert event.metadata.aggregate_version == 2
        assert event.metadata.aggregate_type == "Board"
        assert str(event.metadata.aggregate_id) == str(board.id)

    def test_add_event_requires_domain_event(self):
        """Test arbitrary objects are rejected."""
        with pytest.raises(ValidationError):
            Board().add_event("not an event")

    def test_clear_events(self):
        """Test clearing returns and drops uncommitted events."""
        board = Board()
        board.add_event(status_event(board))

        assert board.has_events()
        assert board.event_count() == 1
        assert len(board.clear_events()) == 1
        assert not board.has_events()

    def test_replay(self):
        """Test replay applies events without recording them."""
        board = Board()
        board.replay_events([status_event(board), status_event(board, "SUSPENDED")])

        assert board.applied == ["ACTIVE", "SUSPENDED"]
        assert board.version == 3
        assert not board.has_events()
        assert board.check_version(3)
