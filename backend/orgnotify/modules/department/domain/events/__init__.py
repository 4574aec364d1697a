"""Department domain events."""

from datetime import UTC, datetime
from typing import Any

from orgnotify.core.events.types import DomainEvent, EventFactory, EventValidator
from orgnotify.modules.department.domain.enums import DepartmentStatus

STATUS_VALUES = [status.value for status in DepartmentStatus]


class DepartmentEvent(DomainEvent):
    """Fields shared by every department event."""

    def __init__(
        self, department_id: str, tenant_id: str, organization_id: str, **kwargs: Any
    ):
        self.department_id = department_id
        self.tenant_id = tenant_id
        self.organization_id = organization_id
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        self.department_id = EventValidator.validate_string(
            self.department_id, "department_id"
        )
        self.tenant_id = EventValidator.validate_string(self.tenant_id, "tenant_id")
        self.organization_id = EventValidator.validate_string(
            self.organization_id, "organization_id"
        )


class DepartmentCreated(DepartmentEvent):
    def __init__(
        self,
        name: str,
        settings: dict[str, Any],
        description: str = "",
        parent_department_id: str | None = None,
        level: int = 1,
        status: str = DepartmentStatus.PENDING.value,
        created_by: str = "system",
        **kwargs: Any,
    ):
        self.name = name
        self.settings = settings
        self.description = description
        self.parent_department_id = parent_department_id
        self.level = level
        self.status = status
        self.created_by = created_by
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.name = EventValidator.validate_string(self.name, "name", max_length=100)
        self.settings = EventValidator.validate_dict(self.settings, "settings")
        self.description = EventValidator.validate_string(
            self.description, "description", required=False, max_length=500
        ) or ""
        self.parent_department_id = EventValidator.validate_string(
            self.parent_department_id, "parent_department_id", required=False
        )
        self.level = EventValidator.validate_integer(self.level, "level", min_value=1)
        self.status = EventValidator.validate_string(
            self.status, "status", allowed_values=STATUS_VALUES
        )
        self.created_by = EventValidator.validate_string(self.created_by, "created_by")


class DepartmentUpdated(DepartmentEvent):
    """Carries only the parts that changed; unchanged parts are ``None``."""

    def __init__(
        self,
        name: str | None = None,
        description: str | None = None,
        settings: dict[str, Any] | None = None,
        updated_by: str = "system",
        **kwargs: Any,
    ):
        self.name = name
        self.description = description
        self.settings = settings
        self.updated_by = updated_by
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.name = EventValidator.validate_string(
            self.name, "name", required=False, max_length=100
        )
        # An empty description is a legitimate update.
        if self.description is not None:
            self.description = str(self.description).strip()
            EventValidator.validate_string(
                self.description, "description", required=False, max_length=500
            )
        self.settings = EventValidator.validate_dict(
            self.settings, "settings", required=False
        )
        self.updated_by = EventValidator.validate_string(self.updated_by, "updated_by")

    def changed_fields(self) -> list[str]:
        return [
            name
            for name in ("name", "description", "settings")
            if getattr(self, name) is not None
        ]


class DepartmentMoved(DepartmentEvent):
    def __init__(
        self,
        old_parent_department_id: str | None,
        new_parent_department_id: str | None,
        old_level: int,
        new_level: int,
        moved_by: str = "system",
        moved_at: datetime | str | None = None,
        **kwargs: Any,
    ):
        self.old_parent_department_id = old_parent_department_id
        self.new_parent_department_id = new_parent_department_id
        self.old_level = old_level
        self.new_level = new_level
        self.moved_by = moved_by
        self.moved_at = moved_at or datetime.now(UTC)
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.old_parent_department_id = EventValidator.validate_string(
            self.old_parent_department_id, "old_parent_department_id", required=False
        )
        self.new_parent_department_id = EventValidator.validate_string(
            self.new_parent_department_id, "new_parent_department_id", required=False
        )
        self.old_level = EventValidator.validate_integer(
            self.old_level, "old_level", min_value=1
        )
        self.new_level = EventValidator.validate_integer(
            self.new_level, "new_level", min_value=1
        )
        self.moved_by = EventValidator.validate_string(self.moved_by, "moved_by")
        self.moved_at = EventValidator.validate_datetime(self.moved_at, "moved_at")

    def is_moved_to_root(self) -> bool:
        return self.new_parent_department_id is None

    def level_change(self) -> int:
        return self.new_level - self.old_level


class DepartmentStatusChanged(DepartmentEvent):
    def __init__(
        self,
        previous_status: str,
        new_status: str,
        reason: str = "",
        changed_by: str = "system",
        **kwargs: Any,
    ):
        self.previous_status = previous_status
        self.new_status = new_status
        self.reason = reason
        self.changed_by = changed_by
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.previous_status = EventValidator.validate_string(
            self.previous_status, "previous_status", allowed_values=STATUS_VALUES
        )
        self.new_status = EventValidator.validate_string(
            self.new_status, "new_status", allowed_values=STATUS_VALUES
        )
        self.reason = EventValidator.validate_string(
            self.reason, "reason", required=False, max_length=500
        ) or ""
        self.changed_by = EventValidator.validate_string(self.changed_by, "changed_by")


class DepartmentDeleted(DepartmentEvent):
    def __init__(
        self,
        deleted_by: str = "system",
        reason: str = "",
        deleted_at: datetime | str | None = None,
        **kwargs: Any,
    ):
        self.deleted_by = deleted_by
        self.reason = reason
        self.deleted_at = deleted_at or datetime.now(UTC)
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.deleted_by = EventValidator.validate_string(self.deleted_by, "deleted_by")
        self.reason = EventValidator.validate_string(
            self.reason, "reason", required=False, max_length=500
        ) or ""
        self.deleted_at = EventValidator.validate_datetime(self.deleted_at, "deleted_at")


DEPARTMENT_EVENTS = (
    DepartmentCreated,
    DepartmentUpdated,
    DepartmentMoved,
    DepartmentStatusChanged,
    DepartmentDeleted,
)

for _event_class in DEPARTMENT_EVENTS:
    EventFactory.register_event_type(_event_class)


__all__ = [
    "DEPARTMENT_EVENTS",
    "DepartmentCreated",
    "DepartmentDeleted",
    "DepartmentEvent",
    "DepartmentMoved",
    "DepartmentStatusChanged",
    "DepartmentUpdated",
]
