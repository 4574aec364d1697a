"""Department aggregate."""

from typing import Any

from orgnotify.core.domain.base import AggregateRoot
from orgnotify.core.events.types import DomainEvent
from orgnotify.core.logging import get_logger
from orgnotify.modules.department.domain.entities.department import DepartmentEntity
from orgnotify.modules.department.domain.enums import DepartmentStatus
from orgnotify.modules.department.domain.errors import (
    DepartmentHierarchyError,
    DepartmentNotFoundError,
    InvalidDepartmentStateError,
)
from orgnotify.modules.department.domain.events import (
    DepartmentCreated,
    DepartmentDeleted,
    DepartmentMoved,
    DepartmentStatusChanged,
    DepartmentUpdated,
)
from orgnotify.modules.department.domain.value_objects import (
    DepartmentDescription,
    DepartmentName,
    DepartmentSettings,
)
from orgnotify.shared.value_objects import DepartmentId, OrganizationId, TenantId

logger = get_logger(__name__)


class DepartmentAggregate(AggregateRoot):
    """
    Aggregate root wrapping a ``DepartmentEntity``.

    An empty aggregate is populated by ``create_department`` or by replaying
    its event stream; every other command on an empty aggregate raises
    ``DepartmentNotFoundError``.

    Usage Example:
        aggregate = DepartmentAggregate()
        aggregate.create_department(tenant_id, organization_id, "Engineering")
        aggregate.activate_department(activated_by=str(user_id))
    """

    def __init__(
        self,
        department: DepartmentEntity | None = None,
        department_id: DepartmentId | None = None,
    ):
        self.department = department
        super().__init__(
            department.id if department else department_id or DepartmentId.generate()
        )

    @classmethod
    def from_events(cls, events: list[DomainEvent]) -> "DepartmentAggregate":
        if not events or not isinstance(events[0], DepartmentCreated):
            raise InvalidDepartmentStateError(
                None, message="Event stream must start with DepartmentCreated"
            )

        aggregate = cls(department_id=DepartmentId(events[0].department_id))
        aggregate.replay_events(events)
        return aggregate

    def _require_department(self) -> DepartmentEntity:
        if self.department is None:
            raise DepartmentNotFoundError(str(self.id))
        return self.department

    def _event_fields(self) -> dict[str, Any]:
        department = self._require_department()
        return {
            "department_id": str(department.id),
            "tenant_id": str(department.tenant_id),
            "organization_id": str(department.organization_id),
        }

    def _require_operational(self, action: str) -> DepartmentEntity:
        department = self._require_department()
        if not department.is_operational():
            raise InvalidDepartmentStateError(
                department.status,
                message=f"Cannot {action} a department in status {department.status.value}",
                department_id=str(department.id),
            )
        return department

    # Commands

    def create_department(
        self,
        tenant_id: TenantId,
        organization_id: OrganizationId,
        name: str | DepartmentName,
        description: str | DepartmentDescription = "",
        settings: DepartmentSettings | None = None,
        parent_department_id: DepartmentId | None = None,
        parent_level: int = 1,
        created_by: str = "system",
    ) -> DepartmentEntity:
        """Create the department; root departments sit at level 1."""
        if self.department is not None:
            raise InvalidDepartmentStateError(
                self.department.status,
                message="Department has already been created",
                department_id=str(self.department.id),
            )

        level = parent_level + 1 if parent_department_id is not None else 1
        department = DepartmentEntity(
            department_id=self.id,
            tenant_id=tenant_id,
            organization_id=organization_id,
            name=name if isinstance(name, DepartmentName) else DepartmentName(name),
            description=(
                description
                if isinstance(description, DepartmentDescription)
                else DepartmentDescription(description)
            ),
            settings=settings or DepartmentSettings.create_default(),
            parent_department_id=parent_department_id,
            level=level,
            created_by=created_by,
        )
        self.department = department
        self.add_event(
            DepartmentCreated(
                name=department.name.value,
                settings=department.settings.to_dict(),
                description=department.description.value,
                parent_department_id=(
                    str(parent_department_id) if parent_department_id else None
                ),
                level=level,
                status=department.status.value,
                created_by=created_by,
                **self._event_fields(),
            )
        )

        logger.info(
            "Department created",
            department_id=str(department.id),
            organization_id=str(organization_id),
            parent_department_id=str(parent_department_id) if parent_department_id else None,
            department_level=level,
        )
        return department

    def update_department(
        self,
        name: str | DepartmentName | None = None,
        description: str | DepartmentDescription | None = None,
        settings: DepartmentSettings | None = None,
        updated_by: str = "system",
    ) -> None:
        department = self._require_operational("update")

        if name is not None and not isinstance(name, DepartmentName):
            name = DepartmentName(name)
        if description is not None and not isinstance(description, DepartmentDescription):
            description = DepartmentDescription(description)

        event = DepartmentUpdated(
            name=name.value if name is not None else None,
            description=description.value if description is not None else None,
            settings=settings.to_dict() if settings is not None else None,
            updated_by=updated_by,
            **self._event_fields(),
        )
        if not event.changed_fields():
            return

        if name is not None:
            department.rename(name, updated_by)
        if description is not None:
            department.update_description(description, updated_by)
        if settings is not None:
            department.update_settings(settings, updated_by)
        self.add_event(event)
        logger.info(
            "Department updated",
            department_id=str(department.id),
            changed_fields=event.changed_fields(),
        )

    def move_department(
        self,
        new_parent_department_id: DepartmentId | None,
        new_parent_level: int | None = None,
        moved_by: str = "system",
    ) -> None:
        """
        Re-parent the department; ``None`` moves it to the root.

        Raises:
            DepartmentHierarchyError: The department would become its own parent
        """
        department = self._require_operational("move")
        if new_parent_department_id is not None and new_parent_department_id == department.id:
            raise DepartmentHierarchyError(
                "A department cannot be its own parent", department_id=str(department.id)
            )

        old_parent = department.parent_department_id
        old_level = department.level
        new_level = (new_parent_level or 1) + 1 if new_parent_department_id is not None else 1

        department.move_to(new_parent_department_id, new_level, moved_by)
        self.add_event(
            DepartmentMoved(
                old_parent_department_id=str(old_parent) if old_parent else None,
                new_parent_department_id=(
                    str(new_parent_department_id) if new_parent_department_id else None
                ),
                old_level=old_level,
                new_level=new_level,
                moved_by=moved_by,
                **self._event_fields(),
            )
        )
        logger.info(
            "Department moved",
            department_id=str(department.id),
            old_level=old_level,
            new_level=new_level,
        )

    def _change_status(
        self, target: DepartmentStatus, action: str, changed_by: str, reason: str
    ) -> None:
        department = self._require_department()
        previous = department.status
        getattr(department, action)(changed_by)
        self.add_event(
            DepartmentStatusChanged(
                previous_status=previous.value,
                new_status=target.value,
                reason=reason,
                changed_by=changed_by,
                **self._event_fields(),
            )
        )
        logger.info(
            "Department status changed",
            department_id=str(department.id),
            from_status=previous.value,
            to_status=target.value,
        )

    def activate_department(self, activated_by: str = "system", reason: str = "") -> None:
        self._change_status(DepartmentStatus.ACTIVE, "activate", activated_by, reason)

    def suspend_department(self, suspended_by: str = "system", reason: str = "") -> None:
        self._change_status(DepartmentStatus.SUSPENDED, "suspend", suspended_by, reason)

    def deactivate_department(self, deactivated_by: str = "system", reason: str = "") -> None:
        self._change_status(DepartmentStatus.DISABLED, "deactivate", deactivated_by, reason)

    def resume_department(self, resumed_by: str = "system", reason: str = "") -> None:
        self._change_status(DepartmentStatus.ACTIVE, "resume", resumed_by, reason)

    def delete_department(self, reason: str = "", deleted_by: str = "system") -> None:
        department = self._require_department()
        previous = department.status
        department.delete(deleted_by)
        self.add_event(
            DepartmentDeleted(
                deleted_by=deleted_by,
                reason=reason,
                deleted_at=department.deleted_at,
                **self._event_fields(),
            )
        )
        logger.info(
            "Department deleted",
            department_id=str(department.id),
            from_status=previous.value,
            deleted_by=deleted_by,
        )

    # Event sourcing

    def apply_event(self, event: DomainEvent) -> None:
        handlers = {
            DepartmentCreated: self._apply_created,
            DepartmentUpdated: self._apply_updated,
            DepartmentMoved: lambda e: self._require_department().move_to(
                DepartmentId(e.new_parent_department_id)
                if e.new_parent_department_id
                else None,
                e.new_level,
                e.moved_by,
            ),
            DepartmentStatusChanged: self._apply_status_changed,
            DepartmentDeleted: self._apply_deleted,
        }

        handler = handlers.get(type(event))
        if handler is None:
            logger.warning(
                "Ignoring unknown event during replay",
                aggregate_id=str(self.id),
                event_type=event.event_type,
            )
            return
        handler(event)

    def _apply_created(self, event: DepartmentCreated) -> None:
        self.department = DepartmentEntity(
            department_id=DepartmentId(event.department_id),
            tenant_id=TenantId(event.tenant_id),
            organization_id=OrganizationId(event.organization_id),
            name=DepartmentName(event.name),
            description=DepartmentDescription(event.description),
            settings=DepartmentSettings.from_dict(event.settings),
            parent_department_id=(
                DepartmentId(event.parent_department_id)
                if event.parent_department_id
                else None
            ),
            status=DepartmentStatus(event.status),
            level=event.level,
            created_by=event.created_by,
        )
        self.department.created_at = event.timestamp
        self.department.updated_at = event.timestamp
        self.id = self.department.id

    def _apply_updated(self, event: DepartmentUpdated) -> None:
        department = self._require_department()
        if event.name is not None:
            department.rename(DepartmentName(event.name), event.updated_by)
        if event.description is not None:
            department.update_description(
                DepartmentDescription(event.description), event.updated_by
            )
        if event.settings is not None:
            department.update_settings(
                DepartmentSettings.from_dict(event.settings), event.updated_by
            )

    def _apply_status_changed(self, event: DepartmentStatusChanged) -> None:
        department = self._require_department()
        department.status = DepartmentStatus(event.new_status)
        department.mark_modified(event.changed_by)

    def _apply_deleted(self, event: DepartmentDeleted) -> None:
        department = self._require_department()
        department.delete(event.deleted_by)
        department.deleted_at = event.deleted_at

    def __str__(self) -> str:
        status = self.department.status.value if self.department else "UNINITIALIZED"
        return f"DepartmentAggregate({self.id}, {status})"
