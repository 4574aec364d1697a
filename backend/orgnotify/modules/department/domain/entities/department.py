"""Department entity."""

from datetime import datetime
from typing import Any

from orgnotify.core.domain.base import Entity
from orgnotify.modules.department.domain.enums import DepartmentStatus
from orgnotify.modules.department.domain.errors import (
    DepartmentHierarchyError,
    InvalidDepartmentStateError,
)
from orgnotify.modules.department.domain.value_objects import (
    DepartmentDescription,
    DepartmentName,
    DepartmentSettings,
)
from orgnotify.shared.value_objects import DepartmentId, OrganizationId, TenantId


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class DepartmentEntity(Entity):
    """
    A node in an organization's department tree.

    ``level`` is 1 for root departments and parent level + 1 below them.
    Once deleted, a department refuses every further change; status moves
    follow ``DepartmentStatus.allowed_transitions``.
    """

    def __init__(
        self,
        department_id: DepartmentId,
        tenant_id: TenantId,
        organization_id: OrganizationId,
        name: DepartmentName,
        description: DepartmentDescription | None = None,
        settings: DepartmentSettings | None = None,
        parent_department_id: DepartmentId | None = None,
        status: DepartmentStatus = DepartmentStatus.PENDING,
        level: int = 1,
        created_by: str = "system",
    ):
        self.tenant_id = tenant_id
        self.organization_id = organization_id
        self.parent_department_id = parent_department_id
        self.name = name
        self.description = description or DepartmentDescription("")
        self.settings = settings or DepartmentSettings.create_default()
        self.status = status
        self.level = level

        super().__init__(department_id, created_by)

    def _validate_entity(self) -> None:
        super()._validate_entity()

        if not isinstance(self.status, DepartmentStatus):
            raise InvalidDepartmentStateError(
                self.status, message=f"Unknown department status: {self.status!r}"
            )
        if not isinstance(self.level, int) or self.level < 1:
            raise DepartmentHierarchyError("Department level must be at least 1")
        if self.parent_department_id is not None and self.parent_department_id == self.id:
            raise DepartmentHierarchyError(
                "A department cannot be its own parent", department_id=str(self.id)
            )

    # Queries

    def is_active(self) -> bool:
        return self.status == DepartmentStatus.ACTIVE and not self.is_deleted()

    def is_suspended(self) -> bool:
        return self.status == DepartmentStatus.SUSPENDED

    def is_disabled(self) -> bool:
        return self.status == DepartmentStatus.DISABLED

    def is_operational(self) -> bool:
        return self.status.is_operational() and not self.is_deleted()

    def is_root_department(self) -> bool:
        return self.parent_department_id is None

    def can_be_deleted(self) -> bool:
        return self.status.can_be_deleted() and not self.is_deleted()

    # Lifecycle

    def _ensure_not_deleted(self, action: str) -> None:
        if self.is_deleted() or self.status == DepartmentStatus.DELETED:
            raise InvalidDepartmentStateError(
                self.status,
                message=f"Cannot {action} a deleted department",
                department_id=str(self.id),
            )

    def _transition(self, target: DepartmentStatus, action: str, updated_by: str) -> None:
        self._ensure_not_deleted(action)
        if not self.status.can_transition_to(target):
            raise InvalidDepartmentStateError(
                self.status,
                target,
                message=f"Cannot {action} a department in status {self.status.value}",
                department_id=str(self.id),
            )
        self.status = target
        self.mark_modified(updated_by)

    def activate(self, activated_by: str = "system") -> None:
        self._transition(DepartmentStatus.ACTIVE, "activate", activated_by)

    def deactivate(self, deactivated_by: str = "system") -> None:
        self._transition(DepartmentStatus.DISABLED, "deactivate", deactivated_by)

    def suspend(self, suspended_by: str = "system") -> None:
        self._transition(DepartmentStatus.SUSPENDED, "suspend", suspended_by)

    def resume(self, resumed_by: str = "system") -> None:
        """Only a suspended department can be resumed."""
        self._ensure_not_deleted("resume")
        if self.status != DepartmentStatus.SUSPENDED:
            raise InvalidDepartmentStateError(
                self.status,
                DepartmentStatus.ACTIVE,
                message="Only a suspended department can be resumed",
                department_id=str(self.id),
            )
        self._transition(DepartmentStatus.ACTIVE, "resume", resumed_by)

    def delete(self, deleted_by: str = "system") -> None:
        self._transition(DepartmentStatus.DELETED, "delete", deleted_by)
        self.soft_delete(deleted_by)

    # Updates

    def rename(self, name: DepartmentName, updated_by: str = "system") -> None:
        self._ensure_not_deleted("rename")
        self.name = name
        self.mark_modified(updated_by)

    def update_description(
        self, description: DepartmentDescription, updated_by: str = "system"
    ) -> None:
        self._ensure_not_deleted("update")
        self.description = description
        self.mark_modified(updated_by)

    def update_settings(self, settings: DepartmentSettings, updated_by: str = "system") -> None:
        self._ensure_not_deleted("update")
        self.settings = settings
        self.mark_modified(updated_by)

    def move_to(
        self,
        new_parent_department_id: DepartmentId | None,
        new_level: int,
        moved_by: str = "system",
    ) -> None:
        self._ensure_not_deleted("move")
        if new_parent_department_id is not None and new_parent_department_id == self.id:
            raise DepartmentHierarchyError(
                "A department cannot be its own parent", department_id=str(self.id)
            )
        if new_level < 1:
            raise DepartmentHierarchyError(
                "Department level must be at least 1", department_id=str(self.id)
            )
        self.parent_department_id = new_parent_department_id
        self.level = new_level
        self.mark_modified(moved_by)

    # Snapshots

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "organization_id": str(self.organization_id),
            "parent_department_id": (
                str(self.parent_department_id) if self.parent_department_id else None
            ),
            "name": self.name.value,
            "description": self.description.value,
            "settings": self.settings.to_dict(),
            "status": self.status.value,
            "level": self.level,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
            "deleted_by": self.deleted_by,
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, Any]) -> "DepartmentEntity":
        parent_id = snapshot.get("parent_department_id")
        department = cls(
            department_id=DepartmentId(snapshot["id"]),
            tenant_id=TenantId(snapshot["tenant_id"]),
            organization_id=OrganizationId(snapshot["organization_id"]),
            name=DepartmentName(snapshot["name"]),
            description=DepartmentDescription(snapshot.get("description", "")),
            settings=DepartmentSettings.from_dict(snapshot["settings"]),
            parent_department_id=DepartmentId(parent_id) if parent_id else None,
            status=DepartmentStatus(snapshot["status"]),
            level=snapshot.get("level", 1),
            created_by=snapshot.get("created_by", "system"),
        )
        department.updated_by = snapshot.get("updated_by") or department.created_by
        department.created_at = _parse_datetime(snapshot.get("created_at")) or department.created_at
        department.updated_at = _parse_datetime(snapshot.get("updated_at")) or department.updated_at
        department.deleted_at = _parse_datetime(snapshot.get("deleted_at"))
        department.deleted_by = snapshot.get("deleted_by")
        return department

    def __str__(self) -> str:
        return f"Department({self.name}, level={self.level}, {self.status.value})"
