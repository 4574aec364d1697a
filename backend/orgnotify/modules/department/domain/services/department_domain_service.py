"""Department domain service.

Rules that need more than one department: name uniqueness within an
organization, parent checks, cycle and depth limits for the tree, and the
organization-wide ceilings on department settings.
"""

from dataclasses import dataclass, field
from typing import Any

from orgnotify.core.config import DepartmentLimits, get_settings
from orgnotify.core.domain.base import DomainService
from orgnotify.core.logging import get_logger
from orgnotify.modules.department.domain.entities.department import DepartmentEntity
from orgnotify.modules.department.domain.errors import (
    DepartmentHierarchyError,
    DepartmentNotFoundError,
)
from orgnotify.modules.department.domain.interfaces import IDepartmentRepository
from orgnotify.modules.department.domain.value_objects import (
    DepartmentName,
    DepartmentSettings,
)
from orgnotify.shared.value_objects import DepartmentId, OrganizationId

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class DepartmentHierarchy:
    """Position of a department in its tree; ``path`` runs from the root."""

    department_id: DepartmentId
    parent_department_id: DepartmentId | None
    path: list[DepartmentId]
    depth: int
    is_root: bool
    is_leaf: bool
    children: list[DepartmentId] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "department_id": str(self.department_id),
            "parent_department_id": (
                str(self.parent_department_id) if self.parent_department_id else None
            ),
            "path": [str(department_id) for department_id in self.path],
            "depth": self.depth,
            "is_root": self.is_root,
            "is_leaf": self.is_leaf,
            "children": [str(child) for child in self.children],
        }


class DepartmentDomainService(DomainService):
    """
    Department checks that read the rest of the tree through the repository.

    The ``can_*`` methods answer with a boolean and log the reason for a
    refusal at DEBUG; they never raise for a rule violation.

    Usage Example:
        service = DepartmentDomainService(repository)
        if await service.can_create_department(org_id, DepartmentName("QA"), parent_id):
            aggregate.create_department(...)
    """

    def __init__(
        self, repository: IDepartmentRepository, limits: DepartmentLimits | None = None
    ):
        self.repository = repository
        self.limits = limits or get_settings().department

    def _refuse(self, check: str, reason: str, **fields: Any) -> bool:
        logger.debug("Department check refused", check=check, reason=reason, **fields)
        return False

    def _max_depth(self, parent: DepartmentEntity | None) -> int:
        if parent is None:
            return self.limits.max_department_depth
        return min(parent.settings.max_depth, self.limits.max_department_depth)

    async def _active_children(self, department_id: DepartmentId) -> list[DepartmentEntity]:
        children = await self.repository.find_children(department_id)
        return [child for child in children if not child.is_deleted()]

    async def _subtree_height(self, department: DepartmentEntity) -> int:
        """Levels below ``department``; 0 for a leaf."""
        height = 0
        pending = [(department, 0)]
        seen = {department.id}
        while pending:
            current, distance = pending.pop()
            height = max(height, distance)
            for child in await self._active_children(current.id):
                if child.id in seen:
                    raise DepartmentHierarchyError(
                        "Department tree contains a cycle", department_id=str(child.id)
                    )
                seen.add(child.id)
                pending.append((child, distance + 1))
        return height

    async def _ancestors(self, department: DepartmentEntity) -> list[DepartmentEntity]:
        """Ancestors from the direct parent up to the root."""
        ancestors: list[DepartmentEntity] = []
        seen = {department.id}
        parent_id = department.parent_department_id
        while parent_id is not None:
            if parent_id in seen:
                raise DepartmentHierarchyError(
                    "Department tree contains a cycle", department_id=str(parent_id)
                )
            seen.add(parent_id)
            parent = await self.repository.find_by_id(parent_id)
            if parent is None:
                raise DepartmentNotFoundError(str(parent_id))
            ancestors.append(parent)
            parent_id = parent.parent_department_id
        return ancestors

    # Checks

    async def can_create_department(
        self,
        organization_id: OrganizationId,
        name: DepartmentName,
        parent_department_id: DepartmentId | None = None,
    ) -> bool:
        existing = await self.repository.find_by_name(organization_id, name)
        if existing is not None and not existing.is_deleted():
            return self._refuse("create", "name already used", name=name.value)

        if parent_department_id is None:
            return True

        parent = await self.repository.find_by_id(parent_department_id)
        if parent is None or not parent.is_operational():
            return self._refuse(
                "create", "parent missing or deleted", parent_id=str(parent_department_id)
            )
        if parent.organization_id != organization_id:
            return self._refuse("create", "parent belongs to another organization")
        if not parent.settings.can_create_sub_departments():
            return self._refuse("create", "parent does not allow sub-departments")
        max_depth = self._max_depth(parent)
        if parent.level + 1 > max_depth:
            return self._refuse(
                "create",
                "depth limit reached",
                department_level=parent.level + 1,
                max_depth=max_depth,
            )
        return True

    async def can_update_department(
        self, department_id: DepartmentId, new_name: DepartmentName | None = None
    ) -> bool:
        department = await self.repository.find_by_id(department_id)
        if department is None or not department.is_operational():
            return self._refuse("update", "department missing or deleted")

        if new_name is not None:
            existing = await self.repository.find_by_name(department.organization_id, new_name)
            if existing is not None and existing.id != department.id and not existing.is_deleted():
                return self._refuse("update", "name already used", name=new_name.value)
        return True

    async def can_move_department(
        self,
        department_id: DepartmentId,
        new_parent_department_id: DepartmentId | None,
    ) -> bool:
        """``None`` as the new parent moves the department to the root."""
        department = await self.repository.find_by_id(department_id)
        if department is None or not department.is_operational():
            return self._refuse("move", "department missing or deleted")

        parent: DepartmentEntity | None = None
        if new_parent_department_id is not None:
            if new_parent_department_id == department_id:
                return self._refuse("move", "department cannot be its own parent")

            parent = await self.repository.find_by_id(new_parent_department_id)
            if parent is None or not parent.is_operational():
                return self._refuse("move", "new parent missing or deleted")
            if parent.organization_id != department.organization_id:
                return self._refuse("move", "new parent belongs to another organization")
            if not parent.settings.can_create_sub_departments():
                return self._refuse("move", "new parent does not allow sub-departments")

            ancestor_ids = {ancestor.id for ancestor in await self._ancestors(parent)}
            if department_id in ancestor_ids:
                return self._refuse(
                    "move", "move would create a cycle", department_id=str(department_id)
                )

        new_level = parent.level + 1 if parent else 1
        deepest = new_level + await self._subtree_height(department)
        max_depth = self._max_depth(parent)
        if deepest > max_depth:
            return self._refuse("move", "depth limit reached", deepest=deepest, max_depth=max_depth)
        return True

    async def can_delete_department(self, department_id: DepartmentId) -> bool:
        department = await self.repository.find_by_id(department_id)
        if department is None or not department.can_be_deleted():
            return self._refuse("delete", "department missing or already deleted")
        if await self._active_children(department_id):
            return self._refuse("delete", "department still has sub-departments")
        return True

    # Hierarchy

    async def calculate_department_hierarchy(
        self, department_id: DepartmentId
    ) -> DepartmentHierarchy:
        """
        Describe where ``department_id`` sits in its tree.

        Raises:
            DepartmentNotFoundError: The department or one of its ancestors is missing
            DepartmentHierarchyError: The parent links form a cycle
        """
        department = await self.repository.find_by_id(department_id)
        if department is None:
            raise DepartmentNotFoundError(str(department_id))

        ancestors = await self._ancestors(department)
        children = await self._active_children(department_id)
        path = [ancestor.id for ancestor in reversed(ancestors)] + [department.id]

        return DepartmentHierarchy(
            department_id=department.id,
            parent_department_id=department.parent_department_id,
            path=path,
            depth=len(path),
            is_root=department.parent_department_id is None,
            is_leaf=not children,
            children=[child.id for child in children],
        )

    # Settings

    def validate_department_settings(
        self,
        settings: DepartmentSettings,
        organization_limits: DepartmentLimits | None = None,
    ) -> ValidationResult:
        limits = organization_limits or self.limits
        errors: list[str] = []

        if settings.max_members > limits.max_members_per_department:
            errors.append(
                f"max_members exceeds the organization limit of {limits.max_members_per_department}"
            )
        if (
            settings.is_feature_enabled("project_management")
            and not limits.allow_project_management
        ):
            errors.append("project management is not allowed by the organization")
        if settings.max_depth > limits.max_department_depth:
            errors.append(
                f"max_depth exceeds the organization limit of {limits.max_department_depth}"
            )

        return ValidationResult(is_valid=not errors, errors=errors)

    def __str__(self) -> str:
        return "DepartmentDomainService"
