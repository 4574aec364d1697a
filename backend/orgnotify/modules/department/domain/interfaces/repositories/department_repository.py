"""Department Repository Interface.

Domain contract for department data access operations.
"""

from abc import ABC, abstractmethod

from orgnotify.modules.department.domain.entities.department import DepartmentEntity
from orgnotify.modules.department.domain.value_objects import DepartmentName
from orgnotify.shared.value_objects import DepartmentId, OrganizationId


class IDepartmentRepository(ABC):
    """Repository interface for department lookups used by the domain service."""

    @abstractmethod
    async def find_by_id(self, department_id: DepartmentId) -> DepartmentEntity | None:
        """Find a department by id, deleted ones included."""

    @abstractmethod
    async def find_by_name(
        self, organization_id: OrganizationId, name: DepartmentName
    ) -> DepartmentEntity | None:
        """Find a non-deleted department of the organization by name."""

    @abstractmethod
    async def find_children(self, department_id: DepartmentId) -> list[DepartmentEntity]:
        """Find the direct sub-departments, deleted ones included."""

    @abstractmethod
    async def find_by_organization(
        self, organization_id: OrganizationId, include_deleted: bool = False
    ) -> list[DepartmentEntity]:
        """Find every department of an organization."""

    @abstractmethod
    async def save(self, department: DepartmentEntity) -> None:
        """Insert or replace a department."""
