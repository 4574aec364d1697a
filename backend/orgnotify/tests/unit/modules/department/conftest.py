"""Department test fixtures."""

import pytest

from orgnotify.core.config import DepartmentLimits
from orgnotify.modules.department.domain import (
    DepartmentDomainService,
    DepartmentEntity,
    DepartmentName,
    DepartmentSettings,
    DepartmentStatus,
    IDepartmentRepository,
)
from orgnotify.shared.value_objects import DepartmentId


class InMemoryDepartmentRepository(IDepartmentRepository):
    """Dict-backed repository keyed by department id."""

    def __init__(self):
        self.departments: dict[DepartmentId, DepartmentEntity] = {}

    def add(self, department: DepartmentEntity) -> DepartmentEntity:
        self.departments[department.id] = department
        return department

    async def find_by_id(self, department_id):
        return self.departments.get(department_id)

    async def find_by_name(self, organization_id, name):
        for department in self.departments.values():
            if (
                department.organization_id == organization_id
                and department.name == name
                and not department.is_deleted()
            ):
                return department
        return None

    async def find_children(self, department_id):
        return [
            department
            for department in self.departments.values()
            if department.parent_department_id == department_id
        ]

    async def find_by_organization(self, organization_id, include_deleted=False):
        return [
            department
            for department in self.departments.values()
            if department.organization_id == organization_id
            and (include_deleted or not department.is_deleted())
        ]

    async def save(self, department):
        self.departments[department.id] = department


@pytest.fixture
def repository():
    """Empty in-memory department repository."""
    return InMemoryDepartmentRepository()


@pytest.fixture
def limits():
    """Organization limits with a shallow tree."""
    return DepartmentLimits(
        max_department_depth=4,
        max_members_per_department=200,
        allow_project_management=False,
    )


@pytest.fixture
def service(repository, limits):
    """Domain service reading from the in-memory repository."""
    return DepartmentDomainService(repository, limits)


@pytest.fixture
def make_department(tenant_id, organization_id, repository):
    """Build an active department and store it in the repository."""

    def _make(
        name,
        parent=None,
        status=DepartmentStatus.ACTIVE,
        settings=None,
        organization=None,
    ):
        department = DepartmentEntity(
            department_id=DepartmentId.generate(),
            tenant_id=tenant_id,
            organization_id=organization or organization_id,
            name=DepartmentName(name),
            settings=settings or DepartmentSettings(),
            parent_department_id=parent.id if parent else None,
            status=status,
            level=parent.level + 1 if parent else 1,
        )
        return repository.add(department)

    return _make
