"""
Tests for the department domain service.
"""

import pytest

from orgnotify.core.config import DepartmentLimits
from orgnotify.modules.department.domain import (
    DepartmentDomainService,
    DepartmentHierarchyError,
    DepartmentName,
    DepartmentNotFoundError,
    DepartmentSettings,
)
from orgnotify.shared.value_objects import DepartmentId, OrganizationId

pytestmark = pytest.mark.unit


class TestCanCreateDepartment:
    """Test creation checks."""

    @pytest.mark.asyncio
    async def test_root_with_free_name(self, service, organization_id):
        """Test a new root department is allowed."""
        assert await service.can_create_department(organization_id, DepartmentName("Sales"))

    @pytest.mark.asyncio
    async def test_duplicate_name(self, service, organization_id, make_department):
        """Test names are unique within an organization."""
        make_department("Sales")
        assert not await service.can_create_department(
            organization_id, DepartmentName("Sales")
        )

    @pytest.mark.asyncio
    async def test_name_of_deleted_department_is_free(
        self, service, organization_id, make_department
    ):
        """Test a deleted department releases its name."""
        make_department("Sales").delete()
        assert await service.can_create_department(organization_id, DepartmentName("Sales"))

    @pytest.mark.asyncio
    async def test_same_name_in_other_organization(self, service, make_department):
        """Test uniqueness is per organization."""
        make_department("Sales")
        assert await service.can_create_department(
            OrganizationId.generate(), DepartmentName("Sales")
        )

    @pytest.mark.asyncio
    async def test_missing_parent(self, service, organization_id):
        """Test an unknown parent is refused."""
        assert not await service.can_create_department(
            organization_id, DepartmentName("Child"), DepartmentId.generate()
        )

    @pytest.mark.asyncio
    async def test_deleted_parent(self, service, organization_id, make_department):
        """Test a deleted parent is refused."""
        parent = make_department("Parent")
        parent.delete()
        assert not await service.can_create_department(
            organization_id, DepartmentName("Child"), parent.id
        )

    @pytest.mark.asyncio
    async def test_parent_in_other_organization(
        self, service, organization_id, make_department
    ):
        """Test a parent from another organization is refused."""
        parent = make_department("Parent", organization=OrganizationId.generate())
        assert not await service.can_create_department(
            organization_id, DepartmentName("Child"), parent.id
        )

    @pytest.mark.asyncio
    async def test_parent_disallows_children(
        self, service, organization_id, make_department
    ):
        """Test the parent's sub-department setting is honoured."""
        parent = make_department(
            "Parent", settings=DepartmentSettings(allow_sub_departments=False)
        )
        assert not await service.can_create_department(
            organization_id, DepartmentName("Child"), parent.id
        )

    @pytest.mark.asyncio
    async def test_depth_limit_from_parent_settings(
        self, service, organization_id, make_department
    ):
        """Test the parent's max_depth caps the tree."""
        root = make_department("Root", settings=DepartmentSettings(max_depth=2))
        child = make_department("Child", parent=root, settings=DepartmentSettings(max_depth=2))

        assert await service.can_create_department(
            organization_id, DepartmentName("Second"), root.id
        )
        assert not await service.can_create_department(
            organization_id, DepartmentName("Grandchild"), child.id
        )

    @pytest.mark.asyncio
    async def test_depth_limit_from_organization(
        self, service, organization_id, make_department
    ):
        """Test the organization limit applies when settings allow more."""
        settings = DepartmentSettings(max_depth=10)
        level_1 = make_department("L1", settings=settings)
        level_2 = make_department("L2", parent=level_1, settings=settings)
        level_3 = make_department("L3", parent=level_2, settings=settings)
        level_4 = make_department("L4", parent=level_3, settings=settings)

        assert await service.can_create_department(
            organization_id, DepartmentName("New L4"), level_3.id
        )
        assert not await service.can_create_department(
            organization_id, DepartmentName("L5"), level_4.id
        )


class TestCanUpdateAndDelete:
    """Test update and delete checks."""

    @pytest.mark.asyncio
    async def test_update_to_own_name(self, service, make_department):
        """Test keeping the current name is allowed."""
        department = make_department("Sales")
        assert await service.can_update_department(department.id, DepartmentName("Sales"))

    @pytest.mark.asyncio
    async def test_update_to_taken_name(self, service, make_department):
        """Test renaming onto another department's name is refused."""
        make_department("Sales")
        department = make_department("Marketing")
        assert not await service.can_update_department(department.id, DepartmentName("Sales"))

    @pytest.mark.asyncio
    async def test_update_missing(self, service):
        """Test an unknown department cannot be updated."""
        assert not await service.can_update_department(DepartmentId.generate())

    @pytest.mark.asyncio
    async def test_delete_leaf(self, service, make_department):
        """Test a department without children can be deleted."""
        assert await service.can_delete_department(make_department("Leaf").id)

    @pytest.mark.asyncio
    async def test_delete_with_children(self, service, make_department):
        """Test live sub-departments block deletion."""
        parent = make_department("Parent")
        child = make_department("Child", parent=parent)
        assert not await service.can_delete_department(parent.id)

        child.delete()
        assert await service.can_delete_department(parent.id)

    @pytest.mark.asyncio
    async def test_delete_twice(self, service, make_department):
        """Test a deleted department cannot be deleted again."""
        department = make_department("Gone")
        department.delete()
        assert not await service.can_delete_department(department.id)


class TestCanMoveDepartment:
    """Test move checks."""

    @pytest.mark.asyncio
    async def test_move_under_sibling(self, service, make_department):
        """Test a plain re-parent is allowed."""
        first = make_department("First")
        second = make_department("Second")
        assert await service.can_move_department(second.id, first.id)

    @pytest.mark.asyncio
    async def test_move_to_root(self, service, make_department):
        """Test moving to the root is allowed."""
        parent = make_department("Parent")
        child = make_department("Child", parent=parent)
        assert await service.can_move_department(child.id, None)

    @pytest.mark.asyncio
    async def test_move_under_itself(self, service, make_department):
        """Test a department cannot be its own parent."""
        department = make_department("Solo")
        assert not await service.can_move_department(department.id, department.id)

    @pytest.mark.asyncio
    async def test_move_under_descendant(self, service, make_department):
        """Test moves that would create a cycle are refused."""
        root = make_department("Root")
        child = make_department("Child", parent=root)
        grandchild = make_department("Grandchild", parent=child)

        assert not await service.can_move_department(root.id, grandchild.id)

    @pytest.mark.asyncio
    async def test_move_respects_subtree_depth(self, service, make_department):
        """Test the deepest descendant must stay within the limit."""
        settings = DepartmentSettings(max_depth=10)
        target_root = make_department("Target", settings=settings)
        target = make_department("Target child", parent=target_root, settings=settings)

        moving = make_department("Moving", settings=settings)
        moving_child = make_department("Moving child", parent=moving, settings=settings)
        make_department("Moving grandchild", parent=moving_child, settings=settings)

        assert not await service.can_move_department(moving.id, target.id)
        assert await service.can_move_department(moving.id, target_root.id)

    @pytest.mark.asyncio
    async def test_move_under_deleted_parent(self, service, make_department):
        """Test a deleted parent is refused."""
        parent = make_department("Parent")
        parent.delete()
        assert not await service.can_move_department(make_department("Child").id, parent.id)


class TestDepartmentHierarchy:
    """Test hierarchy calculation."""

    @pytest.mark.asyncio
    async def test_hierarchy_of_middle_node(self, service, make_department):
        """Test path, depth and children of a middle department."""
        root = make_department("Root")
        middle = make_department("Middle", parent=root)
        leaf = make_department("Leaf", parent=middle)
        make_department("Removed", parent=middle).delete()

        hierarchy = await service.calculate_department_hierarchy(middle.id)

        assert hierarchy.path == [root.id, middle.id]
        assert hierarchy.depth == 2
        assert not hierarchy.is_root
        assert not hierarchy.is_leaf
        assert hierarchy.children == [leaf.id]
        assert hierarchy.to_dict()["path"] == [str(root.id), str(middle.id)]

    @pytest.mark.asyncio
    async def test_hierarchy_of_root(self, service, make_department):
        """Test a lone root is both root and leaf."""
        root = make_department("Root")
        hierarchy = await service.calculate_department_hierarchy(root.id)

        assert hierarchy.is_root
        assert hierarchy.is_leaf
        assert hierarchy.depth == 1

    @pytest.mark.asyncio
    async def test_hierarchy_of_missing_department(self, service):
        """Test an unknown department raises."""
        with pytest.raises(DepartmentNotFoundError):
            await service.calculate_department_hierarchy(DepartmentId.generate())

    @pytest.mark.asyncio
    async def test_corrupt_parent_links(self, service, make_department):
        """Test a cycle in stored data is reported."""
        first = make_department("First")
        second = make_department("Second", parent=first)
        first.parent_department_id = second.id

        with pytest.raises(DepartmentHierarchyError):
            await service.calculate_department_hierarchy(second.id)


class TestValidateDepartmentSettings:
    """Test organization-wide settings checks."""

    def test_within_limits(self, service):
        """Test settings inside every organization limit pass."""
        result = service.validate_department_settings(DepartmentSettings(max_depth=4))
        assert result.is_valid
        assert result.errors == []

    def test_default_depth_above_shallow_limit(self, service):
        """Test the default depth of 5 is refused by a 4-level organization."""
        result = service.validate_department_settings(DepartmentSettings())

        assert not result.is_valid
        assert result.errors == ["max_depth exceeds the organization limit of 4"]

    def test_every_violation_reported(self, service):
        """Test all violations are collected."""
        settings = DepartmentSettings(
            max_members=500, enable_project_management=True, max_depth=6
        )
        result = service.validate_department_settings(settings)

        assert not result.is_valid
        assert len(result.errors) == 3

    def test_explicit_limits(self, service):
        """Test limits passed in override the service defaults."""
        settings = DepartmentSettings(max_members=500, enable_project_management=True)
        limits = DepartmentLimits(max_members_per_department=1000)

        assert service.validate_department_settings(settings, limits).is_valid

    def test_limits_default_to_settings(self, repository):
        """Test the service falls back to the configured limits."""
        service = DepartmentDomainService(repository)
        assert service.limits.max_department_depth == 10

