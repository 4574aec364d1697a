"""Department domain errors."""

from typing import Any

from orgnotify.core.errors import (
    BusinessRuleError,
    DomainError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)


class DepartmentError(DomainError):
    """Base error for the department domain."""

    default_code = "DEPARTMENT_ERROR"


class InvalidDepartmentNameError(ValidationError):
    default_code = "INVALID_DEPARTMENT_NAME"

    def __init__(self, reason: str, **kwargs: Any):
        super().__init__(f"Invalid department name: {reason}", field="name", **kwargs)


class InvalidDepartmentDescriptionError(ValidationError):
    default_code = "INVALID_DEPARTMENT_DESCRIPTION"

    def __init__(self, reason: str, **kwargs: Any):
        super().__init__(
            f"Invalid department description: {reason}", field="description", **kwargs
        )


class InvalidDepartmentSettingsError(ValidationError):
    """Raised when department settings break a limit or combine badly."""

    default_code = "INVALID_DEPARTMENT_SETTINGS"

    def __init__(self, reason: str, field: str | None = None, **kwargs: Any):
        super().__init__(f"Invalid department settings: {reason}", field=field, **kwargs)


class InvalidDepartmentStateError(InvalidStateTransitionError):
    """Raised when a department operation is not allowed in its current status."""

    default_code = "INVALID_DEPARTMENT_STATE"

    def __init__(
        self,
        from_status: Any,
        to_status: Any = None,
        message: str | None = None,
        department_id: str | None = None,
        **kwargs: Any,
    ):
        super().__init__("Department", from_status, to_status, message, **kwargs)
        if department_id:
            self.details["department_id"] = department_id


class DepartmentHierarchyError(BusinessRuleError):
    """Raised when a move would create a cycle or exceed the depth limit."""

    default_code = "DEPARTMENT_HIERARCHY_VIOLATION"

    def __init__(self, message: str, department_id: str | None = None, **kwargs: Any):
        super().__init__("department_hierarchy", message, **kwargs)
        if department_id:
            self.details["department_id"] = department_id


class DepartmentNotFoundError(NotFoundError):
    def __init__(self, department_id: Any, **kwargs: Any):
        super().__init__(resource="Department", identifier=department_id, **kwargs)


__all__ = [
    "DepartmentError",
    "DepartmentHierarchyError",
    "DepartmentNotFoundError",
    "InvalidDepartmentDescriptionError",
    "InvalidDepartmentNameError",
    "InvalidDepartmentSettingsError",
    "InvalidDepartmentStateError",
]
