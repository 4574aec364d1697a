"""Department domain layer.

Department names, settings and lifecycle, the aggregate that records every
change as an event, and the service that checks the department tree.
"""

from .aggregates import DepartmentAggregate
from .entities import DepartmentEntity
from .enums import DepartmentStatus
from .errors import (
    DepartmentError,
    DepartmentHierarchyError,
    DepartmentNotFoundError,
    InvalidDepartmentDescriptionError,
    InvalidDepartmentNameError,
    InvalidDepartmentSettingsError,
    InvalidDepartmentStateError,
)
from .events import (
    DepartmentCreated,
    DepartmentDeleted,
    DepartmentMoved,
    DepartmentStatusChanged,
    DepartmentUpdated,
)
from .interfaces import IDepartmentRepository
from .services import DepartmentDomainService, DepartmentHierarchy, ValidationResult
from .value_objects import DepartmentDescription, DepartmentName, DepartmentSettings

__all__ = [
    "DepartmentAggregate",
    "DepartmentCreated",
    "DepartmentDeleted",
    "DepartmentDescription",
    "DepartmentDomainService",
    "DepartmentEntity",
    "DepartmentError",
    "DepartmentHierarchy",
    "DepartmentHierarchyError",
    "DepartmentMoved",
    "DepartmentName",
    "DepartmentNotFoundError",
    "DepartmentSettings",
    "DepartmentStatus",
    "DepartmentStatusChanged",
    "DepartmentUpdated",
    "IDepartmentRepository",
    "InvalidDepartmentDescriptionError",
    "InvalidDepartmentNameError",
    "InvalidDepartmentSettingsError",
    "InvalidDepartmentStateError",
    "ValidationResult",
]
