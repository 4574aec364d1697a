"""Department domain services."""

from orgnotify.modules.department.domain.services.department_domain_service import (
    DepartmentDomainService,
    DepartmentHierarchy,
    ValidationResult,
)

__all__ = ["DepartmentDomainService", "DepartmentHierarchy", "ValidationResult"]
