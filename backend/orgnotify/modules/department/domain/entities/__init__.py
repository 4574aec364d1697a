"""Department entities."""

from orgnotify.modules.department.domain.entities.department import DepartmentEntity

__all__ = ["DepartmentEntity"]
