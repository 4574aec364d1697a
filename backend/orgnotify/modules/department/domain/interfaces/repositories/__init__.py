"""Department repository interfaces."""

from orgnotify.modules.department.domain.interfaces.repositories.department_repository import (
    IDepartmentRepository,
)

__all__ = ["IDepartmentRepository"]
