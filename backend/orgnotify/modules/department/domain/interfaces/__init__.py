"""Department domain interfaces."""

from orgnotify.modules.department.domain.interfaces.repositories import (
    IDepartmentRepository,
)

__all__ = ["IDepartmentRepository"]
