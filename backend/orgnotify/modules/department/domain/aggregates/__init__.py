"""Department aggregates."""

from orgnotify.modules.department.domain.aggregates.department import DepartmentAggregate

__all__ = ["DepartmentAggregate"]
