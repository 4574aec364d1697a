"""Department domain enums."""

from enum import Enum


class DepartmentStatus(Enum):
    """Department lifecycle status."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    DISABLED = "DISABLED"
    DELETED = "DELETED"

    def allowed_transitions(self) -> list["DepartmentStatus"]:
        valid_transitions: dict[DepartmentStatus, list[DepartmentStatus]] = {
            DepartmentStatus.PENDING: [
                DepartmentStatus.ACTIVE,
                DepartmentStatus.DISABLED,
                DepartmentStatus.DELETED,
            ],
            DepartmentStatus.ACTIVE: [
                DepartmentStatus.SUSPENDED,
                DepartmentStatus.DISABLED,
                DepartmentStatus.DELETED,
            ],
            DepartmentStatus.SUSPENDED: [
                DepartmentStatus.ACTIVE,
                DepartmentStatus.DISABLED,
                DepartmentStatus.DELETED,
            ],
            DepartmentStatus.DISABLED: [DepartmentStatus.ACTIVE, DepartmentStatus.DELETED],
            DepartmentStatus.DELETED: [],
        }
        return valid_transitions[self]

    def can_transition_to(self, new_status: "DepartmentStatus") -> bool:
        """Check if transition to new status is valid."""
        return new_status in self.allowed_transitions()

    def is_operational(self) -> bool:
        return self != DepartmentStatus.DELETED

    def can_be_activated(self) -> bool:
        return self in [
            DepartmentStatus.PENDING,
            DepartmentStatus.SUSPENDED,
            DepartmentStatus.DISABLED,
        ]

    def can_be_suspended(self) -> bool:
        return self == DepartmentStatus.ACTIVE

    def can_be_deactivated(self) -> bool:
        return self in [
            DepartmentStatus.PENDING,
            DepartmentStatus.ACTIVE,
            DepartmentStatus.SUSPENDED,
        ]

    def can_be_deleted(self) -> bool:
        return self != DepartmentStatus.DELETED

    def is_final(self) -> bool:
        return self == DepartmentStatus.DELETED

    @classmethod
    def operational_statuses(cls) -> list["DepartmentStatus"]:
        return [status for status in cls if status.is_operational()]


__all__ = ["DepartmentStatus"]
