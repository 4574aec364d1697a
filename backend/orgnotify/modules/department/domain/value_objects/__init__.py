"""Department value objects."""

import re
from typing import Any

from orgnotify.core.domain.base import ValueObject
from orgnotify.modules.department.domain.errors import (
    InvalidDepartmentDescriptionError,
    InvalidDepartmentNameError,
    InvalidDepartmentSettingsError,
)

INVALID_NAME_CHARS = re.compile(r"[<>\"'&]")

MAX_NAME_LENGTH = 100
SHORT_NAME_LENGTH = 20
MAX_DESCRIPTION_LENGTH = 500
SUMMARY_LENGTH = 100

MAX_MEMBERS_LIMIT = 1000
MAX_DEPTH_LIMIT = 10


class DepartmentName(ValueObject):
    """Display name of a department, unique within its organization."""

    def __init__(self, value: str):
        super().__init__()

        if value is None or not isinstance(value, str) or not value.strip():
            raise InvalidDepartmentNameError("name cannot be empty")
        value = value.strip()
        if len(value) > MAX_NAME_LENGTH:
            raise InvalidDepartmentNameError(
                f"name cannot exceed {MAX_NAME_LENGTH} characters"
            )
        if INVALID_NAME_CHARS.search(value):
            raise InvalidDepartmentNameError("name contains forbidden characters")

        self.value = value
        self._freeze()

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        try:
            cls(value)
        except InvalidDepartmentNameError:
            return False
        return True

    def short_name(self) -> str:
        if len(self.value) <= SHORT_NAME_LENGTH:
            return self.value
        return self.value[:SHORT_NAME_LENGTH] + "..."

    def matches(self, other: "DepartmentName") -> bool:
        """Case-insensitive comparison used for uniqueness checks."""
        return self.value.casefold() == other.value.casefold()

    def __str__(self) -> str:
        return self.value


class DepartmentDescription(ValueObject):
    def __init__(self, value: str | None = ""):
        super().__init__()

        if value is not None and not isinstance(value, str):
            raise InvalidDepartmentDescriptionError("description must be a string")
        value = (value or "").strip()
        if len(value) > MAX_DESCRIPTION_LENGTH:
            raise InvalidDepartmentDescriptionError(
                f"description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
            )

        self.value = value
        self._freeze()

    def is_empty(self) -> bool:
        return not self.value

    def summary(self) -> str:
        if len(self.value) <= SUMMARY_LENGTH:
            return self.value
        return self.value[:SUMMARY_LENGTH] + "..."

    def __str__(self) -> str:
        return self.value


class DepartmentSettings(ValueObject):
    """
    Membership rules, enabled features and locale of a department.

    ``allow_self_join`` and ``require_approval`` are mutually exclusive:
    a department either lets members join freely or reviews every request.
    """

    FEATURES = {
        "announcements": "enable_announcements",
        "calendar": "enable_calendar",
        "file_sharing": "enable_file_sharing",
        "project_management": "enable_project_management",
    }

    def __init__(
        self,
        allow_self_join: bool = False,
        require_approval: bool = True,
        max_members: int = 50,
        allow_sub_departments: bool = True,
        enable_announcements: bool = True,
        enable_calendar: bool = True,
        enable_file_sharing: bool = True,
        enable_project_management: bool = False,
        default_language: str = "zh-CN",
        timezone: str = "Asia/Shanghai",
        max_depth: int = 5,
    ):
        super().__init__()

        if not isinstance(max_members, int) or not 1 <= max_members <= MAX_MEMBERS_LIMIT:
            raise InvalidDepartmentSettingsError(
                f"max_members must be between 1 and {MAX_MEMBERS_LIMIT}",
                field="max_members",
            )
        if not isinstance(max_depth, int) or not 1 <= max_depth <= MAX_DEPTH_LIMIT:
            raise InvalidDepartmentSettingsError(
                f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}", field="max_depth"
            )
        if not default_language or not str(default_language).strip():
            raise InvalidDepartmentSettingsError(
                "default_language is required", field="default_language"
            )
        if not timezone or not str(timezone).strip():
            raise InvalidDepartmentSettingsError("timezone is required", field="timezone")
        if allow_self_join and require_approval:
            raise InvalidDepartmentSettingsError(
                "allow_self_join and require_approval cannot both be enabled"
            )

        self.allow_self_join = bool(allow_self_join)
        self.require_approval = bool(require_approval)
        self.max_members = max_members
        self.allow_sub_departments = bool(allow_sub_departments)
        self.enable_announcements = bool(enable_announcements)
        self.enable_calendar = bool(enable_calendar)
        self.enable_file_sharing = bool(enable_file_sharing)
        self.enable_project_management = bool(enable_project_management)
        self.default_language = str(default_language).strip()
        self.timezone = str(timezone).strip()
        self.max_depth = max_depth
        self._freeze()

    @classmethod
    def create_default(cls) -> "DepartmentSettings":
        return cls()

    @classmethod
    def is_valid(cls, **settings: Any) -> bool:
        try:
            cls(**settings)
        except InvalidDepartmentSettingsError:
            return False
        return True

    def can_join_without_approval(self) -> bool:
        return self.allow_self_join and not self.require_approval

    def can_create_sub_departments(self) -> bool:
        return self.allow_sub_departments

    def is_feature_enabled(self, feature: str) -> bool:
        """Unknown feature names are reported as disabled."""
        attribute = self.FEATURES.get(feature)
        return bool(attribute and getattr(self, attribute))

    def enabled_features(self) -> list[str]:
        return [name for name in self.FEATURES if self.is_feature_enabled(name)]

    def with_changes(self, **changes: Any) -> "DepartmentSettings":
        """
        Return a copy with ``changes`` applied.

        Raises:
            InvalidDepartmentSettingsError: Unknown setting or invalid result
        """
        data = self.to_dict()
        unknown = set(changes) - set(data)
        if unknown:
            raise InvalidDepartmentSettingsError(
                f"unknown settings: {', '.join(sorted(unknown))}"
            )
        data.update(changes)
        return DepartmentSettings(**data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "allow_self_join": self.allow_self_join,
            "require_approval": self.require_approval,
            "max_members": self.max_members,
            "allow_sub_departments": self.allow_sub_departments,
            "enable_announcements": self.enable_announcements,
            "enable_calendar": self.enable_calendar,
            "enable_file_sharing": self.enable_file_sharing,
            "enable_project_management": self.enable_project_management,
            "default_language": self.default_language,
            "timezone": self.timezone,
            "max_depth": self.max_depth,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DepartmentSettings":
        return cls(**data)

    def __str__(self) -> str:
        return (
            f"DepartmentSettings(max_members={self.max_members}, "
            f"max_depth={self.max_depth}, language={self.default_language})"
        )


__all__ = [
    "DepartmentDescription",
    "DepartmentName",
    "DepartmentSettings",
]
