"""Template domain enums."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


class TemplateStatus(Enum):
    """Lifecycle of a notification template."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"
    DELETED = "DELETED"

    def allowed_transitions(self) -> list["TemplateStatus"]:
        valid_transitions: dict[TemplateStatus, list[TemplateStatus]] = {
            TemplateStatus.DRAFT: [TemplateStatus.PUBLISHED, TemplateStatus.DELETED],
            TemplateStatus.PUBLISHED: [TemplateStatus.DRAFT, TemplateStatus.ARCHIVED],
            TemplateStatus.ARCHIVED: [TemplateStatus.DELETED],
            TemplateStatus.DELETED: [],
        }
        return valid_transitions[self]

    def can_transition_to(self, new_status: "TemplateStatus") -> bool:
        """Check if transition to new status is valid."""
        return new_status in self.allowed_transitions()

    def is_editable(self) -> bool:
        return self == TemplateStatus.DRAFT

    def is_deletable(self) -> bool:
        return self in [TemplateStatus.DRAFT, TemplateStatus.ARCHIVED]

    def is_active(self) -> bool:
        return self == TemplateStatus.PUBLISHED

    def is_final(self) -> bool:
        return self == TemplateStatus.DELETED


@dataclass(frozen=True)
class TemplateTypeConfig:
    """Limits and capabilities of one template type."""

    display_name: str
    max_title_length: int
    max_content_length: int
    supports_html: bool
    required_fields: tuple[str, ...]
    features: tuple[str, ...] = field(default_factory=tuple)


class TemplateType(Enum):
    """Channels a template can be written for."""

    EMAIL = "EMAIL"
    PUSH = "PUSH"
    SMS = "SMS"
    WEBHOOK = "WEBHOOK"

    @property
    def config(self) -> TemplateTypeConfig:
        return TEMPLATE_TYPE_CONFIGS[self]

    def supports_html(self) -> bool:
        return self.config.supports_html

    def max_title_length(self) -> int:
        return self.config.max_title_length

    def max_content_length(self) -> int:
        return self.config.max_content_length

    def required_fields(self) -> tuple[str, ...]:
        return self.config.required_fields


TEMPLATE_TYPE_CONFIGS: dict[TemplateType, TemplateTypeConfig] = {
    TemplateType.EMAIL: TemplateTypeConfig(
        display_name="Email",
        max_title_length=200,
        max_content_length=10000,
        supports_html=True,
        required_fields=("title", "html_content", "text_content"),
        features=("html", "text", "variables", "attachments"),
    ),
    TemplateType.PUSH: TemplateTypeConfig(
        display_name="Push",
        max_title_length=50,
        max_content_length=200,
        supports_html=False,
        required_fields=("title", "content"),
        features=("text", "variables", "actions", "badge"),
    ),
    # SMS templates have no title.
    TemplateType.SMS: TemplateTypeConfig(
        display_name="SMS",
        max_title_length=0,
        max_content_length=160,
        supports_html=False,
        required_fields=("content",),
        features=("text", "variables"),
    ),
    TemplateType.WEBHOOK: TemplateTypeConfig(
        display_name="Webhook",
        max_title_length=100,
        max_content_length=5000,
        supports_html=False,
        required_fields=("content",),
        features=("json", "variables", "headers"),
    ),
}


class VariableType(Enum):
    """Template variable types for validation and formatting."""

    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    OBJECT = "OBJECT"
    ARRAY = "ARRAY"

    def validate_value(self, value: Any) -> bool:
        """Basic validation for variable values."""
        if self == VariableType.STRING:
            return isinstance(value, str)
        if self == VariableType.NUMBER:
            return isinstance(value, int | float) and not isinstance(value, bool)
        if self == VariableType.BOOLEAN:
            return isinstance(value, bool)
        if self == VariableType.DATE:
            if isinstance(value, date | datetime):
                return True
            if isinstance(value, str):
                try:
                    datetime.fromisoformat(value.replace("Z", "+00:00"))
                except ValueError:
                    return False
                return True
            return False
        if self == VariableType.OBJECT:
            return isinstance(value, dict)
        if self == VariableType.ARRAY:
            return isinstance(value, list | tuple)
        return False


__all__: list[str] = [
    "TEMPLATE_TYPE_CONFIGS",
    "TemplateStatus",
    "TemplateType",
    "TemplateTypeConfig",
    "VariableType",
]
