"""Template value objects."""

import json
import re
from datetime import date, datetime
from typing import Any

from orgnotify.core.domain.base import ValueObject
from orgnotify.modules.template.domain.enums import TemplateType, VariableType
from orgnotify.modules.template.domain.errors import (
    InvalidTemplateContentError,
    InvalidTemplateVariableError,
)

VARIABLE_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")
PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([a-zA-Z][a-zA-Z0-9_]*)\s*(?:\|[^}]*)?\}\}")

MAX_VARIABLE_NAME_LENGTH = 50
MAX_VARIABLE_DESCRIPTION_LENGTH = 200
MAX_TITLE_LENGTH = 200
MAX_BODY_LENGTH = 10000


class TemplateVariable(ValueObject):
    """Declared template variable with type, default and required flag."""

    def __init__(
        self,
        name: str,
        variable_type: VariableType | str,
        description: str,
        default_value: Any | None = None,
        required: bool = False,
    ):
        super().__init__()

        if not name or not name.strip():
            raise InvalidTemplateVariableError("name cannot be empty")
        name = name.strip()
        if len(name) > MAX_VARIABLE_NAME_LENGTH:
            raise InvalidTemplateVariableError(
                f"name cannot exceed {MAX_VARIABLE_NAME_LENGTH} characters", name
            )
        if not VARIABLE_NAME_PATTERN.match(name):
            raise InvalidTemplateVariableError(
                "name must start with a letter and contain only letters, digits and _",
                name,
            )

        try:
            variable_type = (
                variable_type
                if isinstance(variable_type, VariableType)
                else VariableType(variable_type)
            )
        except ValueError as e:
            raise InvalidTemplateVariableError(
                f"unknown variable type {variable_type!r}", name
            ) from e

        if not description or not description.strip():
            raise InvalidTemplateVariableError("description cannot be empty", name)
        if len(description.strip()) > MAX_VARIABLE_DESCRIPTION_LENGTH:
            raise InvalidTemplateVariableError(
                f"description cannot exceed {MAX_VARIABLE_DESCRIPTION_LENGTH} characters",
                name,
            )
        if default_value is not None and not variable_type.validate_value(default_value):
            raise InvalidTemplateVariableError(
                f"default value does not match type {variable_type.value}", name
            )

        self.name = name
        self.variable_type = variable_type
        self.description = description.strip()
        self.default_value = default_value
        self.required = required
        self._freeze()

    def validate_value(self, value: Any) -> bool:
        if value is None:
            return not self.required
        return self.variable_type.validate_value(value)

    def formatted_value(self, value: Any = None) -> str:
        """Render ``value`` (or the default) as template text."""
        if value is None:
            value = self.default_value
        if value is None:
            return ""

        if self.variable_type == VariableType.BOOLEAN:
            return "true" if value else "false"
        if self.variable_type == VariableType.DATE:
            if isinstance(value, date | datetime):
                return value.isoformat()
            return str(value)
        if self.variable_type in (VariableType.OBJECT, VariableType.ARRAY):
            return json.dumps(value, ensure_ascii=False, default=str)
        return str(value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "variable_type": self.variable_type.value,
            "description": self.description,
            "default_value": self.default_value,
            "required": self.required,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TemplateVariable":
        return cls(
            name=data["name"],
            variable_type=data["variable_type"],
            description=data["description"],
            default_value=data.get("default_value"),
            required=data.get("required", False),
        )

    def __str__(self) -> str:
        return f"{{{{{self.name}}}}}"


class TemplateContent(ValueObject):
    """
    Title and bodies of a template together with its declared variables.

    Bodies are stored trimmed; an absent body is an empty string. At least
    one of the HTML, text and JSON bodies must be present.
    """

    def __init__(
        self,
        title: str = "",
        html_content: str = "",
        text_content: str = "",
        json_content: str | None = None,
        variables: list[TemplateVariable] | tuple[TemplateVariable, ...] | None = None,
    ):
        super().__init__()

        title = (title or "").strip()
        html_content = (html_content or "").strip()
        text_content = (text_content or "").strip()
        json_content = (json_content or "").strip()

        if len(title) > MAX_TITLE_LENGTH:
            raise InvalidTemplateContentError(
                f"title cannot exceed {MAX_TITLE_LENGTH} characters", field="title"
            )
        for field_name, body in (
            ("html_content", html_content),
            ("text_content", text_content),
            ("json_content", json_content),
        ):
            if len(body) > MAX_BODY_LENGTH:
                raise InvalidTemplateContentError(
                    f"{field_name} cannot exceed {MAX_BODY_LENGTH} characters",
                    field=field_name,
                )
        if json_content:
            try:
                json.loads(json_content)
            except json.JSONDecodeError as e:
                raise InvalidTemplateContentError(
                    f"json_content is not valid JSON: {e.msg}", field="json_content"
                ) from e
        if not (html_content or text_content or json_content):
            raise InvalidTemplateContentError("at least one body is required")

        self.title = title
        self.html_content = html_content
        self.text_content = text_content
        self.json_content = json_content
        self.variables = tuple(variables or ())
        self._freeze()

    @classmethod
    def create_for_type(
        cls,
        template_type: TemplateType,
        title: str,
        content: str,
        variables: list[TemplateVariable] | None = None,
    ) -> "TemplateContent":
        """Place a single body where ``template_type`` expects it."""
        if template_type == TemplateType.EMAIL:
            return cls(title, content, content, None, variables)
        if template_type == TemplateType.PUSH:
            return cls(title, "", content, None, variables)
        if template_type == TemplateType.SMS:
            return cls("", "", content, None, variables)
        if template_type == TemplateType.WEBHOOK:
            return cls(title, "", content, content, variables)
        raise InvalidTemplateContentError(f"unsupported template type {template_type}")

    def content_for_type(self, template_type: TemplateType) -> str:
        if template_type == TemplateType.EMAIL:
            return self.html_content or self.text_content
        if template_type == TemplateType.WEBHOOK:
            return self.json_content or self.text_content
        return self.text_content

    def has_required_field(self, field_name: str) -> bool:
        if field_name == "title":
            return bool(self.title)
        if field_name == "html_content":
            return bool(self.html_content)
        if field_name == "text_content":
            return bool(self.text_content)
        if field_name == "content":
            return bool(self.text_content or self.html_content)
        return False

    def validate_for_type(self, template_type: TemplateType) -> bool:
        """Check title and body lengths and the required fields of ``template_type``."""
        if self.title and len(self.title) > template_type.max_title_length():
            return False
        if len(self.content_for_type(template_type)) > template_type.max_content_length():
            return False
        return all(self.has_required_field(f) for f in template_type.required_fields())

    def extract_variables(self) -> set[str]:
        """Names referenced as ``{{ name }}`` in any part of the content."""
        text = " ".join(
            (self.title, self.html_content, self.text_content, self.json_content)
        )
        return set(PLACEHOLDER_PATTERN.findall(text))

    def variable_names(self) -> list[str]:
        return [variable.name for variable in self.variables]

    def get_variable(self, name: str) -> TemplateVariable | None:
        return next((v for v in self.variables if v.name == name), None)

    def content_length(self) -> int:
        return (
            len(self.title)
            + len(self.html_content)
            + len(self.text_content)
            + len(self.json_content)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "html_content": self.html_content,
            "text_content": self.text_content,
            "json_content": self.json_content,
            "variables": [variable.to_dict() for variable in self.variables],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TemplateContent":
        return cls(
            title=data.get("title", ""),
            html_content=data.get("html_content", ""),
            text_content=data.get("text_content", ""),
            json_content=data.get("json_content"),
            variables=[TemplateVariable.from_dict(v) for v in data.get("variables", [])],
        )

    def __str__(self) -> str:
        return self.title or self.text_content[:50]


__all__ = [
    "PLACEHOLDER_PATTERN",
    "TemplateContent",
    "TemplateVariable",
]
