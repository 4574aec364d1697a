"""Template domain errors."""

from typing import Any

from orgnotify.core.errors import (
    DomainError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)


class TemplateError(DomainError):
    """Base error for the template domain."""

    default_code = "TEMPLATE_ERROR"


class InvalidTemplateVariableError(ValidationError):
    """Raised for a bad variable definition or a missing required value."""

    default_code = "INVALID_TEMPLATE_VARIABLE"

    def __init__(self, reason: str, variable_name: str | None = None, **kwargs: Any):
        super().__init__(f"Invalid template variable: {reason}", field="variables", **kwargs)
        if variable_name:
            self.details["variable_name"] = variable_name


class InvalidTemplateContentError(ValidationError):
    default_code = "INVALID_TEMPLATE_CONTENT"

    def __init__(self, reason: str, field: str | None = None, **kwargs: Any):
        super().__init__(f"Invalid template content: {reason}", field=field, **kwargs)


class InvalidEmailTemplateDataError(ValidationError):
    """Raised when an email template entity is built with invalid data."""

    default_code = "INVALID_EMAIL_TEMPLATE"


class InvalidTemplateStatusTransitionError(InvalidStateTransitionError):
    default_code = "INVALID_TEMPLATE_STATUS_TRANSITION"

    def __init__(self, from_status: Any, to_status: Any, **kwargs: Any):
        super().__init__("Template", from_status, to_status, **kwargs)


class InvalidTemplateOperationError(TemplateError):
    """Raised when a template command is not allowed in its current status."""

    default_code = "INVALID_TEMPLATE_OPERATION"

    def __init__(self, message: str, template_id: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if template_id:
            self.details["template_id"] = template_id


class TemplateRenderError(TemplateError):
    """Raised when jinja2 cannot compile or render a template."""

    default_code = "TEMPLATE_RENDER_ERROR"
    status_code = 422


class TemplateNotFoundError(NotFoundError):
    def __init__(self, template_id: Any, **kwargs: Any):
        super().__init__(resource="Template", identifier=template_id, **kwargs)


__all__ = [
    "InvalidEmailTemplateDataError",
    "InvalidTemplateContentError",
    "InvalidTemplateOperationError",
    "InvalidTemplateStatusTransitionError",
    "InvalidTemplateVariableError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRenderError",
]
