"""Template domain layer.

Email/push/SMS/webhook template content, declared variables, the email
template lifecycle and jinja2-based rendering.
"""

from .aggregates import EmailTemplate
from .entities import EmailTemplateEntity
from .enums import TemplateStatus, TemplateType, TemplateTypeConfig, VariableType
from .errors import (
    InvalidEmailTemplateDataError,
    InvalidTemplateContentError,
    InvalidTemplateOperationError,
    InvalidTemplateStatusTransitionError,
    InvalidTemplateVariableError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRenderError,
)
from .events import (
    TemplateArchived,
    TemplateCreated,
    TemplateDeleted,
    TemplatePublished,
    TemplateUnpublished,
    TemplateUpdated,
)
from .services import CompiledTemplateCache, TemplateService
from .value_objects import TemplateContent, TemplateVariable

__all__ = [
    "CompiledTemplateCache",
    "EmailTemplate",
    "EmailTemplateEntity",
    "InvalidEmailTemplateDataError",
    "InvalidTemplateContentError",
    "InvalidTemplateOperationError",
    "InvalidTemplateStatusTransitionError",
    "InvalidTemplateVariableError",
    "TemplateArchived",
    "TemplateContent",
    "TemplateCreated",
    "TemplateDeleted",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplatePublished",
    "TemplateRenderError",
    "TemplateService",
    "TemplateStatus",
    "TemplateType",
    "TemplateTypeConfig",
    "TemplateUnpublished",
    "TemplateUpdated",
    "TemplateVariable",
    "VariableType",
]
