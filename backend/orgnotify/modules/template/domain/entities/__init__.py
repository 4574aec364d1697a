"""Template entities."""

from orgnotify.modules.template.domain.entities.email_template import (
    EmailTemplateEntity,
)

__all__ = ["EmailTemplateEntity"]
