"""Template aggregates."""

from orgnotify.modules.template.domain.aggregates.email_template import EmailTemplate

__all__ = ["EmailTemplate"]
