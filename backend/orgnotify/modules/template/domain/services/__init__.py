"""Template domain services."""

from orgnotify.modules.template.domain.services.template_service import (
    CompiledTemplateCache,
    TemplateService,
)

__all__ = ["CompiledTemplateCache", "TemplateService"]
