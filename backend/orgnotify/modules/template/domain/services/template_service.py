"""Template domain service.

Validation rules for templates and jinja2 rendering. Templates are compiled
in a ``SandboxedEnvironment`` (unless sandboxing is switched off in
``TemplateSettings``) and the compiled objects are kept in a small LRU cache
keyed by source text.
"""

from collections import OrderedDict
from typing import Any

import jinja2
from jinja2 import BaseLoader, Environment, Template, meta
from jinja2.sandbox import SandboxedEnvironment

from orgnotify.core.config import TemplateSettings, get_settings
from orgnotify.core.domain.base import DomainService
from orgnotify.core.logging import get_logger
from orgnotify.modules.template.domain.entities.email_template import (
    TEMPLATE_NAME_PATTERN,
    EmailTemplateEntity,
)
from orgnotify.modules.template.domain.enums import TemplateStatus, TemplateType
from orgnotify.modules.template.domain.errors import (
    InvalidTemplateVariableError,
    TemplateRenderError,
)
from orgnotify.modules.template.domain.value_objects import (
    PLACEHOLDER_PATTERN,
    TemplateContent,
    TemplateVariable,
)
from orgnotify.shared.value_objects import TenantId, UserId

logger = get_logger(__name__)

MAX_TEMPLATE_NAME_LENGTH = 100


class CompiledTemplateCache:
    """LRU cache of compiled jinja2 templates."""

    def __init__(self, max_size: int = 500):
        self.max_size = max_size
        self._cache: OrderedDict[tuple[str, str], Template] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: tuple[str, str]) -> Template | None:
        template = self._cache.get(key)
        if template is None:
            self.misses += 1
            return None
        self._cache.move_to_end(key)
        self.hits += 1
        return template

    def set(self, key: tuple[str, str], template: Template) -> None:
        self._cache[key] = template
        self._cache.move_to_end(key)
        while len(self._cache) > self.max_size:
            self._cache.popitem(last=False)

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


class TemplateService(DomainService):
    """
    Validation and rendering for notification templates.

    Usage Example:
        service = TemplateService()
        rendered = service.render_template(template.content, {"user_name": "Li"})
    """

    def __init__(self, settings: TemplateSettings | None = None):
        self.settings = settings or get_settings().template
        self.cache = CompiledTemplateCache(self.settings.cache_size)

        env_class = SandboxedEnvironment if self.settings.sandboxed_rendering else Environment
        self._html_env = env_class(
            autoescape=self.settings.autoescape,
            loader=BaseLoader(),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._text_env = env_class(
            autoescape=False,
            loader=BaseLoader(),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    # Validation

    def can_create_template(
        self,
        user_id: UserId | None,
        tenant_id: TenantId | None,
        template_type: TemplateType | None,
    ) -> bool:
        """A user and tenant are required; types listed in settings are refused."""
        if not user_id or not tenant_id or template_type is None:
            return False
        return template_type.value not in self.settings.restricted_types

    def validate_template_content(
        self, content: TemplateContent | None, template_type: TemplateType
    ) -> bool:
        if content is None:
            return False
        return content.validate_for_type(template_type)

    def validate_template_variables(
        self, variables: list[TemplateVariable], content: TemplateContent
    ) -> bool:
        """Reject duplicate declarations and references to undeclared variables."""
        names = [variable.name for variable in variables]
        if len(names) != len(set(names)):
            return False

        referenced = self.extract_content_variables(content)
        return referenced.issubset(names)

    def validate_template_name(self, name: str | None) -> bool:
        if not name or not name.strip():
            return False
        name = name.strip()
        return len(name) <= MAX_TEMPLATE_NAME_LENGTH and bool(
            TEMPLATE_NAME_PATTERN.match(name)
        )

    def can_publish_template(
        self,
        content: TemplateContent,
        variables: list[TemplateVariable],
        template_type: TemplateType,
    ) -> bool:
        return self.validate_template_content(
            content, template_type
        ) and self.validate_template_variables(variables, content)

    # Variables

    def extract_variables(self, text: str) -> set[str]:
        """Names of the variables ``text`` reads, e.g. ``{{ user_name }}``."""
        if not text:
            return set()
        try:
            ast = self._text_env.parse(text)
        except jinja2.TemplateSyntaxError:
            return set(PLACEHOLDER_PATTERN.findall(text))
        return set(meta.find_undeclared_variables(ast))

    def extract_content_variables(self, content: TemplateContent) -> set[str]:
        names: set[str] = set()
        for text in (
            content.title,
            content.html_content,
            content.text_content,
            content.json_content,
        ):
            names |= self.extract_variables(text)
        return names

    def resolve_variables(
        self, declared: tuple[TemplateVariable, ...], variables: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Merge provided values with declared defaults.

        Raises:
            InvalidTemplateVariableError: A required variable has no value or
                a provided value does not match its declared type
        """
        resolved = dict(variables)
        missing: list[str] = []

        for variable in declared:
            value = variables.get(variable.name)
            if value is None:
                if variable.default_value is not None:
                    resolved[variable.name] = variable.default_value
                elif variable.required:
                    missing.append(variable.name)
                continue
            if not variable.validate_value(value):
                raise InvalidTemplateVariableError(
                    f"value does not match type {variable.variable_type.value}",
                    variable.name,
                )

        if missing:
            raise InvalidTemplateVariableError(
                f"missing required variables: {', '.join(sorted(missing))}",
                missing[0],
            )
        return resolved

    # Rendering

    def render_template(
        self,
        template_or_content: EmailTemplateEntity | TemplateContent | str,
        variables: dict[str, Any] | None = None,
    ) -> TemplateContent | str:
        """
        Render a template, its content or a bare template string.

        A ``TemplateContent`` (or an entity's content) renders every part and
        returns a new ``TemplateContent``; a string renders to a string.
        """
        variables = variables or {}

        if isinstance(template_or_content, str):
            return self._render("text", template_or_content, variables)

        content = (
            template_or_content.content
            if isinstance(template_or_content, EmailTemplateEntity)
            else template_or_content
        )
        context = self.resolve_variables(content.variables, variables)

        rendered = TemplateContent(
            title=self._render("text", content.title, context),
            html_content=self._render("html", content.html_content, context),
            text_content=self._render("text", content.text_content, context),
            json_content=self._render("text", content.json_content, context),
            variables=content.variables,
        )
        logger.debug(
            "Rendered template content",
            variable_count=len(context),
            cache_size=len(self.cache),
        )
        return rendered

    def _render(self, kind: str, source: str, context: dict[str, Any]) -> str:
        if not source:
            return source

        key = (kind, source)
        template = self.cache.get(key)
        try:
            if template is None:
                env = self._html_env if kind == "html" else self._text_env
                template = env.from_string(source)
                self.cache.set(key, template)
            return template.render(**context)
        except jinja2.TemplateError as e:
            logger.warning("Template rendering failed", kind=kind, error=str(e))
            raise TemplateRenderError(f"Failed to render template: {e}") from e

    # Statistics

    def get_template_usage_stats(self, templates: list[EmailTemplateEntity]) -> dict[str, Any]:
        total = len(templates)
        by_status: dict[str, int] = {}
        by_category: dict[str, int] = {}
        total_versions = 0

        for template in templates:
            by_status[template.status.value] = by_status.get(template.status.value, 0) + 1
            by_category[template.category] = by_category.get(template.category, 0) + 1
            total_versions += template.template_version

        return {
            "total": total,
            "by_status": by_status,
            "by_category": by_category,
            "published": by_status.get(TemplateStatus.PUBLISHED.value, 0),
            "drafts": by_status.get(TemplateStatus.DRAFT.value, 0),
            "average_version": total_versions / total if total else 0,
        }

    def __str__(self) -> str:
        return "TemplateService"
