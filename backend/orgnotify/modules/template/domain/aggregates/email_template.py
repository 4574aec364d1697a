"""EmailTemplate aggregate."""

from typing import Any

from orgnotify.core.domain.base import AggregateRoot
from orgnotify.core.events.types import DomainEvent
from orgnotify.core.logging import get_logger
from orgnotify.modules.template.domain.entities.email_template import (
    EmailTemplateEntity,
)
from orgnotify.modules.template.domain.enums import TemplateStatus
from orgnotify.modules.template.domain.errors import InvalidTemplateOperationError
from orgnotify.modules.template.domain.events import (
    TemplateArchived,
    TemplateCreated,
    TemplateDeleted,
    TemplatePublished,
    TemplateUnpublished,
    TemplateUpdated,
)
from orgnotify.modules.template.domain.value_objects import TemplateContent
from orgnotify.shared.value_objects import TemplateId, TenantId

logger = get_logger(__name__)


class EmailTemplate(AggregateRoot):
    """Aggregate root wrapping an ``EmailTemplateEntity``."""

    def __init__(
        self,
        template: EmailTemplateEntity | None = None,
        template_id: TemplateId | None = None,
    ):
        self.template = template
        super().__init__(template.id if template else template_id or TemplateId.generate())

    @classmethod
    def create(
        cls,
        tenant_id: TenantId,
        name: str,
        display_name: str,
        content: TemplateContent,
        category: str = "default",
        description: str = "",
        created_by: str = "system",
        template_id: TemplateId | None = None,
    ) -> "EmailTemplate":
        template = EmailTemplateEntity(
            template_id=template_id or TemplateId.generate(),
            tenant_id=tenant_id,
            name=name,
            display_name=display_name,
            content=content,
            category=category,
            description=description,
            created_by=created_by,
        )
        aggregate = cls(template)
        aggregate.add_event(
            TemplateCreated(
                name=template.name,
                display_name=template.display_name,
                content=content.to_dict(),
                category=template.category,
                description=template.description,
                created_by=created_by,
                **aggregate._event_fields(),
            )
        )

        logger.info(
            "Email template created",
            template_id=str(template.id),
            tenant_id=str(tenant_id),
            name=template.name,
        )
        return aggregate

    @classmethod
    def from_events(cls, events: list[DomainEvent]) -> "EmailTemplate":
        if not events or not isinstance(events[0], TemplateCreated):
            raise InvalidTemplateOperationError("Event stream must start with TemplateCreated")

        aggregate = cls(template_id=TemplateId(events[0].template_id))
        aggregate.replay_events(events)
        return aggregate

    def _require_template(self) -> EmailTemplateEntity:
        if self.template is None:
            raise InvalidTemplateOperationError(
                "Template has not been created", template_id=str(self.id)
            )
        return self.template

    def _event_fields(self) -> dict[str, Any]:
        template = self._require_template()
        return {"template_id": str(template.id), "tenant_id": str(template.tenant_id)}

    def _require_transition(self, target: TemplateStatus, action: str) -> EmailTemplateEntity:
        template = self._require_template()
        if not template.status.can_transition_to(target):
            raise InvalidTemplateOperationError(
                f"Cannot {action} a template in status {template.status.value}",
                template_id=str(template.id),
            )
        return template

    def _log_transition(self, message: str, from_status: TemplateStatus, **fields: Any) -> None:
        template = self._require_template()
        logger.info(
            message,
            template_id=str(template.id),
            from_status=from_status.value,
            to_status=template.status.value,
            **fields,
        )

    # Commands

    def update_content(self, content: TemplateContent, updated_by: str = "system") -> None:
        template = self._require_template()
        if not template.is_editable():
            raise InvalidTemplateOperationError(
                f"Only a draft template can be edited (status={template.status.value})",
                template_id=str(template.id),
            )

        template.update_content(content, updated_by)
        self.add_event(
            TemplateUpdated(
                content=content.to_dict(),
                template_version=template.template_version,
                updated_by=updated_by,
                **self._event_fields(),
            )
        )
        logger.info(
            "Email template updated",
            template_id=str(template.id),
            template_version=template.template_version,
        )

    def publish(self, updated_by: str = "system") -> None:
        template = self._require_transition(TemplateStatus.PUBLISHED, "publish")
        previous = template.status
        template.publish(updated_by=updated_by)
        self.add_event(
            TemplatePublished(
                template_version=template.template_version,
                published_at=template.published_at,
                **self._event_fields(),
            )
        )
        self._log_transition(
            "Email template published", previous, template_version=template.template_version
        )

    def unpublish(self, updated_by: str = "system") -> None:
        template = self._require_transition(TemplateStatus.DRAFT, "unpublish")
        previous = template.status
        template.unpublish(updated_by)
        self.add_event(TemplateUnpublished(**self._event_fields()))
        self._log_transition("Email template unpublished", previous)

    def archive(self, updated_by: str = "system") -> None:
        template = self._require_transition(TemplateStatus.ARCHIVED, "archive")
        previous = template.status
        template.archive(updated_by=updated_by)
        self.add_event(
            TemplateArchived(archived_at=template.archived_at, **self._event_fields())
        )
        self._log_transition("Email template archived", previous)

    def delete(self, deleted_by: str = "system", reason: str | None = None) -> None:
        template = self._require_transition(TemplateStatus.DELETED, "delete")
        previous = template.status
        template.delete(deleted_by)
        self.add_event(
            TemplateDeleted(deleted_by=deleted_by, reason=reason, **self._event_fields())
        )
        self._log_transition("Email template deleted", previous, deleted_by=deleted_by)

    # Event sourcing

    def apply_event(self, event: DomainEvent) -> None:
        handlers = {
            TemplateCreated: self._apply_created,
            TemplateUpdated: lambda e: self._require_template().update_content(
                TemplateContent.from_dict(e.content), e.updated_by
            ),
            TemplatePublished: lambda e: self._require_template().publish(e.published_at),
            TemplateUnpublished: lambda e: self._require_template().unpublish(),
            TemplateArchived: lambda e: self._require_template().archive(e.archived_at),
            TemplateDeleted: lambda e: self._require_template().delete(e.deleted_by),
        }

        handler = handlers.get(type(event))
        if handler is None:
            logger.warning(
                "Ignoring unknown event during replay",
                aggregate_id=str(self.id),
                event_type=event.event_type,
            )
            return
        handler(event)

    def _apply_created(self, event: TemplateCreated) -> None:
        self.template = EmailTemplateEntity(
            template_id=TemplateId(event.template_id),
            tenant_id=TenantId(event.tenant_id),
            name=event.name,
            display_name=event.display_name,
            content=TemplateContent.from_dict(event.content),
            category=event.category,
            description=event.description,
            created_by=event.created_by,
        )
        self.template.created_at = event.timestamp
        self.template.updated_at = event.timestamp
        self.id = self.template.id

    def __str__(self) -> str:
        status = self.template.status.value if self.template else "UNINITIALIZED"
        return f"EmailTemplate({self.id}, {status})"
