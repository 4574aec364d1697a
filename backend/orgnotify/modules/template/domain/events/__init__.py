"""Template domain events."""

from datetime import UTC, datetime
from typing import Any

from orgnotify.core.events.types import DomainEvent, EventFactory, EventValidator


class TemplateEvent(DomainEvent):
    """Fields shared by every template event."""

    def __init__(self, template_id: str, tenant_id: str, **kwargs: Any):
        self.template_id = template_id
        self.tenant_id = tenant_id
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        self.template_id = EventValidator.validate_string(self.template_id, "template_id")
        self.tenant_id = EventValidator.validate_string(self.tenant_id, "tenant_id")


class TemplateCreated(TemplateEvent):
    def __init__(
        self,
        name: str,
        display_name: str,
        content: dict[str, Any],
        category: str = "default",
        description: str = "",
        created_by: str = "system",
        **kwargs: Any,
    ):
        self.name = name
        self.display_name = display_name
        self.content = content
        self.category = category
        self.description = description
        self.created_by = created_by
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.name = EventValidator.validate_string(self.name, "name", max_length=100)
        self.display_name = EventValidator.validate_string(
            self.display_name, "display_name", max_length=200
        )
        self.content = EventValidator.validate_dict(self.content, "content")
        self.category = EventValidator.validate_string(
            self.category, "category", required=False, max_length=50
        ) or "default"
        self.description = EventValidator.validate_string(
            self.description, "description", required=False, max_length=500
        ) or ""
        self.created_by = EventValidator.validate_string(self.created_by, "created_by")


class TemplateUpdated(TemplateEvent):
    """Emitted when a draft's content changes; carries the new version."""

    def __init__(
        self,
        content: dict[str, Any],
        template_version: int,
        updated_by: str = "system",
        **kwargs: Any,
    ):
        self.content = content
        self.template_version = template_version
        self.updated_by = updated_by
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.content = EventValidator.validate_dict(self.content, "content")
        self.template_version = EventValidator.validate_integer(
            self.template_version, "template_version", min_value=1
        )
        self.updated_by = EventValidator.validate_string(self.updated_by, "updated_by")


class TemplatePublished(TemplateEvent):
    def __init__(
        self,
        template_version: int,
        published_at: datetime | str | None = None,
        **kwargs: Any,
    ):
        self.template_version = template_version
        self.published_at = published_at or datetime.now(UTC)
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.template_version = EventValidator.validate_integer(
            self.template_version, "template_version", min_value=1
        )
        self.published_at = EventValidator.validate_datetime(
            self.published_at, "published_at"
        )


class TemplateUnpublished(TemplateEvent):
    """Emitted when a published template returns to draft."""


class TemplateArchived(TemplateEvent):
    def __init__(self, archived_at: datetime | str | None = None, **kwargs: Any):
        self.archived_at = archived_at or datetime.now(UTC)
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.archived_at = EventValidator.validate_datetime(self.archived_at, "archived_at")


class TemplateDeleted(TemplateEvent):
    def __init__(self, deleted_by: str = "system", reason: str | None = None, **kwargs: Any):
        self.deleted_by = deleted_by
        self.reason = reason
        super().__init__(**kwargs)

    def validate_payload(self) -> None:
        super().validate_payload()
        self.deleted_by = EventValidator.validate_string(self.deleted_by, "deleted_by")
        self.reason = EventValidator.validate_string(
            self.reason, "reason", required=False, max_length=500
        )


TEMPLATE_EVENTS = (
    TemplateCreated,
    TemplateUpdated,
    TemplatePublished,
    TemplateUnpublished,
    TemplateArchived,
    TemplateDeleted,
)

for _event_class in TEMPLATE_EVENTS:
    EventFactory.register_event_type(_event_class)


__all__ = [
    "TEMPLATE_EVENTS",
    "TemplateArchived",
    "TemplateCreated",
    "TemplateDeleted",
    "TemplateEvent",
    "TemplatePublished",
    "TemplateUnpublished",
    "TemplateUpdated",
]
