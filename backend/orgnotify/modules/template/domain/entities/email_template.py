"""Email template entity."""

import re
from datetime import datetime
from typing import Any

from orgnotify.core.domain.base import Entity, utc_now
from orgnotify.modules.template.domain.enums import TemplateStatus, TemplateType
from orgnotify.modules.template.domain.errors import (
    InvalidEmailTemplateDataError,
    InvalidTemplateOperationError,
    InvalidTemplateStatusTransitionError,
)
from orgnotify.modules.template.domain.value_objects import TemplateContent
from orgnotify.shared.value_objects import TemplateId, TenantId

TEMPLATE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


class EmailTemplateEntity(Entity):
    """
    A tenant's email template.

    Only drafts can be edited; each content change bumps ``template_version``.
    Status moves follow ``TemplateStatus.allowed_transitions``.
    """

    def __init__(
        self,
        template_id: TemplateId,
        tenant_id: TenantId,
        name: str,
        display_name: str,
        content: TemplateContent,
        status: TemplateStatus = TemplateStatus.DRAFT,
        template_version: int = 1,
        category: str = "default",
        description: str = "",
        created_by: str = "system",
    ):
        self.tenant_id = tenant_id
        self.name = (name or "").strip()
        self.display_name = (display_name or "").strip()
        self.content = content
        self.status = status
        self.template_version = template_version
        self.category = category or "default"
        self.description = description or ""
        self.published_at: datetime | None = None
        self.archived_at: datetime | None = None

        super().__init__(template_id, created_by)

    def _validate_entity(self) -> None:
        super()._validate_entity()

        if not self.tenant_id:
            raise InvalidEmailTemplateDataError("tenant_id is required", field="tenant_id")
        if not self.name:
            raise InvalidEmailTemplateDataError("name cannot be empty", field="name")
        if len(self.name) > 100:
            raise InvalidEmailTemplateDataError(
                "name cannot exceed 100 characters", field="name"
            )
        if not TEMPLATE_NAME_PATTERN.match(self.name):
            raise InvalidEmailTemplateDataError(
                "name may only contain letters, digits, '_' and '-'", field="name"
            )
        if not self.display_name:
            raise InvalidEmailTemplateDataError(
                "display_name cannot be empty", field="display_name"
            )
        if len(self.display_name) > 200:
            raise InvalidEmailTemplateDataError(
                "display_name cannot exceed 200 characters", field="display_name"
            )
        if not isinstance(self.content, TemplateContent):
            raise InvalidEmailTemplateDataError("content is required", field="content")
        if not self.content.validate_for_type(TemplateType.EMAIL):
            raise InvalidEmailTemplateDataError(
                "content does not meet the email template requirements", field="content"
            )
        if self.template_version < 1:
            raise InvalidEmailTemplateDataError(
                "template_version must be at least 1", field="template_version"
            )
        if len(self.category) > 50:
            raise InvalidEmailTemplateDataError(
                "category cannot exceed 50 characters", field="category"
            )
        if len(self.description) > 500:
            raise InvalidEmailTemplateDataError(
                "description cannot exceed 500 characters", field="description"
            )

    # Queries

    def is_draft(self) -> bool:
        return self.status == TemplateStatus.DRAFT

    def is_published(self) -> bool:
        return self.status == TemplateStatus.PUBLISHED

    def is_archived(self) -> bool:
        return self.status == TemplateStatus.ARCHIVED

    def is_editable(self) -> bool:
        return self.status.is_editable()

    def is_deletable(self) -> bool:
        return self.status.is_deletable()

    def is_active(self) -> bool:
        return self.status.is_active()

    # Transitions

    def _transition(self, target: TemplateStatus, updated_by: str | None = None) -> None:
        if not self.status.can_transition_to(target):
            raise InvalidTemplateStatusTransitionError(self.status, target)
        self.status = target
        self.mark_modified(updated_by)

    def publish(self, published_at: datetime | None = None, updated_by: str | None = None) -> None:
        self._transition(TemplateStatus.PUBLISHED, updated_by)
        self.published_at = published_at or utc_now()

    def unpublish(self, updated_by: str | None = None) -> None:
        self._transition(TemplateStatus.DRAFT, updated_by)

    def archive(self, archived_at: datetime | None = None, updated_by: str | None = None) -> None:
        self._transition(TemplateStatus.ARCHIVED, updated_by)
        self.archived_at = archived_at or utc_now()

    def delete(self, deleted_by: str = "system") -> None:
        """Move to DELETED and stamp the soft delete markers."""
        self._transition(TemplateStatus.DELETED, deleted_by)
        self.soft_delete(deleted_by)

    def update_content(self, content: TemplateContent, updated_by: str | None = None) -> None:
        if not self.is_editable():
            raise InvalidTemplateOperationError(
                f"Only a draft template can be edited (status={self.status.value})",
                template_id=str(self.id),
            )
        if not content.validate_for_type(TemplateType.EMAIL):
            raise InvalidEmailTemplateDataError(
                "content does not meet the email template requirements", field="content"
            )
        self.content = content
        self.template_version += 1
        self.mark_modified(updated_by)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "name": self.name,
            "display_name": self.display_name,
            "content": self.content.to_dict(),
            "status": self.status.value,
            "template_version": self.template_version,
            "category": self.category,
            "description": self.description,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "archived_at": self.archived_at.isoformat() if self.archived_at else None,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
