"""Shared value objects."""

from orgnotify.shared.value_objects.identifiers import (
    BaseIdentifier,
    DepartmentId,
    InvalidIdentifierError,
    NotifId,
    OrganizationId,
    TemplateId,
    TenantId,
    UserId,
    UUIDIdentifier,
)

__all__ = [
    "BaseIdentifier",
    "DepartmentId",
    "InvalidIdentifierError",
    "NotifId",
    "OrganizationId",
    "TemplateId",
    "TenantId",
    "UUIDIdentifier",
    "UserId",
]
