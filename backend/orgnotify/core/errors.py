"""Error hierarchy shared by every orgnotify module.

Domain packages subclass these layers with narrowly-scoped errors (one or two
per value object or aggregate). Each error carries a stable code, an HTTP-ish
status for the (external) application layer, a severity and a retry hint, and
logs itself once on construction.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from enum import Enum
from typing import Any

SENSITIVE_DETAIL_KEYS = {"password", "token", "secret", "key", "credential", "authorization"}


class ErrorSeverity(Enum):
    """Error severity levels for monitoring and alerting."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class OrgNotifyError(Exception):
    """
    Base exception for all orgnotify errors.

    Carries error IDs, severity levels, correlation tracking and retry hints
    so the layer above can translate it without inspecting the message.
    """

    default_code: str = "ERROR"
    status_code: int = 500
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retryable: bool = False

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.code = kwargs.get("code") or self.default_code
        self.details = kwargs.get("details") or {}
        self.correlation_id = kwargs.get("correlation_id") or str(uuid.uuid4())
        self.error_id = str(uuid.uuid4())
        self.timestamp = time.time()
        self.user_message = kwargs.get("user_message") or message
        self.recovery_hint = kwargs.get("recovery_hint")
        self.context = kwargs.get("context") or {}
        self.__cause__ = kwargs.get("cause")

        self._log_error()

    def _log_error(self) -> None:
        """Log error with structured data."""
        logger = logging.getLogger(f"orgnotify.errors.{self.__class__.__name__}")
        log_data = {
            "error_id": self.error_id,
            "correlation_id": self.correlation_id,
            "code": self.code,
            "error_message": self.message,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "status_code": self.status_code,
            "details": self._sanitize_details(self.details),
            "context": self._sanitize_details(self.context),
            "error_class": self.__class__.__name__,
        }

        if self.severity == ErrorSeverity.CRITICAL:
            logger.critical("Critical error occurred", extra=log_data)
        elif self.severity == ErrorSeverity.HIGH:
            logger.error("High severity error", extra=log_data)
        elif self.severity == ErrorSeverity.MEDIUM:
            logger.warning("Medium severity error", extra=log_data)
        else:
            logger.info("Low severity error", extra=log_data)

    def _sanitize_details(self, details: dict) -> dict:
        """Mask values whose key looks like a credential."""
        if not details:
            return {}

        sanitized = {}
        for key, value in details.items():
            if any(sensitive in key.lower() for sensitive in SENSITIVE_DETAIL_KEYS):
                sanitized[key] = "***REDACTED***"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_details(value)
            else:
                sanitized[key] = value
        return sanitized

    def to_dict(
        self, include_details: bool = True, include_internal: bool = False
    ) -> dict[str, Any]:
        """
        Serialize error for API/logging with granular control over what's included.

        Args:
            include_details: Include error details
            include_internal: Include internal debugging info (correlation_id, error_id, etc.)
        """
        data = {
            "error": self.code,
            "message": self.user_message,
            "timestamp": self.timestamp,
        }

        if include_details and self.details:
            data["details"] = {
                k: v for k, v in self._sanitize_details(self.details).items()
                if not k.startswith("_")
            }

        if self.recovery_hint:
            data["recovery_hint"] = self.recovery_hint

        if self.retryable:
            data["retryable"] = True

        if include_internal:
            data.update(
                {
                    "error_id": self.error_id,
                    "correlation_id": self.correlation_id,
                    "severity": self.severity.value,
                    "internal_message": self.message,
                    "context": self.context,
                }
            )

        return data

    def with_context(self, **context: Any) -> "OrgNotifyError":
        """Add context to error and return self for chaining."""
        self.context.update(context)
        return self

    def __str__(self) -> str:
        return f"[{self.error_id}] {self.code}: {self.message}"


class DomainError(OrgNotifyError):
    """Base class for domain errors."""

    default_code = "DOMAIN_ERROR"
    status_code = 400
    severity = ErrorSeverity.MEDIUM


class ApplicationError(OrgNotifyError):
    """Base class for application layer errors."""

    default_code = "APPLICATION_ERROR"
    status_code = 400
    severity = ErrorSeverity.MEDIUM


class InfrastructureError(OrgNotifyError):
    """Base class for infrastructure errors."""

    default_code = "INFRASTRUCTURE_ERROR"
    status_code = 500
    severity = ErrorSeverity.HIGH
    retryable = True


class ValidationError(ApplicationError):
    """Validation error with support for multiple field errors."""

    default_code = "VALIDATION_ERROR"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(
        self,
        message: str,
        field: str | None = None,
        field_errors: dict[str, list[str]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        if field:
            self.details["field"] = field
        if field_errors:
            self.details["field_errors"] = field_errors

    @classmethod
    def from_fields(
        cls, field_errors: dict[str, list[str]], **kwargs: Any
    ) -> "ValidationError":
        """Create validation error from field errors dictionary."""
        total_errors = sum(len(errors) for errors in field_errors.values())
        message = f"Validation failed for {len(field_errors)} field(s) with {total_errors} error(s)"
        return cls(message, field_errors=field_errors, **kwargs)


class NotFoundError(ApplicationError):
    """Resource not found error."""

    default_code = "NOT_FOUND"
    status_code = 404
    severity = ErrorSeverity.LOW

    def __init__(self, resource: str, identifier: Any, **kwargs: Any) -> None:
        message = f"{resource} not found: {identifier}"
        user_message = f"The requested {resource.lower()} was not found"
        super().__init__(message, user_message=user_message, **kwargs)
        self.details.update({"resource": resource, "identifier": str(identifier)})


class ConflictError(ApplicationError):
    """Resource conflict error."""

    default_code = "CONFLICT"
    status_code = 409
    severity = ErrorSeverity.MEDIUM

    def __init__(
        self, message: str, resource: str | None = None, **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)
        if resource:
            self.details["resource"] = resource


class ConfigurationError(InfrastructureError):
    """Configuration error."""

    default_code = "CONFIGURATION_ERROR"
    status_code = 500
    severity = ErrorSeverity.CRITICAL
    retryable = False

    def __init__(
        self, message: str, config_key: str | None = None, **kwargs: Any
    ) -> None:
        user_message = "Service configuration issue"
        super().__init__(message, user_message=user_message, **kwargs)
        if config_key:
            self.details["config_key"] = config_key


class BusinessRuleError(DomainError):
    """Business rule violation error."""

    default_code = "BUSINESS_RULE_VIOLATION"
    status_code = 422
    severity = ErrorSeverity.MEDIUM

    def __init__(self, rule: str, message: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.details["rule"] = rule


class InvalidStateTransitionError(DomainError):
    """Raised when a status machine is asked for a move its table forbids."""

    default_code = "INVALID_STATE_TRANSITION"
    status_code = 409

    def __init__(
        self,
        entity: str,
        from_status: Any,
        to_status: Any,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        from_value = getattr(from_status, "value", from_status)
        to_value = getattr(to_status, "value", to_status)
        super().__init__(
            message or f"{entity} cannot transition from {from_value} to {to_value}",
            **kwargs,
        )
        self.details.update(
            {"entity": entity, "from_status": from_value, "to_status": to_value}
        )


# Error handling utilities


class ErrorContext:
    """Context manager for error correlation and additional context."""

    def __init__(self, correlation_id: str | None = None, **context: Any) -> None:
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.context = context

    def __enter__(self) -> "ErrorContext":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_val and isinstance(exc_val, OrgNotifyError):
            exc_val.correlation_id = self.correlation_id
            exc_val.context.update(self.context)

    def create_error(
        self, error_class: type[OrgNotifyError], *args: Any, **kwargs: Any
    ) -> OrgNotifyError:
        """Create an error with this context applied."""
        kwargs.setdefault("correlation_id", self.correlation_id)
        if "context" in kwargs:
            kwargs["context"].update(self.context)
        else:
            kwargs["context"] = self.context.copy()
        return error_class(*args, **kwargs)


@contextmanager
def error_context(correlation_id: str | None = None, **context: Any) -> Any:
    """Attach a correlation id and context to any orgnotify error raised inside."""
    ctx = ErrorContext(correlation_id, **context)
    try:
        yield ctx
    except OrgNotifyError as e:
        e.correlation_id = ctx.correlation_id
        e.context.update(ctx.context)
        raise


__all__ = [
    "ApplicationError",
    "BusinessRuleError",
    "ConfigurationError",
    "ConflictError",
    "DomainError",
    "ErrorContext",
    "ErrorSeverity",
    "InfrastructureError",
    "InvalidStateTransitionError",
    "NotFoundError",
    "OrgNotifyError",
    "ValidationError",
    "error_context",
]
