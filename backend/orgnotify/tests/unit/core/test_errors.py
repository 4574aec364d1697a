"""
Tests for the error hierarchy.
"""

import pytest

from orgnotify.core.errors import (
    BusinessRuleError,
    ConfigurationError,
    DomainError,
    ErrorContext,
    InfrastructureError,
    InvalidStateTransitionError,
    NotFoundError,
    OrgNotifyError,
    ValidationError,
    error_context,
)

pytestmark = pytest.mark.unit


class TestOrgNotifyError:
    """Test the base error."""

    def test_defaults(self):
        """Test default code, ids and message."""
        error = OrgNotifyError("boom")

        assert error.code == "ERROR"
        assert error.user_message == "boom"
        assert error.error_id
        assert error.correlation_id
        assert str(error) == f"[{error.error_id}] ERROR: boom"

    def test_to_dict_hides_internal_fields(self):
        """Test internal fields appear only on request."""
        error = DomainError("bad", details={"field": "name"})

        public = error.to_dict()
        assert public["error"] == "DOMAIN_ERROR"
        assert public["details"] == {"field": "name"}
        assert "error_id" not in public

        internal = error.to_dict(include_internal=True)
        assert internal["error_id"] == error.error_id
        assert internal["internal_message"] == "bad"

    def test_sensitive_details_redacted(self):
        """Test credential-like detail keys are redacted."""
        error = DomainError("bad", details={"api_secret": "s3cr3t", "count": 2})

        details = error.to_dict()["details"]
        assert details["api_secret"] == "***REDACTED***"
        assert details["count"] == 2

    def test_with_context(self):
        """Test context chaining returns the same error."""
        error = DomainError("bad")
        assert error.with_context(tenant="acme") is error
        assert error.context == {"tenant": "acme"}


class TestErrorLayers:
    """Test status codes and specialised errors."""

    def test_status_codes(self):
        """Test each layer's HTTP status."""
        assert DomainError("x").status_code == 400
        assert ValidationError("x").status_code == 422
        assert NotFoundError("Template", "abc").status_code == 404
        assert InfrastructureError("x").retryable

    def test_validation_error_fields(self):
        """Test field errors are carried in details."""
        error = ValidationError.from_fields({"name": ["required"], "age": ["too low"]})

        assert "2 field(s)" in error.message
        assert error.details["field_errors"]["name"] == ["required"]

    def test_not_found_details(self):
        """Test resource and identifier are recorded."""
        error = NotFoundError("Department", 42)

        assert error.details == {"resource": "Department", "identifier": "42"}
        assert error.user_message == "The requested department was not found"

    def test_configuration_error(self):
        """Test the config key is recorded and the error is not retryable."""
        error = ConfigurationError("bad value", config_key="SMS_MAX_RETRIES")

        assert error.details["config_key"] == "SMS_MAX_RETRIES"
        assert not error.retryable

    def test_business_rule(self):
        """Test the rule name is recorded."""
        assert BusinessRuleError("quota", "over quota").details["rule"] == "quota"

    def test_invalid_state_transition(self):
        """Test enum statuses are stored by value."""

        class Status:
            value = "SENT"

        error = InvalidStateTransitionError("Sms", Status(), "PENDING")

        assert error.message == "Sms cannot transition from SENT to PENDING"
        assert error.details["from_status"] == "SENT"
        assert error.status_code == 409


class TestErrorContext:
    """Test correlation helpers."""

    def test_error_context_stamps_errors(self):
        """Test errors raised inside the block get the correlation id."""
        with pytest.raises(DomainError) as exc_info:
            with error_context("req-1", operation="send"):
                raise DomainError("failed")

        assert exc_info.value.correlation_id == "req-1"
        assert exc_info.value.context["operation"] == "send"

    def test_other_exceptions_pass_through(self):
        """Test non-orgnotify errors are not touched."""
        with pytest.raises(KeyError):
            with error_context("req-2"):
                raise KeyError("missing")

    def test_create_error(self):
        """Test errors created from a context share its id."""
        ctx = ErrorContext("req-3", tenant="acme")
        error = ctx.create_error(DomainError, "bad")

        assert error.correlation_id == "req-3"
        assert error.context == {"tenant": "acme"}
