"""
Tests for structured logging configuration and filters.
"""

import pytest

from orgnotify.core.enums import Environment, LogFormat, LogLevel
from orgnotify.core.errors import ConfigurationError
from orgnotify.core.logging import (
    LogConfig,
    MessageLengthFilter,
    SensitiveDataFilter,
    StructuredLogger,
    get_logger,
    operation_context,
)

pytestmark = pytest.mark.unit


class RecordingLogger:
    """Stands in for the structlog logger and keeps every call."""

    def __init__(self):
        self.calls = []

    def info(self, event, **fields):
        self.calls.append(("info", event, fields))

    def warning(self, event, **fields):
        self.calls.append(("warning", event, fields))


class TestLogConfig:
    """Test logging configuration defaults."""

    def test_testing_environment(self):
        """Test the testing environment raises the level."""
        config = LogConfig(level=LogLevel.DEBUG, environment=Environment.TESTING)

        assert config.level == LogLevel.WARNING
        assert config.format == LogFormat.PLAIN

    def test_development_uses_console(self):
        """Test development logs are human readable."""
        assert LogConfig().format == LogFormat.CONSOLE

    def test_production_uses_json(self):
        """Test production logs are structured."""
        config = LogConfig(level=LogLevel.DEBUG, environment=Environment.PRODUCTION)

        assert config.format == LogFormat.JSON
        assert config.level == LogLevel.INFO

    def test_message_length_minimum(self):
        """Test tiny message limits are rejected."""
        with pytest.raises(ConfigurationError):
            LogConfig(max_message_length=999)

    def test_to_dict(self):
        """Test the level is exported by name."""
        assert LogConfig(environment=Environment.STAGING).to_dict()["level"] == "INFO"


class TestSensitiveDataFilter:
    """Test credential masking."""

    def test_masks_sensitive_fields(self):
        """Test tokens and secrets are masked by field name."""
        record = SensitiveDataFilter().filter(
            {
                "message": "provider configured",
                "push_token": "abcdef",
                "apiSecret": "s3cr3t",
                "api_key": "k",
                "provider": "ALIYUN",
            }
        )

        assert record["push_token"] == "***[MASKED]"
        assert record["apiSecret"] == "***[MASKED]"
        assert record["api_key"] == "***[MASKED]"
        assert record["provider"] == "ALIYUN"

    def test_masks_nested_fields(self):
        """Test nested dictionaries are filtered."""
        record = SensitiveDataFilter().filter({"config": {"authToken": "t", "region": "cn"}})
        assert record["config"] == {"authToken": "***[MASKED]", "region": "cn"}

    def test_masks_phone_numbers_in_values(self):
        """Test E.164 numbers inside values keep only the last four digits."""
        record = SensitiveDataFilter().filter({"message": "sms to +8613812345678 queued"})
        assert record["message"] == "sms to +86*******5678 queued"

    def test_preserve_length(self):
        """Test masks can keep the original length."""
        record = SensitiveDataFilter(preserve_length=True).filter({"password": "hunter2"})
        assert record["password"] == "*******"

    def test_none_stays_none(self):
        """Test missing secrets are not turned into masks."""
        assert SensitiveDataFilter().filter({"token": None})["token"] is None


class TestMessageLengthFilter:
    """Test message truncation."""

    def test_truncates(self):
        """Test long messages are cut and flagged."""
        record = MessageLengthFilter(max_length=20).filter({"event": "x" * 50})

        assert len(record["event"]) == 20
        assert record["event"].endswith("... [TRUNCATED]")
        assert record["original_message_length"] == 50
        assert record["message_truncated"]

    def test_short_messages_untouched(self):
        """Test short messages pass through."""
        assert MessageLengthFilter(max_length=20).filter({"event": "ok"}) == {"event": "ok"}


class TestStructuredLogger:
    """Test the logger wrapper."""

    def test_counts_logs_and_errors(self):
        """Test statistics count emitted records."""
        logger = StructuredLogger("orgnotify.tests", LogConfig())

        logger.info("Push notification sent", notif_id="n-1")
        logger.error("Push notification failed", reason="timeout")

        stats = logger.get_stats()
        assert stats["log_count"] == 2
        assert stats["error_count"] == 1

    def test_fields_named_like_arguments(self):
        """Test fields called level, message or event are logged as plain fields."""
        logger = StructuredLogger("orgnotify.tests.fields", LogConfig())
        logger._logger = RecordingLogger()

        logger.info("Department created", level=2)
        logger.warning("Department check refused", message="depth limit reached")
        logger.info("Event published", event="DepartmentCreated")

        assert logger._logger.calls == [
            ("info", "Department created", {"level": 2}),
            ("warning", "Department check refused", {"message": "depth limit reached"}),
            ("info", "Event published", {"event_field": "DepartmentCreated"}),
        ]
        assert logger.get_stats()["log_count"] == 3

    def test_level_filtering(self):
        """Test records below the configured level are dropped."""
        logger = StructuredLogger(
            "orgnotify.tests.quiet", LogConfig(environment=Environment.TESTING)
        )

        logger.info("ignored")
        logger.warning("kept")

        assert logger.get_stats()["log_count"] == 1

    def test_get_logger_caches(self):
        """Test one logger per name."""
        assert get_logger("orgnotify.tests.cached") is get_logger("orgnotify.tests.cached")

    def test_operation_context(self):
        """Test the operation context runs the block."""
        calls = []
        with operation_context("render_template", template_id="t-1"):
            calls.append("ran")
        assert calls == ["ran"]
