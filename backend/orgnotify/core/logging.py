"""Structured logging configuration.

structlog-backed logging for every orgnotify module. Aggregates and services
obtain a logger through ``get_logger(__name__)`` and log with keyword fields::

    logger = get_logger(__name__)
    logger.info("Push notification sent", notif_id=str(notif_id), status="SENT")

Architecture:
- LogConfig: configuration with validation and environment defaults
- LogFilter: sanitisation filters applied to every record
- StructuredLogger: thin wrapper adding filtering and context
- LoggerFactory: structlog configuration and logger cache
"""

import logging
import re
import sys
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars

from orgnotify.core.enums import Environment, LogFormat, LogLevel
from orgnotify.core.errors import ConfigurationError

# =====================================================================================
# CONFIGURATION CLASSES
# =====================================================================================


@dataclass
class LogConfig:
    """
    Logging configuration with validation and environment defaults.

    Usage Example:
        config = LogConfig(level=LogLevel.DEBUG, environment=Environment.TESTING)
        configure_logging(config)
    """

    level: LogLevel = field(default=LogLevel.INFO)
    format: LogFormat = field(default=LogFormat.JSON)
    environment: Environment = field(default=Environment.DEVELOPMENT)

    enable_timestamps: bool = field(default=True)
    enable_caller_info: bool = field(default=False)
    enable_exception_info: bool = field(default=True)
    enable_context_tracking: bool = field(default=True)

    enable_sensitive_data_filtering: bool = field(default=True)
    truncate_long_messages: bool = field(default=True)
    max_message_length: int = field(default=10000)

    def __post_init__(self):
        """Post-initialization validation and setup."""
        self.validate()
        self.apply_environment_defaults()

    def validate(self) -> None:
        """
        Validate logging configuration parameters.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not isinstance(self.level, LogLevel):
            raise ConfigurationError("Log level must be a LogLevel", config_key="LOG_LEVEL")

        if self.max_message_length < 1000:
            raise ConfigurationError(
                "Maximum message length must be at least 1000 characters",
                config_key="LOG_MAX_MESSAGE_LENGTH",
            )

    def apply_environment_defaults(self) -> None:
        """Apply environment-specific defaults."""
        if self.environment == Environment.DEVELOPMENT:
            self.format = LogFormat.CONSOLE
            self.enable_caller_info = True

        elif self.environment == Environment.TESTING:
            self.level = LogLevel.WARNING
            self.format = LogFormat.PLAIN
            self.enable_context_tracking = False

        elif self.environment == Environment.PRODUCTION:
            self.level = LogLevel.INFO
            self.format = LogFormat.JSON
            self.enable_caller_info = False
            self.enable_sensitive_data_filtering = True

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "level": self.level.level_name,
            "format": self.format.value,
            "environment": self.environment.value,
            "enable_timestamps": self.enable_timestamps,
            "enable_caller_info": self.enable_caller_info,
            "enable_context_tracking": self.enable_context_tracking,
            "enable_sensitive_data_filtering": self.enable_sensitive_data_filtering,
            "max_message_length": self.max_message_length,
        }


# =====================================================================================
# SECURITY FILTERS
# =====================================================================================


class LogFilter(ABC):
    """Base class for record filters applied before a record is emitted."""

    @abstractmethod
    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        """Return the sanitised record."""

    def should_skip(self, record: dict[str, Any]) -> bool:
        """Determine if record should be skipped entirely."""
        return False


class SensitiveDataFilter(LogFilter):
    """
    Masks credentials in log records.

    Push tokens and provider secrets (``apiSecret``, ``authToken``, ...) are
    matched by field name. E.164 phone numbers inside string values keep
    their last four digits.
    """

    def __init__(self, mask_char: str = "*", preserve_length: bool = False):
        self.mask_char = mask_char
        self.preserve_length = preserve_length

        self.sensitive_patterns = [
            re.compile(r"password", re.IGNORECASE),
            re.compile(r"token", re.IGNORECASE),
            re.compile(r"secret", re.IGNORECASE),
            re.compile(r"api_?key", re.IGNORECASE),
            re.compile(r"credential", re.IGNORECASE),
            re.compile(r"authorization", re.IGNORECASE),
        ]

        self.phone_pattern = re.compile(r"\+\d{7,15}\b")

    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        """Filter and sanitize log record."""
        filtered_record = {}

        for key, value in record.items():
            if self._is_sensitive_field(key):
                filtered_record[key] = self._mask_value(value)
            elif isinstance(value, str):
                filtered_record[key] = self._sanitize_string_value(value)
            elif isinstance(value, dict):
                filtered_record[key] = self.filter(value)
            else:
                filtered_record[key] = value

        return filtered_record

    def _is_sensitive_field(self, field_name: str) -> bool:
        return any(pattern.search(field_name) for pattern in self.sensitive_patterns)

    def _mask_value(self, value: Any) -> str | None:
        if value is None:
            return None

        value_str = str(value)
        if self.preserve_length:
            return self.mask_char * len(value_str)
        return f"{self.mask_char * 3}[MASKED]"

    def _mask_phone(self, match: re.Match[str]) -> str:
        digits = match.group()
        return digits[:3] + self.mask_char * (len(digits) - 7) + digits[-4:]

    def _sanitize_string_value(self, value: str) -> str:
        return self.phone_pattern.sub(self._mask_phone, value)


class MessageLengthFilter(LogFilter):
    """Filter for truncating overly long log messages."""

    def __init__(
        self, max_length: int = 10000, truncation_suffix: str = "... [TRUNCATED]"
    ):
        self.max_length = max_length
        self.truncation_suffix = truncation_suffix

    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        """Filter and truncate long messages."""
        filtered_record = record.copy()

        message = record.get("event", "")
        if isinstance(message, str) and len(message) > self.max_length:
            truncated_length = self.max_length - len(self.truncation_suffix)
            filtered_record["event"] = (
                message[:truncated_length] + self.truncation_suffix
            )
            filtered_record["original_message_length"] = len(message)
            filtered_record["message_truncated"] = True

        return filtered_record


# =====================================================================================
# STRUCTURED LOGGER
# =====================================================================================


class StructuredLogger:
    """
    Structured logger with filtering and per-logger statistics.

    Wraps a structlog logger; every call takes a message and keyword fields.
    """

    def __init__(self, name: str, config: LogConfig):
        self.name = name
        self.config = config

        self.filters: list[LogFilter] = []
        if config.enable_sensitive_data_filtering:
            self.filters.append(SensitiveDataFilter())
        if config.truncate_long_messages:
            self.filters.append(MessageLengthFilter(config.max_message_length))

        self._logger = structlog.get_logger(name)
        self._log_count = 0
        self._error_count = 0

    def debug(self, message: str, /, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, /, **kwargs: Any) -> None:
        """Log info message."""
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, /, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, /, **kwargs: Any) -> None:
        """Log error message."""
        self._log(LogLevel.ERROR, message, **kwargs)
        self._error_count += 1

    def critical(self, message: str, /, **kwargs: Any) -> None:
        """Log critical message."""
        self._log(LogLevel.CRITICAL, message, **kwargs)
        self._error_count += 1

    def exception(self, message: str, /, **kwargs: Any) -> None:
        """Log exception with traceback."""
        kwargs["exc_info"] = True
        self.error(message, **kwargs)

    def _log(self, level: LogLevel, message: str, /, **kwargs: Any) -> None:
        if level.priority < self.config.level.priority:
            return

        # structlog keeps the message under "event"; a field of that name is renamed.
        if "event" in kwargs:
            kwargs["event_field"] = kwargs.pop("event")
        record = {"event": message, **kwargs}
        for filter_instance in self.filters:
            if filter_instance.should_skip(record):
                return
            record = filter_instance.filter(record)

        event = record.pop("event")
        getattr(self._logger, level.level_name.lower())(event, **record)
        self._log_count += 1

    def get_stats(self) -> dict[str, Any]:
        """Get logger statistics."""
        return {
            "logger_name": self.name,
            "log_count": self._log_count,
            "error_count": self._error_count,
        }


# =====================================================================================
# LOGGER FACTORY
# =====================================================================================


class LoggerFactory:
    """Configures structlog once and caches one StructuredLogger per name."""

    def __init__(self, config: LogConfig):
        self.config = config
        self._loggers: dict[str, StructuredLogger] = {}
        self._configured = False

    def configure_logging(self) -> None:
        """Configure global logging settings."""
        if self._configured:
            return

        processors = [
            merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
        ]

        if self.config.enable_timestamps:
            processors.append(structlog.processors.TimeStamper(fmt="iso"))

        if self.config.enable_caller_info:
            processors.append(
                structlog.processors.CallsiteParameterAdder(
                    parameters=[
                        structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO,
                        structlog.processors.CallsiteParameter.FUNC_NAME,
                    ]
                )
            )

        if self.config.enable_exception_info:
            processors.extend(
                [
                    structlog.processors.StackInfoRenderer(),
                    structlog.processors.format_exc_info,
                ]
            )

        processors.append(structlog.processors.UnicodeDecoder())

        if self.config.format == LogFormat.JSON:
            processors.append(structlog.processors.JSONRenderer())
        elif self.config.format == LogFormat.CONSOLE:
            processors.append(structlog.dev.ConsoleRenderer(colors=False))
        else:
            processors.append(structlog.processors.KeyValueRenderer())

        structlog.configure(
            processors=processors,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=self.config.level.to_logging_level(),
        )

        self._configured = True

    def get_logger(self, name: str) -> StructuredLogger:
        """Get or create structured logger."""
        if not self._configured:
            self.configure_logging()

        if name not in self._loggers:
            self._loggers[name] = StructuredLogger(name, self.config)

        return self._loggers[name]


# =====================================================================================
# GLOBAL CONFIGURATION AND FACTORY
# =====================================================================================

_logger_factory: LoggerFactory | None = None


def configure_logging(config: LogConfig | None = None) -> None:
    """
    Configure global logging system.

    Args:
        config: Logging configuration; built from settings when omitted
    """
    global _logger_factory  # noqa: PLW0603

    if config is None:
        from orgnotify.core.config import get_settings

        settings = get_settings()
        config = LogConfig(level=settings.log_level, environment=settings.environment)

    _logger_factory = LoggerFactory(config)
    _logger_factory.configure_logging()


def get_logger(name: str) -> StructuredLogger:
    """
    Get structured logger instance.

    Args:
        name: Logger name (usually __name__)
    """
    if _logger_factory is None:
        configure_logging(LogConfig())

    return _logger_factory.get_logger(name)


# =====================================================================================
# CONVENIENCE FUNCTIONS
# =====================================================================================


def log_context(**kwargs: Any) -> None:
    """Add context variables to all subsequent logs in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def operation_context(operation_name: str, **kwargs: Any) -> Iterator[None]:
    """Bind an operation name for the duration of a block and log its timing."""
    logger = get_logger("orgnotify.operations")
    with structlog.contextvars.bound_contextvars(operation=operation_name, **kwargs):
        started = time.perf_counter()
        try:
            yield
        finally:
            logger.debug(
                "Operation finished",
                duration_ms=round((time.perf_counter() - started) * 1000, 3),
            )


__all__ = [
    "LogConfig",
    "LogFilter",
    "LoggerFactory",
    "MessageLengthFilter",
    "SensitiveDataFilter",
    "StructuredLogger",
    "clear_context",
    "configure_logging",
    "get_logger",
    "log_context",
    "operation_context",
]
