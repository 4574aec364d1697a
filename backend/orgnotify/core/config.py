"""Application configuration management.

Pure-Python dataclasses populated from environment variables (optionally
seeded from a ``.env`` file). Every section validates itself and raises
``ConfigurationError`` on bad input, so a misconfigured process fails at
start-up rather than in the middle of a delivery.

Architecture:
- EnvironmentLoader: typed access to environment variables
- PushSettings / SmsSettings / TemplateSettings / DepartmentLimits: per-module limits
- Settings: aggregate of all sections
- get_settings(): cached accessor
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any

from orgnotify.core.enums import Environment, LogLevel
from orgnotify.core.errors import ConfigurationError

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")


# =====================================================================================
# ENVIRONMENT LOADER
# =====================================================================================


class EnvironmentLoader:
    """
    Environment variable loader with type conversion and validation.

    Values already present in ``os.environ`` win over the ones in the env file.
    """

    def __init__(self, env_file: str = ".env"):
        self.env_file = env_file
        self._load_env_file()

    def _load_env_file(self) -> None:
        """Load environment variables from file if it exists."""
        if not os.path.exists(self.env_file):
            return

        try:
            with open(self.env_file, encoding="utf-8") as f:
                for raw_line in f:
                    line = raw_line.strip()

                    if not line or line.startswith("#") or "=" not in line:
                        continue

                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()

                    if (value.startswith('"') and value.endswith('"')) or (
                        value.startswith("'") and value.endswith("'")
                    ):
                        value = value[1:-1]

                    if key not in os.environ:
                        os.environ[key] = value

        except OSError as e:
            raise ConfigurationError(
                f"Failed to load environment file {self.env_file}: {e}"
            ) from e

    def get_string(self, key: str, default: str | None = None) -> str | None:
        """Get string value from environment."""
        value = os.environ.get(key)
        if value is None or not value.strip():
            return default
        return value.strip()

    def get_integer(
        self,
        key: str,
        default: int,
        min_value: int | None = None,
        max_value: int | None = None,
    ) -> int:
        """Get integer value from environment with range checks."""
        raw = os.environ.get(key)
        if raw is None or not raw.strip():
            value = default
        else:
            try:
                value = int(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"{key} must be an integer, got {raw!r}", config_key=key
                ) from e

        if min_value is not None and value < min_value:
            raise ConfigurationError(f"{key} must be >= {min_value}", config_key=key)
        if max_value is not None and value > max_value:
            raise ConfigurationError(f"{key} must be <= {max_value}", config_key=key)
        return value

    def get_boolean(self, key: str, default: bool) -> bool:
        """Get boolean value from environment."""
        raw = os.environ.get(key)
        if raw is None or not raw.strip():
            return default

        lowered = raw.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
        raise ConfigurationError(f"{key} must be a boolean, got {raw!r}", config_key=key)

    def get_list(self, key: str, default: list[str] | None = None) -> list[str]:
        """Get comma-separated list from environment, dropping empty items."""
        raw = self.get_string(key)
        if raw is None:
            return list(default or [])
        return [item.strip() for item in raw.split(",") if item.strip()]

    def get_enum(self, key: str, enum_class: type[Enum], default: Enum) -> Enum:
        """Get enum value from environment, matching by value or by name."""
        raw = self.get_string(key)
        if raw is None:
            return default

        for member in enum_class:
            if raw.upper() == member.name or raw.lower() == str(member.value).lower():
                return member

        choices = ", ".join(member.name for member in enum_class)
        raise ConfigurationError(
            f"{key} must be one of: {choices}, got {raw!r}", config_key=key
        )


# =====================================================================================
# SECTION CONFIGURATION CLASSES
# =====================================================================================


@dataclass
class PushSettings:
    """Limits applied by the push notification domain."""

    default_priority: str = field(default="NORMAL")
    max_batch_size: int = field(default=1000)
    max_content_length: int = field(default=2000)

    def __post_init__(self):
        if self.max_batch_size < 1:
            raise ConfigurationError(
                "Push batch size must be at least 1", config_key="PUSH_MAX_BATCH_SIZE"
            )
        if self.max_content_length < 1:
            raise ConfigurationError(
                "Push content length must be positive",
                config_key="PUSH_MAX_CONTENT_LENGTH",
            )


@dataclass
class SmsSettings:
    """Limits applied by the SMS notification domain."""

    default_max_retries: int = field(default=3)
    default_country_code: str = field(default="+86")
    max_segments: int = field(default=10)
    expiry_hours: int = field(default=24)

    def __post_init__(self):
        if not self.default_country_code.startswith("+"):
            raise ConfigurationError(
                "SMS default country code must start with '+'",
                config_key="SMS_DEFAULT_COUNTRY_CODE",
            )
        if self.default_max_retries < 0:
            raise ConfigurationError(
                "SMS max retries cannot be negative", config_key="SMS_MAX_RETRIES"
            )


@dataclass
class TemplateSettings:
    """Rendering options for the template domain service."""

    sandboxed_rendering: bool = field(default=True)
    autoescape: bool = field(default=True)
    cache_size: int = field(default=500)
    # Template type values no tenant may create templates for.
    restricted_types: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        self.restricted_types = tuple(value.upper() for value in self.restricted_types)


@dataclass
class DepartmentLimits:
    """Organisation-wide ceilings for department settings."""

    max_department_depth: int = field(default=10)
    max_members_per_department: int = field(default=1000)
    allow_project_management: bool = field(default=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_department_depth": self.max_department_depth,
            "max_members_per_department": self.max_members_per_department,
            "allow_project_management": self.allow_project_management,
        }


# =====================================================================================
# SETTINGS
# =====================================================================================


class Settings:
    """
    Main application settings.

    Usage Example:
        settings = get_settings()
        settings.sms.max_segments
        settings.department.max_department_depth
    """

    def __init__(self, env_file: str = ".env"):
        self.env_loader = EnvironmentLoader(env_file)

        self._load_application_config()
        self._load_push_config()
        self._load_sms_config()
        self._load_template_config()
        self._load_department_config()

    def _load_application_config(self) -> None:
        self.app_name = self.env_loader.get_string("APP_NAME", "orgnotify")
        self.app_version = self.env_loader.get_string("APP_VERSION", "0.1.0")
        self.environment = self.env_loader.get_enum(
            "ENVIRONMENT", Environment, Environment.DEVELOPMENT
        )
        self.debug = self.env_loader.get_boolean("DEBUG", False)
        self.log_level = self.env_loader.get_enum("LOG_LEVEL", LogLevel, LogLevel.INFO)

    def _load_push_config(self) -> None:
        self.push = PushSettings(
            default_priority=self.env_loader.get_string("PUSH_DEFAULT_PRIORITY", "NORMAL"),
            max_batch_size=self.env_loader.get_integer(
                "PUSH_MAX_BATCH_SIZE", 1000, min_value=1
            ),
            max_content_length=self.env_loader.get_integer(
                "PUSH_MAX_CONTENT_LENGTH", 2000, min_value=1
            ),
        )

    def _load_sms_config(self) -> None:
        self.sms = SmsSettings(
            default_max_retries=self.env_loader.get_integer(
                "SMS_MAX_RETRIES", 3, min_value=0, max_value=10
            ),
            default_country_code=self.env_loader.get_string(
                "SMS_DEFAULT_COUNTRY_CODE", "+86"
            ),
            max_segments=self.env_loader.get_integer("SMS_MAX_SEGMENTS", 10, min_value=1),
            expiry_hours=self.env_loader.get_integer("SMS_EXPIRY_HOURS", 24, min_value=1),
        )

    def _load_template_config(self) -> None:
        self.template = TemplateSettings(
            sandboxed_rendering=self.env_loader.get_boolean("TEMPLATE_SANDBOXED", True),
            autoescape=self.env_loader.get_boolean("TEMPLATE_AUTOESCAPE", True),
            cache_size=self.env_loader.get_integer(
                "TEMPLATE_CACHE_SIZE", 500, min_value=1
            ),
            restricted_types=tuple(
                self.env_loader.get_list("TEMPLATE_RESTRICTED_TYPES")
            ),
        )

    def _load_department_config(self) -> None:
        self.department = DepartmentLimits(
            max_department_depth=self.env_loader.get_integer(
                "DEPARTMENT_MAX_DEPTH", 10, min_value=1, max_value=10
            ),
            max_members_per_department=self.env_loader.get_integer(
                "DEPARTMENT_MAX_MEMBERS", 1000, min_value=1, max_value=1000
            ),
            allow_project_management=self.env_loader.get_boolean(
                "DEPARTMENT_ALLOW_PROJECT_MANAGEMENT", True
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Flatten settings for diagnostics."""
        return {
            "app_name": self.app_name,
            "app_version": self.app_version,
            "environment": self.environment.value,
            "debug": self.debug,
            "log_level": self.log_level.level_name,
            "push": vars(self.push).copy(),
            "sms": vars(self.sms).copy(),
            "template": vars(self.template).copy(),
            "department": self.department.to_dict(),
        }


# =====================================================================================
# FACTORY FUNCTIONS
# =====================================================================================


@lru_cache
def get_settings(env_file: str = ".env") -> Settings:
    """
    Get cached settings instance.

    Args:
        env_file: Environment file to load
    """
    return Settings(env_file)


__all__ = [
    "DepartmentLimits",
    "EnvironmentLoader",
    "PushSettings",
    "Settings",
    "SmsSettings",
    "TemplateSettings",
    "get_settings",
]
