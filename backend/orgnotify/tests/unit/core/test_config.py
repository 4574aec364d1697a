"""
Tests for environment-driven settings.
"""

import pytest

from orgnotify.core.config import (
    EnvironmentLoader,
    Settings,
    SmsSettings,
    get_settings,
)
from orgnotify.core.enums import Environment, LogLevel
from orgnotify.core.errors import ConfigurationError

pytestmark = pytest.mark.unit

MISSING_ENV_FILE = "does-not-exist.env"


class TestEnvironmentLoader:
    """Test typed environment access."""

    def test_integer_range(self, monkeypatch):
        """Test integers outside the range are rejected."""
        monkeypatch.setenv("SOME_LIMIT", "11")
        loader = EnvironmentLoader(MISSING_ENV_FILE)

        assert loader.get_integer("SOME_LIMIT", 3) == 11
        with pytest.raises(ConfigurationError):
            loader.get_integer("SOME_LIMIT", 3, max_value=10)

    def test_integer_not_a_number(self, monkeypatch):
        """Test non-numeric integers are rejected."""
        monkeypatch.setenv("SOME_LIMIT", "many")
        with pytest.raises(ConfigurationError):
            EnvironmentLoader(MISSING_ENV_FILE).get_integer("SOME_LIMIT", 3)

    @pytest.mark.parametrize(("raw", "expected"), [("yes", True), ("0", False), ("On", True)])
    def test_boolean(self, monkeypatch, raw, expected):
        """Test accepted boolean spellings."""
        monkeypatch.setenv("SOME_FLAG", raw)
        assert EnvironmentLoader(MISSING_ENV_FILE).get_boolean("SOME_FLAG", False) is expected

    def test_invalid_boolean(self, monkeypatch):
        """Test unknown boolean spellings are rejected."""
        monkeypatch.setenv("SOME_FLAG", "maybe")
        with pytest.raises(ConfigurationError):
            EnvironmentLoader(MISSING_ENV_FILE).get_boolean("SOME_FLAG", False)

    def test_enum_by_name_or_value(self, monkeypatch):
        """Test enums match by member name or value."""
        loader = EnvironmentLoader(MISSING_ENV_FILE)

        monkeypatch.setenv("ENVIRONMENT", "prod")
        assert loader.get_enum("ENVIRONMENT", Environment, Environment.DEVELOPMENT) == (
            Environment.PRODUCTION
        )
        monkeypatch.setenv("ENVIRONMENT", "testing")
        assert loader.get_enum("ENVIRONMENT", Environment, Environment.DEVELOPMENT) == (
            Environment.TESTING
        )

    def test_list(self, monkeypatch):
        """Test comma-separated values are split and blanks dropped."""
        loader = EnvironmentLoader(MISSING_ENV_FILE)

        monkeypatch.setenv("SOME_ITEMS", " SMS, ,WEBHOOK ")
        assert loader.get_list("SOME_ITEMS") == ["SMS", "WEBHOOK"]
        monkeypatch.delenv("SOME_ITEMS")
        assert loader.get_list("SOME_ITEMS", ["EMAIL"]) == ["EMAIL"]

    def test_env_file(self, tmp_path, monkeypatch):
        """Test values are read from the env file without overriding the process."""
        env_file = tmp_path / ".env"
        env_file.write_text('# comment\nFROM_FILE="quoted"\nALREADY_SET=file\n')
        monkeypatch.delenv("FROM_FILE", raising=False)
        monkeypatch.setenv("ALREADY_SET", "process")

        loader = EnvironmentLoader(str(env_file))

        assert loader.get_string("FROM_FILE") == "quoted"
        assert loader.get_string("ALREADY_SET") == "process"


class TestSettings:
    """Test the settings sections."""

    def test_defaults(self, monkeypatch):
        """Test defaults without any environment overrides."""
        for key in ("SMS_MAX_RETRIES", "DEPARTMENT_MAX_DEPTH", "TEMPLATE_SANDBOXED"):
            monkeypatch.delenv(key, raising=False)

        settings = Settings(MISSING_ENV_FILE)

        assert settings.sms.default_max_retries == 3
        assert settings.sms.default_country_code == "+86"
        assert settings.department.max_department_depth == 10
        assert settings.template.sandboxed_rendering
        assert settings.push.max_batch_size == 1000

    def test_overrides(self, monkeypatch):
        """Test environment overrides reach the sections."""
        monkeypatch.setenv("SMS_MAX_RETRIES", "5")
        monkeypatch.setenv("DEPARTMENT_MAX_DEPTH", "3")
        monkeypatch.setenv("TEMPLATE_SANDBOXED", "false")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(MISSING_ENV_FILE)

        assert settings.sms.default_max_retries == 5
        assert settings.department.max_department_depth == 3
        assert not settings.template.sandboxed_rendering
        assert settings.log_level == LogLevel.DEBUG

    def test_restricted_template_types(self, monkeypatch):
        """Test restricted template types are read and upper-cased."""
        monkeypatch.setenv("TEMPLATE_RESTRICTED_TYPES", "webhook,push")

        settings = Settings(MISSING_ENV_FILE)

        assert settings.template.restricted_types == ("WEBHOOK", "PUSH")

    def test_out_of_range_retries(self, monkeypatch):
        """Test SMS retries are capped at 10."""
        monkeypatch.setenv("SMS_MAX_RETRIES", "11")
        with pytest.raises(ConfigurationError):
            Settings(MISSING_ENV_FILE)

    def test_country_code_needs_plus(self):
        """Test the default country code format."""
        with pytest.raises(ConfigurationError):
            SmsSettings(default_country_code="86")

    def test_to_dict(self):
        """Test the diagnostic dump."""
        data = Settings(MISSING_ENV_FILE).to_dict()

        assert data["department"]["max_members_per_department"] == 1000
        assert "max_segments" in data["sms"]

    def test_get_settings_is_cached(self):
        """Test the accessor returns one instance."""
        assert get_settings(MISSING_ENV_FILE) is get_settings(MISSING_ENV_FILE)
