"""
Tests for department status and value objects.
"""

import pytest

from orgnotify.modules.department.domain import (
    DepartmentDescription,
    DepartmentName,
    DepartmentSettings,
    DepartmentStatus,
    InvalidDepartmentDescriptionError,
    InvalidDepartmentNameError,
    InvalidDepartmentSettingsError,
)

pytestmark = pytest.mark.unit


class TestDepartmentStatus:
    """Test department lifecycle transitions."""

    @pytest.mark.parametrize(
        ("current", "target", "allowed"),
        [
            (DepartmentStatus.PENDING, DepartmentStatus.ACTIVE, True),
            (DepartmentStatus.PENDING, DepartmentStatus.SUSPENDED, False),
            (DepartmentStatus.ACTIVE, DepartmentStatus.SUSPENDED, True),
            (DepartmentStatus.ACTIVE, DepartmentStatus.PENDING, False),
            (DepartmentStatus.SUSPENDED, DepartmentStatus.ACTIVE, True),
            (DepartmentStatus.DISABLED, DepartmentStatus.ACTIVE, True),
            (DepartmentStatus.DISABLED, DepartmentStatus.SUSPENDED, False),
            (DepartmentStatus.DELETED, DepartmentStatus.ACTIVE, False),
        ],
    )
    def test_transitions(self, current, target, allowed):
        """Test the transition table."""
        assert current.can_transition_to(target) is allowed

    def test_every_live_status_can_be_deleted(self):
        """Test that only DELETED is final."""
        for status in DepartmentStatus:
            if status == DepartmentStatus.DELETED:
                assert status.is_final()
                assert not status.can_be_deleted()
            else:
                assert DepartmentStatus.DELETED in status.allowed_transitions()

    def test_operational_statuses(self):
        """Test that every status except DELETED is operational."""
        assert DepartmentStatus.DELETED not in DepartmentStatus.operational_statuses()
        assert len(DepartmentStatus.operational_statuses()) == 4

    def test_action_helpers(self):
        """Test the activate/suspend/deactivate helpers."""
        assert DepartmentStatus.SUSPENDED.can_be_activated()
        assert not DepartmentStatus.ACTIVE.can_be_activated()
        assert DepartmentStatus.ACTIVE.can_be_suspended()
        assert not DepartmentStatus.PENDING.can_be_suspended()
        assert DepartmentStatus.PENDING.can_be_deactivated()
        assert not DepartmentStatus.DISABLED.can_be_deactivated()


class TestDepartmentName:
    """Test department name validation."""

    def test_name_is_stripped(self):
        """Test surrounding whitespace is removed."""
        assert DepartmentName("  Engineering ").value == "Engineering"

    @pytest.mark.parametrize("value", ["", "   ", None, "R&D", "<script>", "a" * 101])
    def test_invalid_names(self, value):
        """Test empty, too long and markup-like names are rejected."""
        with pytest.raises(InvalidDepartmentNameError):
            DepartmentName(value)
        assert not DepartmentName.is_valid(value)

    def test_max_length_accepted(self):
        """Test a 100 character name is accepted."""
        assert DepartmentName("a" * 100).value == "a" * 100

    def test_short_name(self):
        """Test long names are shortened for display."""
        name = DepartmentName("Research and Development Center")
        assert name.short_name() == "Research and Develop..."
        assert DepartmentName("QA").short_name() == "QA"

    def test_matches_ignores_case(self):
        """Test the case-insensitive comparison."""
        assert DepartmentName("Sales").matches(DepartmentName("SALES"))
        assert DepartmentName("Sales") != DepartmentName("SALES")

    def test_error_points_at_name_field(self):
        """Test the validation error names its field."""
        with pytest.raises(InvalidDepartmentNameError) as exc_info:
            DepartmentName("")
        assert exc_info.value.details["field"] == "name"


class TestDepartmentDescription:
    """Test department description validation."""

    def test_empty_by_default(self):
        """Test an omitted description is empty."""
        assert DepartmentDescription().is_empty()
        assert DepartmentDescription(None).value == ""

    def test_too_long(self):
        """Test descriptions over 500 characters are rejected."""
        with pytest.raises(InvalidDepartmentDescriptionError):
            DepartmentDescription("x" * 501)

    def test_summary(self):
        """Test the summary cuts at 100 characters."""
        description = DepartmentDescription("y" * 150)
        assert description.summary() == "y" * 100 + "..."


class TestDepartmentSettings:
    """Test department settings."""

    def test_defaults(self):
        """Test the default settings."""
        settings = DepartmentSettings.create_default()

        assert settings.max_members == 50
        assert settings.max_depth == 5
        assert settings.require_approval
        assert not settings.allow_self_join
        assert settings.default_language == "zh-CN"
        assert settings.timezone == "Asia/Shanghai"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_members": 0},
            {"max_members": 1001},
            {"max_depth": 0},
            {"max_depth": 11},
            {"default_language": ""},
            {"timezone": " "},
            {"allow_self_join": True, "require_approval": True},
        ],
    )
    def test_invalid_settings(self, kwargs):
        """Test out-of-range and conflicting settings are rejected."""
        with pytest.raises(InvalidDepartmentSettingsError):
            DepartmentSettings(**kwargs)
        assert not DepartmentSettings.is_valid(**kwargs)

    def test_self_join_without_approval(self):
        """Test open departments can be joined directly."""
        settings = DepartmentSettings(allow_self_join=True, require_approval=False)
        assert settings.can_join_without_approval()
        assert not DepartmentSettings().can_join_without_approval()

    def test_features(self):
        """Test feature flags and unknown feature names."""
        settings = DepartmentSettings(enable_calendar=False)

        assert settings.is_feature_enabled("announcements")
        assert not settings.is_feature_enabled("calendar")
        assert not settings.is_feature_enabled("chat")
        assert settings.enabled_features() == ["announcements", "file_sharing"]

    def test_with_changes_returns_new_settings(self):
        """Test changes produce a new value and keep the original."""
        settings = DepartmentSettings()
        changed = settings.with_changes(max_members=80)

        assert changed.max_members == 80
        assert settings.max_members == 50

    def test_with_changes_rejects_unknown_keys(self):
        """Test unknown setting names are rejected."""
        with pytest.raises(InvalidDepartmentSettingsError):
            DepartmentSettings().with_changes(colour="blue")

    def test_dict_round_trip(self):
        """Test settings survive to_dict/from_dict."""
        settings = DepartmentSettings(max_members=10, enable_project_management=True)
        assert DepartmentSettings.from_dict(settings.to_dict()) == settings

    def test_immutable(self):
        """Test settings cannot be modified in place."""
        settings = DepartmentSettings()
        with pytest.raises(AttributeError):
            settings.max_members = 5
