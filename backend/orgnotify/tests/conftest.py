"""Shared pytest configuration for orgnotify tests."""

import pytest

from orgnotify.core.config import get_settings
from orgnotify.shared.value_objects import OrganizationId, TenantId, UserId


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests without external services")


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so environment overrides apply per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def tenant_id():
    """Tenant used by most aggregates."""
    return TenantId("enterprise-acme")


@pytest.fixture
def organization_id():
    """Organization owning the department tree."""
    return OrganizationId.generate()


@pytest.fixture
def user_id():
    """Recipient of notifications."""
    return UserId.generate()
