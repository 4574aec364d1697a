"""Template test fixtures."""

import pytest

from orgnotify.modules.template.domain import (
    EmailTemplate,
    TemplateContent,
    TemplateVariable,
    VariableType,
)


@pytest.fixture
def variables():
    return [
        TemplateVariable("user_name", VariableType.STRING, "Recipient name", required=True),
        TemplateVariable("team", VariableType.STRING, "Team name", default_value="Platform"),
    ]


@pytest.fixture
def email_content(variables):
    """Welcome email using both declared variables."""
    return TemplateContent(
        title="Welcome {{ user_name }}",
        html_content="<p>Hello {{ user_name }}, welcome to {{ team }}.</p>",
        text_content="Hello {{ user_name }}, welcome to {{ team }}.",
        variables=variables,
    )


@pytest.fixture
def template(tenant_id, email_content):
    """Draft welcome template."""
    return EmailTemplate.create(
        tenant_id, "welcome-email", "Welcome email", email_content, category="onboarding"
    )
