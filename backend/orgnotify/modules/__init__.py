"""Domain modules: push, SMS, templates and departments."""
