"""Multi-tenant notification and department domain layer."""

__version__ = "0.1.0"
