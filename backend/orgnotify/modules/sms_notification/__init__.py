"""SMS notification module."""
