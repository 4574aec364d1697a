"""Push notification module."""
