"""Department module."""
