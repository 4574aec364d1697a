"""Core infrastructure shared by every orgnotify module."""
