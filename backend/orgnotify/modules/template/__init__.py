"""Notification template module."""
