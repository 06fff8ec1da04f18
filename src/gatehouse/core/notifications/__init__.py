"""Notification utilities - email."""

from src.gatehouse.core.notifications.email import EmailService

__all__ = ["EmailService"]
