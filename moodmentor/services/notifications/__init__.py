"""Notification services."""

from moodmentor.services.notifications.notification_service import NotificationService
from moodmentor.services.notifications.preferences_service import PreferencesService

__all__ = [
    "NotificationService",
    "PreferencesService",
]
