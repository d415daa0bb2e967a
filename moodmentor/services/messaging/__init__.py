"""Messaging services."""

from moodmentor.services.messaging.message_service import MessageService

__all__ = [
    "MessageService",
]
