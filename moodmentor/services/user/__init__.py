"""User services."""

from moodmentor.services.user.user_service import UserService

__all__ = [
    "UserService",
]
