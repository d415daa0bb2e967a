"""
Notification preferences service.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.utils.exceptions import ValidationException
from common.utils.ids import to_object_id

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES: Dict[str, bool] = {
    "emailNotifications": True,
    "appointmentReminders": True,
    "patientUpdates": True,
    "groupNotifications": True,
    "marketingCommunications": False,
}


class PreferencesService:
    """Stores one preferences document per user."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self._db = db
        self._collection = db["notificationPreferences"]

    async def get_preferences(self, user_id: str) -> Dict[str, bool]:
        """Saved preferences, or the defaults if the user never saved any."""
        doc = await self._collection.find_one({"userId": to_object_id(user_id, "userId")})
        if not doc:
            return dict(DEFAULT_PREFERENCES)

        return {key: bool(doc.get(key, default)) for key, default in DEFAULT_PREFERENCES.items()}

    async def save_preferences(self, user_id: str, preferences: Dict[str, Any]) -> Dict[str, bool]:
        """
        Replace a user's preferences.

        Raises:
            ValidationException: A preference is missing or not a boolean
        """
        invalid = [
            key for key in DEFAULT_PREFERENCES
            if not isinstance(preferences.get(key), bool)
        ]
        if invalid:
            raise ValidationException(
                message="Invalid preferences format",
                code="INVALID_PREFERENCES",
                errors=[{"field": key, "message": "Must be true or false"} for key in invalid],
            )

        values = {key: preferences[key] for key in DEFAULT_PREFERENCES}
        now = datetime.now(timezone.utc)

        await self._collection.update_one(
            {"userId": to_object_id(user_id, "userId")},
            {
                "$set": {**values, "updatedAt": now},
                "$setOnInsert": {"createdAt": now},
            },
            upsert=True,
        )

        logger.info(f"Notification preferences saved for user {user_id}")
        return values
