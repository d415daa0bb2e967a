"""
User lookup service.

Accounts are created elsewhere; this service only reads them.
"""

import logging
from typing import Optional, List, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.utils.ids import is_object_id, to_object_id

logger = logging.getLogger(__name__)

ROLE_PATIENT = "patient"
ROLE_MENTOR = "mentor"
# Older documents still carry the previous name for mentors
MENTOR_ROLES = (ROLE_MENTOR, "ambassador")

STATUS_SUSPENDED = "suspended"


class UserService:
    """
    Read access to user accounts.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize UserService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._users_collection = db["users"]

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a user by ID.

        Returns:
            User document or None if not found (or the ID is malformed)
        """
        if not is_object_id(user_id):
            return None
        return await self._users_collection.find_one({"_id": to_object_id(user_id)})

    async def get_users(self, user_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Fetch several users at once, keyed by string ID."""
        ids = [to_object_id(uid) for uid in set(user_ids) if is_object_id(uid)]
        if not ids:
            return {}

        cursor = self._users_collection.find({"_id": {"$in": ids}})
        users = await cursor.to_list(length=len(ids))
        return {str(u["_id"]): u for u in users}

    async def get_mentors(self) -> List[Dict[str, Any]]:
        """All active mentor accounts, by name."""
        cursor = self._users_collection.find({
            "role": {"$in": list(MENTOR_ROLES)},
            "status": {"$ne": STATUS_SUSPENDED},
        }).sort("name", 1)
        return await cursor.to_list(length=None)

    @staticmethod
    def is_mentor(user: Optional[Dict[str, Any]]) -> bool:
        return bool(user) and user.get("role") in MENTOR_ROLES

    @staticmethod
    def is_suspended(user: Dict[str, Any]) -> bool:
        return user.get("status") == STATUS_SUSPENDED

    @staticmethod
    def display_name(user: Optional[Dict[str, Any]]) -> str:
        """Best available name for a user document."""
        if not user:
            return "Unknown user"
        return user.get("name") or user.get("fullName") or user.get("email") or "Unknown user"
