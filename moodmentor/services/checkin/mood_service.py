"""
Mood entry CRUD service.

Handles mood entry storage and retrieval.
"""

import logging
from datetime import datetime, timezone, timedelta
from typing import Optional, List, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from common.utils.exceptions import NotFoundException, ValidationException
from common.utils.ids import to_object_id
from moodmentor.services.checkin.validators import CheckInValidator, clean_labels

logger = logging.getLogger(__name__)


class MoodService:
    """
    Handles mood entry storage and retrieval.
    Pure CRUD - summaries live in CheckInAnalytics.
    """

    MAX_LIMIT = 100
    UPDATABLE_FIELDS = ("score", "mood", "assessmentResult", "factors", "notes")

    def __init__(self, db: AsyncIOMotorDatabase, max_notes_length: int = 1000):
        """
        Initialize MoodService.

        Args:
            db: MongoDB database connection
            max_notes_length: Limit for the notes field
        """
        self._db = db
        self._collection = db["moodEntries"]
        self._max_notes_length = max_notes_length

    async def create_entry(
        self,
        user_id: str,
        score: float,
        mood: Optional[str] = None,
        assessment_result: Optional[str] = None,
        factors: Optional[List[str]] = None,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Record a mood entry.

        Args:
            user_id: Patient's user ID
            score: Mood score (1-10)
            mood: Optional label ("Happy", "Anxious", ...)
            assessment_result: Optional text result of a guided assessment
            factors: Optional factors affecting mood
            notes: Optional free text

        Returns:
            Saved mood entry document

        Raises:
            ValidationException: Score out of range or text too long
        """
        self._validate({"score": score, "factors": factors, "notes": notes})

        now = datetime.now(timezone.utc)
        entry = {
            "userId": to_object_id(user_id, "userId"),
            "score": float(score),
            "mood": mood.strip() if mood else None,
            "assessmentResult": assessment_result or "",
            "factors": clean_labels(factors),
            "notes": notes.strip() if notes else "",
            "createdAt": now,
            "updatedAt": now,
        }

        result = await self._collection.insert_one(entry)
        entry["_id"] = result.inserted_id

        logger.info(f"Mood entry created for user {user_id}")
        return entry

    async def get_entry(self, entry_id: str, user_id: str) -> Dict[str, Any]:
        """
        Get one of the user's mood entries.

        Raises:
            NotFoundException: Entry missing or owned by someone else
        """
        entry = await self._collection.find_one({
            "_id": to_object_id(entry_id, "entryId"),
            "userId": to_object_id(user_id, "userId"),
        })
        if not entry:
            raise NotFoundException(message="Mood entry not found", code="MOOD_ENTRY_NOT_FOUND")
        return entry

    async def list_entries(
        self,
        user_id: str,
        limit: int = 30,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        Get a page of mood entries, newest first.

        Args:
            user_id: Patient's user ID
            limit: Max records to return (capped at MAX_LIMIT)
            offset: Number of records to skip
        """
        limit = min(limit, self.MAX_LIMIT)

        cursor = self._collection.find({"userId": to_object_id(user_id, "userId")})
        cursor = cursor.sort("createdAt", -1)
        cursor = cursor.skip(offset)
        cursor = cursor.limit(limit)

        return await cursor.to_list(length=limit)

    async def count_entries(self, user_id: str) -> int:
        """Total number of mood entries for a user."""
        return await self._collection.count_documents({"userId": to_object_id(user_id, "userId")})

    async def update_entry(
        self,
        entry_id: str,
        user_id: str,
        changes: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Update fields of one of the user's mood entries.

        Unknown fields are ignored. Returns the updated document.
        """
        updates = {k: v for k, v in changes.items() if k in self.UPDATABLE_FIELDS}
        self._validate(updates)

        if "score" in updates:
            updates["score"] = float(updates["score"])
        if "factors" in updates:
            updates["factors"] = clean_labels(updates["factors"])
        if isinstance(updates.get("notes"), str):
            updates["notes"] = updates["notes"].strip()

        updates["updatedAt"] = datetime.now(timezone.utc)

        entry = await self._collection.find_one_and_update(
            {
                "_id": to_object_id(entry_id, "entryId"),
                "userId": to_object_id(user_id, "userId"),
            },
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        if not entry:
            raise NotFoundException(message="Mood entry not found", code="MOOD_ENTRY_NOT_FOUND")

        logger.info(f"Mood entry {entry_id} updated for user {user_id}")
        return entry

    async def delete_entry(self, entry_id: str, user_id: str) -> None:
        """Delete one of the user's mood entries."""
        result = await self._collection.delete_one({
            "_id": to_object_id(entry_id, "entryId"),
            "userId": to_object_id(user_id, "userId"),
        })
        if result.deleted_count == 0:
            raise NotFoundException(message="Mood entry not found", code="MOOD_ENTRY_NOT_FOUND")

        logger.info(f"Mood entry {entry_id} deleted for user {user_id}")

    async def get_entries_for_period(self, user_id: str, days: int) -> List[Dict[str, Any]]:
        """
        Get all mood entries within the last N days, newest first.
        Used by CheckInAnalytics.
        """
        since = datetime.now(timezone.utc) - timedelta(days=days)

        cursor = self._collection.find({
            "userId": to_object_id(user_id, "userId"),
            "createdAt": {"$gte": since},
        })
        cursor = cursor.sort("createdAt", -1)

        return await cursor.to_list(length=None)

    def _validate(self, fields: Dict[str, Any]) -> None:
        checks = []
        if "score" in fields:
            checks.append(CheckInValidator.validate_score("mood", fields["score"]))
        if "factors" in fields:
            checks.append(CheckInValidator.validate_labels("factors", fields["factors"]))
        if "notes" in fields:
            checks.append(
                CheckInValidator.validate_text("notes", fields["notes"], self._max_notes_length)
            )

        for is_valid, error in checks:
            if not is_valid:
                raise ValidationException(message=error, code="VALIDATION_ERROR")
