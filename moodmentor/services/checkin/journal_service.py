"""
Journal entry CRUD service.

Journal entries are private by default; mentors only ever see entries a
patient has explicitly shared.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from common.utils.exceptions import NotFoundException, ValidationException
from common.utils.ids import to_object_id
from moodmentor.services.checkin.validators import CheckInValidator, clean_labels

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200


class JournalService:
    """Handles journal entry storage and retrieval."""

    MAX_LIMIT = 100
    UPDATABLE_FIELDS = ("title", "content", "moodId", "tags", "private")

    def __init__(self, db: AsyncIOMotorDatabase, max_content_length: int = 10000):
        self._db = db
        self._collection = db["journalEntries"]
        self._mood_collection = db["moodEntries"]
        self._max_content_length = max_content_length

    async def create_entry(
        self,
        user_id: str,
        content: str,
        title: Optional[str] = None,
        mood_id: Optional[str] = None,
        tags: Optional[List[str]] = None,
        private: bool = True,
    ) -> Dict[str, Any]:
        """
        Create a journal entry.

        Raises:
            ValidationException: Empty content or fields too long
            NotFoundException: mood_id is not one of the user's mood entries
        """
        self._validate({"content": content, "title": title, "tags": tags})
        mood_oid = await self._own_mood_entry(mood_id, user_id) if mood_id else None

        now = datetime.now(timezone.utc)
        entry = {
            "userId": to_object_id(user_id, "userId"),
            "title": title.strip() if title else "",
            "content": content.strip(),
            "moodId": mood_oid,
            "tags": clean_labels(tags),
            "private": bool(private),
            "createdAt": now,
            "updatedAt": now,
        }

        result = await self._collection.insert_one(entry)
        entry["_id"] = result.inserted_id

        logger.info(f"Journal entry created for user {user_id}")
        return entry

    async def get_entry(self, entry_id: str, user_id: str) -> Dict[str, Any]:
        """Get one of the user's journal entries."""
        entry = await self._collection.find_one({
            "_id": to_object_id(entry_id, "entryId"),
            "userId": to_object_id(user_id, "userId"),
        })
        if not entry:
            raise NotFoundException(message="Journal entry not found", code="JOURNAL_ENTRY_NOT_FOUND")
        return entry

    async def list_entries(
        self,
        user_id: str,
        include_private: bool = True,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        Get a page of journal entries, newest first.

        Args:
            user_id: Author's user ID
            include_private: False when a mentor is reading
            limit: Max records (capped at MAX_LIMIT)
            offset: Records to skip
        """
        limit = min(limit, self.MAX_LIMIT)

        cursor = self._collection.find(self._query(user_id, include_private))
        cursor = cursor.sort("createdAt", -1).skip(offset).limit(limit)

        return await cursor.to_list(length=limit)

    async def count_entries(self, user_id: str, include_private: bool = True) -> int:
        return await self._collection.count_documents(self._query(user_id, include_private))

    async def update_entry(
        self,
        entry_id: str,
        user_id: str,
        changes: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Update fields of one of the user's journal entries."""
        updates = {k: v for k, v in changes.items() if k in self.UPDATABLE_FIELDS}
        self._validate(updates)

        if isinstance(updates.get("content"), str):
            updates["content"] = updates["content"].strip()
        if isinstance(updates.get("title"), str):
            updates["title"] = updates["title"].strip()
        if "tags" in updates:
            updates["tags"] = clean_labels(updates["tags"])
        if "moodId" in updates:
            mood_id = updates["moodId"]
            updates["moodId"] = await self._own_mood_entry(mood_id, user_id) if mood_id else None
        if "private" in updates:
            updates["private"] = bool(updates["private"])

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
            raise NotFoundException(message="Journal entry not found", code="JOURNAL_ENTRY_NOT_FOUND")

        logger.info(f"Journal entry {entry_id} updated for user {user_id}")
        return entry

    async def delete_entry(self, entry_id: str, user_id: str) -> None:
        result = await self._collection.delete_one({
            "_id": to_object_id(entry_id, "entryId"),
            "userId": to_object_id(user_id, "userId"),
        })
        if result.deleted_count == 0:
            raise NotFoundException(message="Journal entry not found", code="JOURNAL_ENTRY_NOT_FOUND")

        logger.info(f"Journal entry {entry_id} deleted for user {user_id}")

    async def _own_mood_entry(self, mood_id: str, user_id: str) -> ObjectId:
        mood_oid = to_object_id(mood_id, "moodId")
        exists = await self._mood_collection.find_one(
            {"_id": mood_oid, "userId": to_object_id(user_id, "userId")},
            {"_id": 1},
        )
        if not exists:
            raise NotFoundException(message="Mood entry not found", code="MOOD_ENTRY_NOT_FOUND")
        return mood_oid

    def _query(self, user_id: str, include_private: bool) -> Dict[str, Any]:
        query: Dict[str, Any] = {"userId": to_object_id(user_id, "userId")}
        if not include_private:
            query["private"] = False
        return query

    def _validate(self, fields: Dict[str, Any]) -> None:
        checks = []
        if "content" in fields:
            checks.append(CheckInValidator.validate_text(
                "content", fields["content"], self._max_content_length, required=True
            ))
        if "title" in fields:
            checks.append(CheckInValidator.validate_text("title", fields["title"], MAX_TITLE_LENGTH))
        if "tags" in fields:
            checks.append(CheckInValidator.validate_labels("tags", fields["tags"]))

        for is_valid, error in checks:
            if not is_valid:
                raise ValidationException(message=error, code="VALIDATION_ERROR")
