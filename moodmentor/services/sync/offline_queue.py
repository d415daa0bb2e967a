"""
Offline assessment queues.

Clients that were offline upload the stress assessments they recorded
locally; the queue holds them until SyncService saves them for real.

Example:
    queue = create_offline_queue("mongo", db=mongo.db)
    item_id = await queue.enqueue(user_id, {"score": 6, "recordedAt": taken_at})
"""

import logging
from abc import ABC, abstractmethod
from copy import deepcopy
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from common.utils.ids import to_object_id

logger = logging.getLogger(__name__)


class OfflineQueue(ABC):
    """
    Abstract per-user queue of pending offline items.

    Items are plain dicts; each gets an ``id`` (str) when enqueued and
    ``attempts``/``lastError`` once a sync has failed on it. Rejected items
    stay stored until the client discards them but are no longer retried.
    """

    @abstractmethod
    async def enqueue(self, user_id: str, item: Dict[str, Any]) -> str:
        """Store an item and return its ID."""
        pass

    @abstractmethod
    async def pending(
        self,
        user_id: str,
        limit: Optional[int] = None,
        include_rejected: bool = False,
    ) -> List[Dict[str, Any]]:
        """Items waiting to be synced, oldest first."""
        pass

    @abstractmethod
    async def remove(self, user_id: str, item_ids: List[str]) -> int:
        """Drop synced items. Returns how many were removed."""
        pass

    @abstractmethod
    async def count(self, user_id: str) -> int:
        pass

    @abstractmethod
    async def mark_failed(self, user_id: str, item_id: str, error: str, reject: bool = False) -> None:
        """Record a failed sync attempt. With reject, the item is not retried."""
        pass


class MongoOfflineQueue(OfflineQueue):
    """Queue stored in the ``offlineAssessments`` collection."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self._db = db
        self._collection = db["offlineAssessments"]

    async def ensure_indexes(self) -> None:
        await self._collection.create_index([("userId", ASCENDING), ("queuedAt", ASCENDING)])

    async def enqueue(self, user_id: str, item: Dict[str, Any]) -> str:
        doc = {
            "userId": to_object_id(user_id, "userId"),
            "item": item,
            "attempts": 0,
            "lastError": None,
            "rejected": False,
            "queuedAt": datetime.now(timezone.utc),
        }
        result = await self._collection.insert_one(doc)
        return str(result.inserted_id)

    async def pending(
        self,
        user_id: str,
        limit: Optional[int] = None,
        include_rejected: bool = False,
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"userId": to_object_id(user_id, "userId")}
        if not include_rejected:
            query["rejected"] = {"$ne": True}
        cursor = self._collection.find(query).sort("queuedAt", 1)
        if limit:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(length=limit)

        return [
            {
                **doc.get("item", {}),
                "id": str(doc["_id"]),
                "attempts": doc.get("attempts", 0),
                "lastError": doc.get("lastError"),
                "rejected": doc.get("rejected", False),
            }
            for doc in docs
        ]

    async def remove(self, user_id: str, item_ids: List[str]) -> int:
        if not item_ids:
            return 0
        result = await self._collection.delete_many({
            "userId": to_object_id(user_id, "userId"),
            "_id": {"$in": [to_object_id(i, "itemId") for i in item_ids]},
        })
        return result.deleted_count

    async def count(self, user_id: str) -> int:
        return await self._collection.count_documents({"userId": to_object_id(user_id, "userId")})

    async def mark_failed(self, user_id: str, item_id: str, error: str, reject: bool = False) -> None:
        await self._collection.update_one(
            {"_id": to_object_id(item_id, "itemId"), "userId": to_object_id(user_id, "userId")},
            {"$inc": {"attempts": 1}, "$set": {"lastError": error, "rejected": reject}},
        )


class InMemoryOfflineQueue(OfflineQueue):
    """
    Process-local queue.

    Useful for tests and single-process development; contents are lost
    on restart.
    """

    def __init__(self):
        self._items: Dict[str, List[Dict[str, Any]]] = {}

    async def enqueue(self, user_id: str, item: Dict[str, Any]) -> str:
        item_id = str(ObjectId())
        entry = {**deepcopy(item), "id": item_id, "attempts": 0, "lastError": None, "rejected": False}
        self._items.setdefault(user_id, []).append(entry)
        return item_id

    async def pending(
        self,
        user_id: str,
        limit: Optional[int] = None,
        include_rejected: bool = False,
    ) -> List[Dict[str, Any]]:
        items = self._items.get(user_id, [])
        if not include_rejected:
            items = [i for i in items if not i["rejected"]]
        if limit:
            items = items[:limit]
        return deepcopy(items)

    async def remove(self, user_id: str, item_ids: List[str]) -> int:
        items = self._items.get(user_id, [])
        kept = [i for i in items if i["id"] not in set(item_ids)]
        self._items[user_id] = kept
        return len(items) - len(kept)

    async def count(self, user_id: str) -> int:
        return len(self._items.get(user_id, []))

    async def mark_failed(self, user_id: str, item_id: str, error: str, reject: bool = False) -> None:
        for item in self._items.get(user_id, []):
            if item["id"] == item_id:
                item["attempts"] += 1
                item["lastError"] = error
                item["rejected"] = reject


def create_offline_queue(backend: str, db: Optional[AsyncIOMotorDatabase] = None) -> OfflineQueue:
    """
    Build the queue named by OFFLINE_QUEUE_BACKEND.

    Raises:
        ValueError: Unknown backend, or "mongo" without a database
    """
    if backend == "memory":
        logger.warning("Using in-memory offline queue; queued items are lost on restart")
        return InMemoryOfflineQueue()
    if backend == "mongo":
        if db is None:
            raise ValueError("The mongo offline queue needs a database")
        return MongoOfflineQueue(db)
    raise ValueError(f"Unknown offline queue backend: {backend}")
