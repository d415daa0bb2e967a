"""
Offline assessment sync service.

Moves queued offline stress assessments into the stressAssessments
collection. Each item is saved independently: one bad item does not
stop the batch. Items the stress service refuses, or that keep failing,
are set aside as rejected so they no longer block newer items; the client
can list and discard them.
"""

import logging
from typing import Optional, List, Dict, Any

from pymongo.errors import PyMongoError

from common.utils.exceptions import APIException, NotFoundException
from moodmentor.services.checkin.stress_service import StressService
from moodmentor.services.sync.offline_queue import OfflineQueue

logger = logging.getLogger(__name__)


class SyncService:
    """
    Saves offline stress assessments through StressService.
    """

    def __init__(
        self,
        queue: OfflineQueue,
        stress_service: StressService,
        max_batch: int = 100,
        max_attempts: int = 5,
    ):
        """
        Initialize SyncService.

        Args:
            queue: Where offline items wait
            stress_service: Used to save each item
            max_batch: Most items saved per sync call
            max_attempts: Failed saves before an item is rejected
        """
        self._queue = queue
        self._stress_service = stress_service
        self._max_batch = max_batch
        self._max_attempts = max_attempts

    async def enqueue_assessments(self, user_id: str, items: List[Dict[str, Any]]) -> List[str]:
        """Queue offline assessments for a user. Returns their queue IDs."""
        ids = [await self._queue.enqueue(user_id, item) for item in items]
        logger.info(f"Queued {len(ids)} offline assessments for user {user_id}")
        return ids

    async def sync_pending(self, user_id: str) -> Dict[str, Any]:
        """
        Save every pending assessment for a user.

        Returns:
            dict with keys:
                - success: True if nothing was pending or at least one item synced
                - count: items saved
                - failed: items whose save failed in this run
                - remaining: items still queued afterwards
        """
        items = await self._queue.pending(user_id, limit=self._max_batch)

        if not items:
            remaining = await self._queue.count(user_id)
            return {"success": True, "count": 0, "failed": 0, "remaining": remaining}

        logger.info(f"Attempting to sync {len(items)} offline assessments for user {user_id}")

        synced: List[str] = []
        failed = 0

        for item in items:
            try:
                await self._stress_service.create_assessment(
                    user_id=user_id,
                    score=item.get("score"),
                    symptoms=item.get("symptoms"),
                    triggers=item.get("triggers"),
                    notes=item.get("notes"),
                    responses=item.get("responses"),
                    recorded_at=item.get("recordedAt"),
                )
                synced.append(item["id"])
            except (APIException, ValueError, TypeError) as e:
                # Invalid content never saves on retry
                failed += 1
                logger.warning(f"Rejected offline assessment {item['id']} for user {user_id}: {e}")
                await self._queue.mark_failed(user_id, item["id"], _describe(e), reject=True)
            except PyMongoError as e:
                failed += 1
                reject = item.get("attempts", 0) + 1 >= self._max_attempts
                logger.warning(f"Failed to sync offline assessment {item['id']} for user {user_id}: {e}")
                await self._queue.mark_failed(user_id, item["id"], _describe(e), reject=reject)

        if synced:
            await self._queue.remove(user_id, synced)

        remaining = await self._queue.count(user_id)

        logger.info(f"Synced {len(synced)} offline assessments for user {user_id}, {remaining} still pending")
        return {
            "success": len(synced) > 0,
            "count": len(synced),
            "failed": failed,
            "remaining": remaining,
        }

    async def get_status(self, user_id: str) -> Dict[str, Any]:
        pending = await self._queue.count(user_id)
        return {"pending": pending, "hasPending": pending > 0}

    async def list_items(self, user_id: str) -> List[Dict[str, Any]]:
        """Everything still stored for a user, rejected items included."""
        return await self._queue.pending(user_id, include_rejected=True)

    async def discard_item(self, user_id: str, item_id: str) -> None:
        """
        Drop one queued item without saving it.

        Raises:
            NotFoundException: No such item for this user
        """
        removed = await self._queue.remove(user_id, [item_id])
        if not removed:
            raise NotFoundException(message="Offline item not found", code="OFFLINE_ITEM_NOT_FOUND")

        logger.info(f"Discarded offline assessment {item_id} for user {user_id}")


def _describe(error: Exception) -> str:
    if isinstance(error, APIException):
        return error.message
    return str(error) or type(error).__name__
