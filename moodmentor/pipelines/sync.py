"""
Offline sync pipeline functions.
"""

import logging
from typing import List, Dict, Any

from moodmentor.pipelines.formatting import iso
from moodmentor.services.notifications.notification_service import NotificationService
from moodmentor.services.sync.sync_service import SyncService

logger = logging.getLogger(__name__)


async def upload_offline_assessments_pipeline(
    sync_service: SyncService,
    notification_service: NotificationService,
    user_id: str,
    assessments: List[Dict[str, Any]],
    sync_now: bool = True,
) -> Dict[str, Any]:
    """
    Queue assessments recorded offline and, by default, sync them right away.

    Returns:
        dict with queued count plus the sync result (or queue status
        when sync_now is False)
    """
    ids = await sync_service.enqueue_assessments(user_id, assessments)

    if not sync_now:
        status = await sync_service.get_status(user_id)
        return {"queued": len(ids), **status}

    result = await sync_pending_pipeline(sync_service, notification_service, user_id)
    return {"queued": len(ids), **result}


async def sync_pending_pipeline(
    sync_service: SyncService,
    notification_service: NotificationService,
    user_id: str,
) -> Dict[str, Any]:
    """Sync whatever is queued and notify the user when anything was saved."""
    result = await sync_service.sync_pending(user_id)

    if result["count"] > 0:
        await notification_service.create_sync_completed_notification(user_id, result["count"])

    return result


async def list_offline_items_pipeline(sync_service: SyncService, user_id: str) -> List[Dict[str, Any]]:
    """Queued items with their failure state, oldest first."""
    items = await sync_service.list_items(user_id)
    return [_format_item(item) for item in items]


def _format_item(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": item["id"],
        "score": item.get("score"),
        "symptoms": item.get("symptoms") or [],
        "triggers": item.get("triggers") or [],
        "notes": item.get("notes"),
        "recordedAt": iso(item.get("recordedAt")),
        "attempts": item.get("attempts", 0),
        "lastError": item.get("lastError"),
        "rejected": item.get("rejected", False),
    }
