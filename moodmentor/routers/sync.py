"""
FastAPI router for offline sync.

Clients upload stress assessments they recorded while offline.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response
from moodmentor.dependencies import require_auth, get_sync_service, get_notification_service
from moodmentor.services.notifications.notification_service import NotificationService
from moodmentor.services.sync.sync_service import SyncService
from moodmentor.schemas.sync import OfflineAssessmentsRequest
from moodmentor.pipelines import sync as pipelines

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post("/stress-assessments")
async def upload_offline_assessments(
    body: OfflineAssessmentsRequest,
    user: Annotated[dict, Depends(require_auth)],
    sync_service: Annotated[SyncService, Depends(get_sync_service)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """
    Queue offline assessments and (unless syncNow is false) save them.

    Items that fail to save stay queued for the next sync.
    """
    result = await pipelines.upload_offline_assessments_pipeline(
        sync_service=sync_service,
        notification_service=notification_service,
        user_id=str(user["_id"]),
        assessments=[a.model_dump() for a in body.assessments],
        sync_now=body.syncNow,
    )
    return success_response(result)


@router.post("/run")
async def sync_pending(
    user: Annotated[dict, Depends(require_auth)],
    sync_service: Annotated[SyncService, Depends(get_sync_service)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Retry everything still queued."""
    result = await pipelines.sync_pending_pipeline(sync_service, notification_service, str(user["_id"]))
    return success_response(result)


@router.get("/status")
async def get_sync_status(
    user: Annotated[dict, Depends(require_auth)],
    sync_service: Annotated[SyncService, Depends(get_sync_service)],
):
    status = await sync_service.get_status(str(user["_id"]))
    return success_response(status)


@router.get("/pending")
async def list_offline_items(
    user: Annotated[dict, Depends(require_auth)],
    sync_service: Annotated[SyncService, Depends(get_sync_service)],
):
    """Queued items, including rejected ones with their last error."""
    items = await pipelines.list_offline_items_pipeline(sync_service, str(user["_id"]))
    return success_response(items)


@router.delete("/pending/{item_id}")
async def discard_offline_item(
    item_id: str,
    user: Annotated[dict, Depends(require_auth)],
    sync_service: Annotated[SyncService, Depends(get_sync_service)],
):
    await sync_service.discard_item(str(user["_id"]), item_id)
    return success_response(message="Offline item discarded")
