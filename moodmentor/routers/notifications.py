"""
Notification API endpoints.

Handles in-app notification retrieval, management and preferences.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from common.utils import success_response

from moodmentor.dependencies import require_auth, get_notification_service, get_preferences_service
from moodmentor.services.notifications import NotificationService, PreferencesService
from moodmentor.schemas.notifications import NotificationPreferencesRequest


router = APIRouter(prefix="/notifications", tags=["Notifications"])


# =============================================================================
# Notification Endpoints
# =============================================================================

@router.get("")
async def get_notifications(
    user: Annotated[dict, Depends(require_auth)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    unread_only: bool = Query(default=False)
):
    """
    Get notifications for the current user.

    Args:
        limit: Maximum number of notifications (1-100, default 20)
        offset: Number to skip for pagination
        unread_only: If true, only return unread notifications

    Returns:
        List of notifications with pagination info
    """
    result = await service.get_notifications(
        user_id=str(user["_id"]),
        limit=limit,
        offset=offset,
        unread_only=unread_only
    )

    return success_response(result)


@router.get("/count")
async def get_unread_count(
    user: Annotated[dict, Depends(require_auth)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Get count of unread notifications."""
    count = await service.get_unread_count(str(user["_id"]))

    return success_response({"unread": count})


@router.post("/{notification_id}/read")
async def mark_as_read(
    notification_id: str,
    user: Annotated[dict, Depends(require_auth)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Mark a notification as read."""
    notification = await service.mark_as_read(notification_id, str(user["_id"]))

    return success_response(notification, "Notification marked as read")


@router.post("/read-all")
async def mark_all_as_read(
    user: Annotated[dict, Depends(require_auth)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """
    Mark all notifications as read.

    Returns:
        Number of notifications marked as read
    """
    count = await service.mark_all_as_read(str(user["_id"]))

    return success_response({"count": count}, f"Marked {count} notifications as read")


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    user: Annotated[dict, Depends(require_auth)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    await service.delete_notification(notification_id, str(user["_id"]))

    return success_response(message="Notification deleted")


# =============================================================================
# Preferences
# =============================================================================

@router.get("/preferences")
async def get_preferences(
    user: Annotated[dict, Depends(require_auth)],
    service: Annotated[PreferencesService, Depends(get_preferences_service)],
):
    """Notification preferences (defaults if never saved)."""
    preferences = await service.get_preferences(str(user["_id"]))

    return success_response(preferences)


@router.put("/preferences")
async def save_preferences(
    body: NotificationPreferencesRequest,
    user: Annotated[dict, Depends(require_auth)],
    service: Annotated[PreferencesService, Depends(get_preferences_service)],
):
    preferences = await service.save_preferences(str(user["_id"]), body.model_dump())

    return success_response(preferences, "Preferences updated successfully")
