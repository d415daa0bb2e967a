"""
Notification service for in-app notifications.

Handles creation, retrieval, and management of user notifications.
Delivery is in-app only: notifications are stored and read back.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.utils.exceptions import NotFoundException, ValidationException
from common.utils.ids import to_object_id

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Handles in-app notification management.

    Notification types:
    - booking_created: A patient booked a session with the mentor
    - booking_updated: A booking was confirmed, rescheduled, cancelled or completed
    - message_received: A new message arrived in a conversation
    - review_received: A patient reviewed a completed session
    - sync_completed: Offline assessments were saved
    """

    NOTIFICATION_TYPES = [
        "booking_created",
        "booking_updated",
        "message_received",
        "review_received",
        "sync_completed",
    ]

    MAX_LIMIT = 100

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize NotificationService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._collection = db["notifications"]

    async def create_notification(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Create a new notification for a user.

        Args:
            user_id: Target user ID
            notification_type: One of NOTIFICATION_TYPES
            title: Short notification title
            message: Full notification message
            metadata: Optional metadata (bookingId, conversationId, etc.)

        Returns:
            Created notification document
        """
        if notification_type not in self.NOTIFICATION_TYPES:
            raise ValidationException(
                message=f"Unknown notification type: {notification_type}",
                code="INVALID_NOTIFICATION_TYPE"
            )

        now = datetime.now(timezone.utc)

        notification_doc = {
            "userId": to_object_id(user_id, "userId"),
            "type": notification_type,
            "title": title,
            "message": message,
            "metadata": metadata or {},
            "read": False,
            "readAt": None,
            "createdAt": now,
            "updatedAt": now
        }

        result = await self._collection.insert_one(notification_doc)
        notification_doc["_id"] = result.inserted_id

        logger.info(f"Created notification for user {user_id}: {notification_type}")
        return notification_doc

    async def get_notifications(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0,
        unread_only: bool = False
    ) -> Dict[str, Any]:
        """
        Get notifications for a user with pagination.

        Args:
            user_id: User ID
            limit: Maximum number of notifications to return
            offset: Number of notifications to skip
            unread_only: If True, only return unread notifications

        Returns:
            Dict with notifications list, total count, and hasMore flag
        """
        limit = min(limit, self.MAX_LIMIT)

        query = {"userId": to_object_id(user_id, "userId")}
        if unread_only:
            query["read"] = False

        total = await self._collection.count_documents(query)

        cursor = self._collection.find(query).sort(
            "createdAt", -1
        ).skip(offset).limit(limit)

        notifications = await cursor.to_list(length=limit)

        return {
            "notifications": [self._format(n) for n in notifications],
            "total": total,
            "hasMore": (offset + len(notifications)) < total
        }

    async def get_unread_count(self, user_id: str) -> int:
        """Number of unread notifications for a user."""
        return await self._collection.count_documents({
            "userId": to_object_id(user_id, "userId"),
            "read": False
        })

    async def mark_as_read(self, notification_id: str, user_id: str) -> Dict[str, Any]:
        """
        Mark a notification as read.

        Raises:
            NotFoundException: If notification not found or doesn't belong to user
        """
        notification = await self._collection.find_one({
            "_id": to_object_id(notification_id, "notificationId"),
            "userId": to_object_id(user_id, "userId")
        })

        if not notification:
            raise NotFoundException(
                message="Notification not found",
                code="NOTIFICATION_NOT_FOUND"
            )

        if notification["read"]:
            return self._format(notification)

        now = datetime.now(timezone.utc)
        await self._collection.update_one(
            {"_id": notification["_id"]},
            {"$set": {"read": True, "readAt": now, "updatedAt": now}}
        )

        notification["read"] = True
        notification["readAt"] = now
        notification["updatedAt"] = now

        logger.info(f"Notification {notification_id} marked as read for user {user_id}")
        return self._format(notification)

    async def mark_all_as_read(self, user_id: str) -> int:
        """
        Mark all unread notifications as read for a user.

        Returns:
            Number of notifications marked as read
        """
        now = datetime.now(timezone.utc)
        result = await self._collection.update_many(
            {"userId": to_object_id(user_id, "userId"), "read": False},
            {"$set": {"read": True, "readAt": now, "updatedAt": now}}
        )

        logger.info(f"Marked {result.modified_count} notifications as read for user {user_id}")
        return result.modified_count

    async def delete_notification(self, notification_id: str, user_id: str) -> None:
        result = await self._collection.delete_one({
            "_id": to_object_id(notification_id, "notificationId"),
            "userId": to_object_id(user_id, "userId")
        })
        if result.deleted_count == 0:
            raise NotFoundException(
                message="Notification not found",
                code="NOTIFICATION_NOT_FOUND"
            )

        logger.info(f"Notification {notification_id} deleted for user {user_id}")

    # ─────────────────────────────────────────────────────────────────
    # Typed helpers
    # ─────────────────────────────────────────────────────────────────

    async def create_booking_created_notification(
        self,
        mentor_id: str,
        patient_name: str,
        booking_id: str,
        date: str,
        time: str
    ) -> Dict[str, Any]:
        """Tell a mentor that a patient booked a session."""
        return await self.create_notification(
            user_id=mentor_id,
            notification_type="booking_created",
            title="New Session Request",
            message=f"{patient_name} requested a session on {date} at {time}.",
            metadata={"bookingId": booking_id, "date": date, "time": time}
        )

    async def create_booking_updated_notification(
        self,
        user_id: str,
        actor_name: str,
        booking_id: str,
        status: str,
        date: str,
        time: str
    ) -> Dict[str, Any]:
        """Tell the other party that a booking changed."""
        return await self.create_notification(
            user_id=user_id,
            notification_type="booking_updated",
            title=f"Session {status.title()}",
            message=f"{actor_name} updated your session on {date} at {time}. It is now {status}.",
            metadata={"bookingId": booking_id, "status": status, "date": date, "time": time}
        )

    async def create_message_notification(
        self,
        recipient_id: str,
        sender_name: str,
        conversation_id: str,
        preview: str
    ) -> Dict[str, Any]:
        if len(preview) > 80:
            preview = preview[:77] + "..."

        return await self.create_notification(
            user_id=recipient_id,
            notification_type="message_received",
            title=f"New message from {sender_name}",
            message=preview,
            metadata={"conversationId": conversation_id}
        )

    async def create_review_notification(
        self,
        mentor_id: str,
        rating: int,
        booking_id: str,
        review_id: str
    ) -> Dict[str, Any]:
        return await self.create_notification(
            user_id=mentor_id,
            notification_type="review_received",
            title="New Review",
            message=f"A patient rated your session {rating} out of 5.",
            metadata={"bookingId": booking_id, "reviewId": review_id, "rating": rating}
        )

    async def create_sync_completed_notification(self, user_id: str, count: int) -> Dict[str, Any]:
        noun = "assessment" if count == 1 else "assessments"
        return await self.create_notification(
            user_id=user_id,
            notification_type="sync_completed",
            title="Offline Data Synced",
            message=f"{count} offline stress {noun} saved.",
            metadata={"count": count}
        )

    def _format(self, notif: Dict[str, Any]) -> Dict[str, Any]:
        """Format notification document for API response."""
        return {
            "id": str(notif["_id"]),
            "type": notif["type"],
            "title": notif["title"],
            "message": notif["message"],
            "metadata": notif.get("metadata", {}),
            "read": notif["read"],
            "readAt": notif["readAt"].isoformat() if notif.get("readAt") else None,
            "createdAt": notif["createdAt"].isoformat() if notif.get("createdAt") else None
        }
