"""
Review service for completed sessions.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from common.utils.exceptions import ConflictException, NotFoundException, ValidationException
from common.utils.ids import to_object_id
from moodmentor.services.bookings.booking_service import STATUS_COMPLETED

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5
MAX_COMMENT_LENGTH = 2000


class ReviewService:
    """
    Patients review a mentor once per completed booking.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self._db = db
        self._collection = db["reviews"]
        self._bookings_collection = db["bookings"]

    async def ensure_indexes(self) -> None:
        await self._collection.create_index([("bookingId", ASCENDING)], unique=True)
        await self._collection.create_index([("mentorId", ASCENDING), ("createdAt", ASCENDING)])

    async def create_review(
        self,
        booking_id: str,
        user_id: str,
        rating: int,
        comment: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Review the mentor of a completed booking.

        Raises:
            ValidationException: Rating out of range or comment too long
            NotFoundException: Booking missing or not the user's
            ValidationException: Booking not completed yet (REVIEW_NOT_ALLOWED)
            ConflictException: Booking already reviewed
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationException(
                message=f"Rating must be a whole number between {MIN_RATING} and {MAX_RATING}",
                code="VALIDATION_ERROR",
            )
        if comment is not None and len(comment.strip()) > MAX_COMMENT_LENGTH:
            raise ValidationException(
                message=f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters",
                code="VALIDATION_ERROR",
            )

        booking = await self._bookings_collection.find_one({
            "_id": to_object_id(booking_id, "bookingId"),
            "userId": to_object_id(user_id, "userId"),
        })
        if not booking:
            raise NotFoundException(message="Booking not found", code="BOOKING_NOT_FOUND")

        if booking.get("status") != STATUS_COMPLETED:
            raise ValidationException(
                message="Only completed sessions can be reviewed",
                code="REVIEW_NOT_ALLOWED",
            )

        existing = await self._collection.find_one({"bookingId": booking["_id"]})
        if existing:
            raise ConflictException(message="This session has already been reviewed", code="REVIEW_EXISTS")

        now = datetime.now(timezone.utc)
        review = {
            "bookingId": booking["_id"],
            "userId": booking["userId"],
            "mentorId": booking["mentorId"],
            "rating": rating,
            "comment": comment.strip() if comment else "",
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            result = await self._collection.insert_one(review)
        except DuplicateKeyError:
            raise ConflictException(message="This session has already been reviewed", code="REVIEW_EXISTS")

        review["_id"] = result.inserted_id

        logger.info(f"Review created for booking {booking_id} by user {user_id}")
        return review

    async def list_reviews(self, mentor_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        """Reviews for a mentor, newest first."""
        cursor = self._collection.find({"mentorId": to_object_id(mentor_id, "mentorId")})
        cursor = cursor.sort("createdAt", -1).limit(limit)
        return await cursor.to_list(length=limit)

    async def get_rating_summaries(self, mentor_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """
        Average rating and review count per mentor.

        Returns:
            {mentorId: {"average": float, "count": int}}; mentors without
            reviews are absent
        """
        if not mentor_ids:
            return {}

        pipeline = [
            {"$match": {"mentorId": {"$in": [to_object_id(m, "mentorId") for m in mentor_ids]}}},
            {"$group": {"_id": "$mentorId", "average": {"$avg": "$rating"}, "count": {"$sum": 1}}},
        ]
        cursor = self._collection.aggregate(pipeline)
        results = await cursor.to_list(length=None)

        return {
            str(r["_id"]): {"average": r["average"] or 0, "count": r["count"]}
            for r in results
        }

    async def get_rating_summary(self, mentor_id: str) -> Dict[str, Any]:
        summaries = await self.get_rating_summaries([mentor_id])
        return summaries.get(mentor_id, {"average": 0, "count": 0})
