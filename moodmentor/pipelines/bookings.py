"""
Booking pipeline functions.

Stateless orchestration for bookings, reviews and mentor dashboards.
Status changes notify the other party in-app.
"""

import logging
from datetime import datetime
from typing import Optional, List, Dict, Any

from common.utils.exceptions import ForbiddenException, NotFoundException
from moodmentor.pipelines.formatting import iso
from moodmentor.services.bookings.booking_service import BookingService
from moodmentor.services.bookings.mentor_service import MentorService
from moodmentor.services.bookings.review_service import ReviewService
from moodmentor.services.notifications.notification_service import NotificationService
from moodmentor.services.user.user_service import UserService

logger = logging.getLogger(__name__)


async def get_available_slots_pipeline(
    booking_service: BookingService,
    user_service: UserService,
    mentor_id: str,
    date: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    await _get_mentor(user_service, mentor_id)
    slots = await booking_service.get_available_slots(mentor_id, date, now=now)
    return {"mentorId": mentor_id, "date": date, "slots": slots}


async def create_booking_pipeline(
    booking_service: BookingService,
    user_service: UserService,
    notification_service: NotificationService,
    user: Dict[str, Any],
    mentor_id: str,
    date: str,
    time: str,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Book a session and notify the mentor.

    Raises:
        NotFoundException: Mentor does not exist
        ConflictException: Slot already taken
    """
    await _get_mentor(user_service, mentor_id)
    user_id = str(user["_id"])

    booking = await booking_service.create_booking(
        user_id=user_id,
        mentor_id=mentor_id,
        date=date,
        time=time,
        notes=notes,
    )

    await notification_service.create_booking_created_notification(
        mentor_id=mentor_id,
        patient_name=UserService.display_name(user),
        booking_id=str(booking["_id"]),
        date=date,
        time=time,
    )

    return format_booking(booking)


async def list_bookings_pipeline(
    booking_service: BookingService,
    user_service: UserService,
    user: Dict[str, Any],
    status: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    The user's bookings, each with the other party's name.
    """
    as_mentor = UserService.is_mentor(user)
    bookings = await booking_service.list_bookings(str(user["_id"]), as_mentor=as_mentor, status=status)

    other_field = "userId" if as_mentor else "mentorId"
    others = await user_service.get_users([str(b[other_field]) for b in bookings])

    result = []
    for booking in bookings:
        formatted = format_booking(booking)
        formatted["withName"] = UserService.display_name(others.get(str(booking[other_field])))
        result.append(formatted)
    return result


async def update_booking_pipeline(
    booking_service: BookingService,
    notification_service: NotificationService,
    user: Dict[str, Any],
    booking_id: str,
    changes: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Apply changes to a booking and notify the other party if it changed.
    """
    user_id = str(user["_id"])
    before = await booking_service.get_booking(booking_id, user_id)
    booking = await booking_service.update_booking(booking_id, user_id, changes)

    if booking.get("updatedAt") != before.get("updatedAt"):
        other_id = str(booking["userId"]) if str(booking["mentorId"]) == user_id else str(booking["mentorId"])
        await notification_service.create_booking_updated_notification(
            user_id=other_id,
            actor_name=UserService.display_name(user),
            booking_id=booking_id,
            status=booking["status"],
            date=booking["date"],
            time=booking["time"],
        )

    return format_booking(booking)


async def cancel_booking_pipeline(
    booking_service: BookingService,
    notification_service: NotificationService,
    user: Dict[str, Any],
    booking_id: str,
) -> Dict[str, Any]:
    return await update_booking_pipeline(
        booking_service,
        notification_service,
        user,
        booking_id,
        {"status": "cancelled"},
    )


# =============================================================================
# Reviews
# =============================================================================

async def submit_review_pipeline(
    review_service: ReviewService,
    notification_service: NotificationService,
    user: Dict[str, Any],
    booking_id: str,
    rating: int,
    comment: Optional[str] = None,
) -> Dict[str, Any]:
    """Review a completed session and let the mentor know."""
    review = await review_service.create_review(
        booking_id=booking_id,
        user_id=str(user["_id"]),
        rating=rating,
        comment=comment,
    )

    await notification_service.create_review_notification(
        mentor_id=str(review["mentorId"]),
        rating=rating,
        booking_id=booking_id,
        review_id=str(review["_id"]),
    )

    return format_review(review)


async def list_reviews_pipeline(
    review_service: ReviewService,
    user_service: UserService,
    mentor_id: str,
) -> Dict[str, Any]:
    await _get_mentor(user_service, mentor_id)
    reviews = await review_service.list_reviews(mentor_id)
    summary = await review_service.get_rating_summary(mentor_id)

    return {
        "reviews": [format_review(r) for r in reviews],
        "averageRating": round(summary["average"], 1),
        "totalReviews": summary["count"],
    }


# =============================================================================
# Mentors
# =============================================================================

async def get_mentor_stats_pipeline(
    mentor_service: MentorService,
    user: Dict[str, Any],
    mentor_id: str,
) -> Dict[str, Any]:
    _require_self(user, mentor_id)
    return await mentor_service.get_stats(mentor_id)


async def get_mentor_clients_pipeline(
    mentor_service: MentorService,
    user: Dict[str, Any],
    mentor_id: str,
) -> List[Dict[str, Any]]:
    _require_self(user, mentor_id)
    clients = await mentor_service.get_clients(mentor_id)

    for client in clients:
        client["lastSession"] = iso(client["lastSession"])
        client["nextSession"] = iso(client["nextSession"])
    return clients


# =============================================================================
# Helpers
# =============================================================================

async def _get_mentor(user_service: UserService, mentor_id: str) -> Dict[str, Any]:
    mentor = await user_service.get_user(mentor_id)
    if not UserService.is_mentor(mentor):
        raise NotFoundException(message="Mood mentor not found", code="MENTOR_NOT_FOUND")
    return mentor


def _require_self(user: Dict[str, Any], mentor_id: str) -> None:
    if str(user["_id"]) != mentor_id:
        raise ForbiddenException(
            message="You can only view your own dashboard",
            code="MENTOR_ACCESS_DENIED",
        )
    if not UserService.is_mentor(user):
        raise ForbiddenException(message="Mood mentor access required", code="MENTOR_REQUIRED")


def format_booking(booking: Dict[str, Any]) -> Dict[str, Any]:
    """Format booking document for API response."""
    return {
        "id": str(booking["_id"]),
        "userId": str(booking["userId"]),
        "mentorId": str(booking["mentorId"]),
        "date": booking["date"],
        "time": booking["time"],
        "notes": booking.get("notes", ""),
        "status": booking["status"],
        "createdAt": iso(booking.get("createdAt")),
        "updatedAt": iso(booking.get("updatedAt")),
    }


def format_review(review: Dict[str, Any]) -> Dict[str, Any]:
    """Format review document for API response."""
    return {
        "id": str(review["_id"]),
        "bookingId": str(review["bookingId"]),
        "mentorId": str(review["mentorId"]),
        "rating": review["rating"],
        "comment": review.get("comment", ""),
        "createdAt": iso(review.get("createdAt")),
    }
