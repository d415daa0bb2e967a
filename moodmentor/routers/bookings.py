"""
FastAPI router for booking endpoints.

Patients book sessions with mood mentors; either party can cancel,
only the mentor confirms or completes.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from common.utils import success_response
from moodmentor.dependencies import (
    require_auth,
    get_booking_service,
    get_review_service,
    get_user_service,
    get_notification_service,
)
from moodmentor.services.bookings.booking_service import BookingService
from moodmentor.services.bookings.review_service import ReviewService
from moodmentor.services.notifications.notification_service import NotificationService
from moodmentor.services.user.user_service import UserService
from moodmentor.schemas.bookings import BookingRequest, BookingUpdateRequest, ReviewRequest
from moodmentor.pipelines import bookings as pipelines

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/available-slots")
async def get_available_slots(
    user: Annotated[dict, Depends(require_auth)],
    booking_service: Annotated[BookingService, Depends(get_booking_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    mentorId: str = Query(..., description="Mood mentor user ID"),
    date: str = Query(..., description="YYYY-MM-DD format"),
):
    """Open slots for a mentor on a day."""
    result = await pipelines.get_available_slots_pipeline(
        booking_service=booking_service,
        user_service=user_service,
        mentor_id=mentorId,
        date=date,
    )
    return success_response(result)


@router.post("", status_code=201)
async def create_booking(
    body: BookingRequest,
    user: Annotated[dict, Depends(require_auth)],
    booking_service: Annotated[BookingService, Depends(get_booking_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Book a session with a mood mentor."""
    booking = await pipelines.create_booking_pipeline(
        booking_service=booking_service,
        user_service=user_service,
        notification_service=notification_service,
        user=user,
        mentor_id=body.mentorId,
        date=body.date,
        time=body.time,
        notes=body.notes,
    )
    return success_response(booking, "Session booked")


@router.get("")
async def list_bookings(
    user: Annotated[dict, Depends(require_auth)],
    booking_service: Annotated[BookingService, Depends(get_booking_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    status: Optional[str] = Query(None, description="pending, confirmed, cancelled or completed"),
):
    """
    The user's bookings: a patient's own, or the sessions booked with a mentor.
    """
    bookings = await pipelines.list_bookings_pipeline(
        booking_service=booking_service,
        user_service=user_service,
        user=user,
        status=status,
    )
    return success_response(bookings)


@router.get("/{booking_id}")
async def get_booking(
    booking_id: str,
    user: Annotated[dict, Depends(require_auth)],
    booking_service: Annotated[BookingService, Depends(get_booking_service)],
):
    booking = await booking_service.get_booking(booking_id, str(user["_id"]))
    return success_response(pipelines.format_booking(booking))


@router.patch("/{booking_id}")
async def update_booking(
    booking_id: str,
    body: BookingUpdateRequest,
    user: Annotated[dict, Depends(require_auth)],
    booking_service: Annotated[BookingService, Depends(get_booking_service)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Reschedule, edit notes or change status."""
    booking = await pipelines.update_booking_pipeline(
        booking_service=booking_service,
        notification_service=notification_service,
        user=user,
        booking_id=booking_id,
        changes=body.model_dump(exclude_unset=True),
    )
    return success_response(booking, "Booking updated")


@router.post("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: str,
    user: Annotated[dict, Depends(require_auth)],
    booking_service: Annotated[BookingService, Depends(get_booking_service)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
):
    booking = await pipelines.cancel_booking_pipeline(
        booking_service=booking_service,
        notification_service=notification_service,
        user=user,
        booking_id=booking_id,
    )
    return success_response(booking, "Booking cancelled")


@router.post("/{booking_id}/reviews", status_code=201)
async def submit_review(
    booking_id: str,
    body: ReviewRequest,
    user: Annotated[dict, Depends(require_auth)],
    review_service: Annotated[ReviewService, Depends(get_review_service)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Review the mentor of a completed session (once per booking)."""
    review = await pipelines.submit_review_pipeline(
        review_service=review_service,
        notification_service=notification_service,
        user=user,
        booking_id=booking_id,
        rating=body.rating,
        comment=body.comment,
    )
    return success_response(review, "Review submitted")
