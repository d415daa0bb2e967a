"""Booking services."""

from moodmentor.services.bookings.booking_service import BookingService
from moodmentor.services.bookings.review_service import ReviewService
from moodmentor.services.bookings.mentor_service import MentorService

__all__ = [
    "BookingService",
    "ReviewService",
    "MentorService",
]
