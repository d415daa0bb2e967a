"""
Mood mentor directory and dashboard service.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from moodmentor.services.bookings.booking_service import (
    BookingService,
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
)
from moodmentor.services.bookings.review_service import ReviewService
from moodmentor.services.user.user_service import UserService

logger = logging.getLogger(__name__)


def satisfaction_percentage(average_rating: float) -> int:
    """Average 1-5 star rating as a 0-100 percentage."""
    return round((average_rating or 0) / 5 * 100)


class MentorService:
    """
    Read-side views over mentors, their bookings and reviews.
    """

    def __init__(
        self,
        user_service: UserService,
        booking_service: BookingService,
        review_service: ReviewService,
    ):
        """
        Initialize MentorService.

        Args:
            user_service: For mentor and patient profiles
            booking_service: For a mentor's bookings
            review_service: For ratings
        """
        self._user_service = user_service
        self._booking_service = booking_service
        self._review_service = review_service

    async def list_mentors(self) -> List[Dict[str, Any]]:
        """
        All mentors with their rating figures.

        Returns:
            list of dicts with id, name, bio, specialty, rating,
            totalRatings, satisfaction
        """
        mentors = await self._user_service.get_mentors()
        summaries = await self._review_service.get_rating_summaries([str(m["_id"]) for m in mentors])

        result = []
        for mentor in mentors:
            summary = summaries.get(str(mentor["_id"]), {"average": 0, "count": 0})
            result.append({
                "id": str(mentor["_id"]),
                "name": UserService.display_name(mentor),
                "bio": mentor.get("bio", ""),
                "specialty": mentor.get("specialty", ""),
                "rating": round(summary["average"], 1),
                "totalRatings": summary["count"],
                "satisfaction": satisfaction_percentage(summary["average"]),
            })
        return result

    async def get_stats(self, mentor_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Dashboard figures for a mentor.

        Returns:
            dict with keys:
                - patientsCount: distinct patients ever booked
                - appointmentsCount: upcoming confirmed sessions
                - ratingPercentage: average rating as 0-100
                - reviewsCount: number of reviews
        """
        now = now or datetime.now(timezone.utc)
        bookings = await self._booking_service.list_bookings(mentor_id, as_mentor=True)
        summary = await self._review_service.get_rating_summary(mentor_id)

        upcoming = [
            b for b in bookings
            if b["status"] == STATUS_CONFIRMED and self._booking_service.session_datetime(b) > now
        ]

        return {
            "patientsCount": len({str(b["userId"]) for b in bookings}),
            "appointmentsCount": len(upcoming),
            "ratingPercentage": satisfaction_percentage(summary["average"]),
            "reviewsCount": summary["count"],
        }

    async def get_clients(self, mentor_id: str, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Patients who have booked with the mentor, most recent session first.

        A client is active while they have an upcoming confirmed session.
        """
        now = now or datetime.now(timezone.utc)
        bookings = await self._booking_service.list_bookings(mentor_id, as_mentor=True)

        by_patient: Dict[str, List[Dict[str, Any]]] = {}
        for booking in bookings:
            by_patient.setdefault(str(booking["userId"]), []).append(booking)

        users = await self._user_service.get_users(list(by_patient))

        clients = []
        for patient_id, patient_bookings in by_patient.items():
            sessions = sorted(
                ((self._booking_service.session_datetime(b), b) for b in patient_bookings),
                key=lambda pair: pair[0],
            )
            past = [at for at, b in sessions if at <= now and b["status"] != STATUS_CANCELLED]
            upcoming = [(at, b) for at, b in sessions if at > now and b["status"] != STATUS_CANCELLED]
            user = users.get(patient_id)

            clients.append({
                "id": patient_id,
                "fullName": UserService.display_name(user),
                "email": user.get("email") if user else None,
                "lastSession": past[-1] if past else None,
                "nextSession": upcoming[0][0] if upcoming else None,
                "totalSessions": len(patient_bookings),
                "status": "active" if any(b["status"] == STATUS_CONFIRMED for _, b in upcoming) else "inactive",
            })

        clients.sort(key=lambda c: c["lastSession"] or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return clients
