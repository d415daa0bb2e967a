"""
Patient profile pipeline functions.

What a mentor (or the patient themself) sees on a patient's page.
"""

import logging
from datetime import date
from typing import Optional, Dict, Any

from common.utils.exceptions import ForbiddenException, NotFoundException
from common.utils.ids import to_object_id
from moodmentor.pipelines.bookings import format_booking
from moodmentor.pipelines.checkin import list_journal_entries_pipeline
from moodmentor.services.bookings.booking_service import BookingService
from moodmentor.services.checkin.checkin_analytics import CheckInAnalytics
from moodmentor.services.checkin.journal_service import JournalService
from moodmentor.services.user.user_service import UserService

logger = logging.getLogger(__name__)


async def authorize_patient_access(
    booking_service: BookingService,
    user_service: UserService,
    user: Dict[str, Any],
    patient_id: str,
) -> bool:
    """
    Check the user may view a patient's data.

    Allowed: the patient themself, or a mentor who has at least one
    booking with the patient.

    Returns:
        True when the viewer is the patient (private data included)

    Raises:
        NotFoundException: Patient does not exist
        ForbiddenException: Viewer has no relationship with the patient
    """
    to_object_id(patient_id, "patientId")
    viewer_id = str(user["_id"])

    if viewer_id == patient_id:
        return True

    patient = await user_service.get_user(patient_id)
    if not patient:
        raise NotFoundException(message="Patient not found", code="PATIENT_NOT_FOUND")

    if UserService.is_mentor(user) and await booking_service.has_relationship(viewer_id, patient_id):
        return False

    logger.warning(f"User {viewer_id} denied access to patient {patient_id}")
    raise ForbiddenException(
        message="You do not have access to this patient",
        code="PATIENT_ACCESS_DENIED",
    )


async def get_patient_metrics_pipeline(
    checkin_analytics: CheckInAnalytics,
    patient_id: str,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    return await checkin_analytics.get_patient_metrics(patient_id, today=today)


async def get_patient_journal_pipeline(
    journal_service: JournalService,
    patient_id: str,
    is_self: bool,
    limit: int = 20,
    offset: int = 0,
) -> Dict[str, Any]:
    """Journal entries of a patient; mentors only get shared entries."""
    return await list_journal_entries_pipeline(
        journal_service,
        patient_id,
        include_private=is_self,
        limit=limit,
        offset=offset,
    )


async def get_patient_appointments_pipeline(
    booking_service: BookingService,
    user: Dict[str, Any],
    patient_id: str,
    is_self: bool,
) -> list:
    """
    A patient's bookings. A mentor only sees the ones with themself.
    """
    bookings = await booking_service.list_bookings(patient_id)

    if not is_self:
        viewer_id = str(user["_id"])
        bookings = [b for b in bookings if str(b["mentorId"]) == viewer_id]

    return [format_booking(b) for b in bookings]
