"""
FastAPI router for patient profile endpoints.

Readable by the patient themself or by a mood mentor who has a booking
with them.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from common.utils import success_response, paginated_response
from moodmentor.dependencies import (
    require_auth,
    get_booking_service,
    get_checkin_analytics,
    get_journal_service,
    get_user_service,
)
from moodmentor.services.bookings.booking_service import BookingService
from moodmentor.services.checkin.checkin_analytics import CheckInAnalytics
from moodmentor.services.checkin.journal_service import JournalService
from moodmentor.services.user.user_service import UserService
from moodmentor.pipelines import patients as pipelines

router = APIRouter(prefix="/patients", tags=["patients"])


@router.get("/{patient_id}/metrics")
async def get_patient_metrics(
    patient_id: str,
    user: Annotated[dict, Depends(require_auth)],
    booking_service: Annotated[BookingService, Depends(get_booking_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    checkin_analytics: Annotated[CheckInAnalytics, Depends(get_checkin_analytics)],
):
    """
    Mood score, stress level, consistency, streak and trend for a patient.
    """
    await pipelines.authorize_patient_access(booking_service, user_service, user, patient_id)
    metrics = await pipelines.get_patient_metrics_pipeline(checkin_analytics, patient_id)
    return success_response(metrics)


@router.get("/{patient_id}/journal-entries")
async def get_patient_journal_entries(
    patient_id: str,
    user: Annotated[dict, Depends(require_auth)],
    booking_service: Annotated[BookingService, Depends(get_booking_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    journal_service: Annotated[JournalService, Depends(get_journal_service)],
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Journal entries; mentors only see entries the patient shared."""
    is_self = await pipelines.authorize_patient_access(booking_service, user_service, user, patient_id)
    result = await pipelines.get_patient_journal_pipeline(
        journal_service,
        patient_id,
        is_self=is_self,
        limit=limit,
        offset=offset,
    )
    return paginated_response(result["entries"], result["total"], limit, offset)


@router.get("/{patient_id}/appointments")
async def get_patient_appointments(
    patient_id: str,
    user: Annotated[dict, Depends(require_auth)],
    booking_service: Annotated[BookingService, Depends(get_booking_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    is_self = await pipelines.authorize_patient_access(booking_service, user_service, user, patient_id)
    appointments = await pipelines.get_patient_appointments_pipeline(
        booking_service,
        user,
        patient_id,
        is_self=is_self,
    )
    return success_response(appointments)
