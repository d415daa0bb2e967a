"""
FastAPI routers for check-in endpoints.

Mood entries, stress assessments and journal entries of the signed-in
user.
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from common.utils import success_response, paginated_response
from moodmentor.dependencies import (
    require_auth,
    get_mood_service,
    get_stress_service,
    get_journal_service,
    get_checkin_analytics,
)
from moodmentor.services.checkin.mood_service import MoodService
from moodmentor.services.checkin.stress_service import StressService
from moodmentor.services.checkin.journal_service import JournalService
from moodmentor.services.checkin.checkin_analytics import CheckInAnalytics
from moodmentor.schemas.checkin import (
    MoodEntryRequest,
    MoodEntryUpdateRequest,
    StressAssessmentRequest,
    JournalEntryRequest,
    JournalEntryUpdateRequest,
)
from moodmentor.pipelines import checkin as pipelines

logger = logging.getLogger(__name__)

mood_router = APIRouter(prefix="/mood-entries", tags=["mood"])
stress_router = APIRouter(prefix="/stress-assessments", tags=["stress"])
journal_router = APIRouter(prefix="/journal-entries", tags=["journal"])


# =============================================================================
# Mood entries
# =============================================================================

@mood_router.post("", status_code=201)
async def create_mood_entry(
    body: MoodEntryRequest,
    user: Annotated[dict, Depends(require_auth)],
    mood_service: Annotated[MoodService, Depends(get_mood_service)],
):
    """Record a mood entry."""
    entry = await pipelines.create_mood_entry_pipeline(
        mood_service=mood_service,
        user_id=str(user["_id"]),
        score=body.score,
        mood=body.mood,
        assessment_result=body.assessmentResult,
        factors=body.factors,
        notes=body.notes,
    )
    return success_response(entry, "Mood entry saved")


@mood_router.get("")
async def list_mood_entries(
    user: Annotated[dict, Depends(require_auth)],
    mood_service: Annotated[MoodService, Depends(get_mood_service)],
    limit: int = Query(30, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Mood entry history, newest first."""
    result = await pipelines.list_mood_entries_pipeline(
        mood_service=mood_service,
        user_id=str(user["_id"]),
        limit=limit,
        offset=offset,
    )
    return paginated_response(result["entries"], result["total"], limit, offset)


@mood_router.get("/summary")
async def get_mood_summary(
    user: Annotated[dict, Depends(require_auth)],
    checkin_analytics: Annotated[CheckInAnalytics, Depends(get_checkin_analytics)],
):
    """
    Mood summary: totals, average, most frequent mood, streak and trend.
    """
    summary = await pipelines.get_mood_summary_pipeline(
        checkin_analytics=checkin_analytics,
        user_id=str(user["_id"]),
    )
    return success_response(summary)


@mood_router.get("/{entry_id}")
async def get_mood_entry(
    entry_id: str,
    user: Annotated[dict, Depends(require_auth)],
    mood_service: Annotated[MoodService, Depends(get_mood_service)],
):
    entry = await mood_service.get_entry(entry_id, str(user["_id"]))
    return success_response(pipelines.format_mood_entry(entry))


@mood_router.patch("/{entry_id}")
async def update_mood_entry(
    entry_id: str,
    body: MoodEntryUpdateRequest,
    user: Annotated[dict, Depends(require_auth)],
    mood_service: Annotated[MoodService, Depends(get_mood_service)],
):
    entry = await mood_service.update_entry(
        entry_id,
        str(user["_id"]),
        body.model_dump(exclude_unset=True),
    )
    return success_response(pipelines.format_mood_entry(entry), "Mood entry updated")


@mood_router.delete("/{entry_id}")
async def delete_mood_entry(
    entry_id: str,
    user: Annotated[dict, Depends(require_auth)],
    mood_service: Annotated[MoodService, Depends(get_mood_service)],
):
    await mood_service.delete_entry(entry_id, str(user["_id"]))
    return success_response(message="Mood entry deleted")


# =============================================================================
# Stress assessments
# =============================================================================

@stress_router.post("", status_code=201)
async def create_stress_assessment(
    body: StressAssessmentRequest,
    user: Annotated[dict, Depends(require_auth)],
    stress_service: Annotated[StressService, Depends(get_stress_service)],
):
    """Record a stress assessment."""
    assessment = await pipelines.create_stress_assessment_pipeline(
        stress_service=stress_service,
        user_id=str(user["_id"]),
        score=body.score,
        symptoms=body.symptoms,
        triggers=body.triggers,
        notes=body.notes,
        responses=body.responses,
    )
    return success_response(assessment, "Stress assessment saved")


@stress_router.get("")
async def list_stress_assessments(
    user: Annotated[dict, Depends(require_auth)],
    stress_service: Annotated[StressService, Depends(get_stress_service)],
    checkin_analytics: Annotated[CheckInAnalytics, Depends(get_checkin_analytics)],
    startDate: Optional[date] = Query(None, description="YYYY-MM-DD format"),
    endDate: Optional[date] = Query(None, description="YYYY-MM-DD format"),
    limit: int = Query(50, ge=1, le=100),
):
    """Stress assessments, newest first, optionally between two days."""
    assessments = await pipelines.list_stress_assessments_pipeline(
        stress_service=stress_service,
        checkin_analytics=checkin_analytics,
        user_id=str(user["_id"]),
        start_date=startDate,
        end_date=endDate,
        limit=limit,
    )
    return success_response(assessments)


@stress_router.get("/report")
async def get_stress_report(
    user: Annotated[dict, Depends(require_auth)],
    checkin_analytics: Annotated[CheckInAnalytics, Depends(get_checkin_analytics)],
    startDate: Optional[date] = Query(None, description="YYYY-MM-DD format"),
    endDate: Optional[date] = Query(None, description="YYYY-MM-DD format, inclusive"),
):
    """
    Stress report: average score plus the most common symptoms and triggers.
    """
    report = await pipelines.get_stress_report_pipeline(
        checkin_analytics=checkin_analytics,
        user_id=str(user["_id"]),
        start_date=startDate,
        end_date=endDate,
    )
    return success_response(report)


@stress_router.get("/metrics")
async def get_assessment_metrics(
    user: Annotated[dict, Depends(require_auth)],
    checkin_analytics: Annotated[CheckInAnalytics, Depends(get_checkin_analytics)],
):
    """Latest stress level, streak, consistency score and trend."""
    metrics = await pipelines.get_assessment_metrics_pipeline(
        checkin_analytics=checkin_analytics,
        user_id=str(user["_id"]),
    )
    return success_response(metrics)


# =============================================================================
# Journal entries
# =============================================================================

@journal_router.post("", status_code=201)
async def create_journal_entry(
    body: JournalEntryRequest,
    user: Annotated[dict, Depends(require_auth)],
    journal_service: Annotated[JournalService, Depends(get_journal_service)],
):
    entry = await journal_service.create_entry(
        user_id=str(user["_id"]),
        content=body.content,
        title=body.title,
        mood_id=body.moodId,
        tags=body.tags,
        private=body.private,
    )
    return success_response(pipelines.format_journal_entry(entry), "Journal entry saved")


@journal_router.get("")
async def list_journal_entries(
    user: Annotated[dict, Depends(require_auth)],
    journal_service: Annotated[JournalService, Depends(get_journal_service)],
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    result = await pipelines.list_journal_entries_pipeline(
        journal_service=journal_service,
        user_id=str(user["_id"]),
        limit=limit,
        offset=offset,
    )
    return paginated_response(result["entries"], result["total"], limit, offset)


@journal_router.get("/{entry_id}")
async def get_journal_entry(
    entry_id: str,
    user: Annotated[dict, Depends(require_auth)],
    journal_service: Annotated[JournalService, Depends(get_journal_service)],
):
    entry = await journal_service.get_entry(entry_id, str(user["_id"]))
    return success_response(pipelines.format_journal_entry(entry))


@journal_router.patch("/{entry_id}")
async def update_journal_entry(
    entry_id: str,
    body: JournalEntryUpdateRequest,
    user: Annotated[dict, Depends(require_auth)],
    journal_service: Annotated[JournalService, Depends(get_journal_service)],
):
    entry = await journal_service.update_entry(
        entry_id,
        str(user["_id"]),
        body.model_dump(exclude_unset=True),
    )
    return success_response(pipelines.format_journal_entry(entry), "Journal entry updated")


@journal_router.delete("/{entry_id}")
async def delete_journal_entry(
    entry_id: str,
    user: Annotated[dict, Depends(require_auth)],
    journal_service: Annotated[JournalService, Depends(get_journal_service)],
):
    await journal_service.delete_entry(entry_id, str(user["_id"]))
    return success_response(message="Journal entry deleted")
