"""
Check-in pipeline functions.

Stateless orchestration for mood entries, stress assessments and
journal entries.
"""

import logging
from datetime import date
from typing import Optional, List, Dict, Any

from moodmentor.pipelines.formatting import iso, str_id
from moodmentor.services.checkin.mood_service import MoodService
from moodmentor.services.checkin.stress_service import StressService
from moodmentor.services.checkin.journal_service import JournalService
from moodmentor.services.checkin.checkin_analytics import CheckInAnalytics

logger = logging.getLogger(__name__)


# =============================================================================
# Mood entries
# =============================================================================

async def create_mood_entry_pipeline(
    mood_service: MoodService,
    user_id: str,
    score: float,
    mood: Optional[str] = None,
    assessment_result: Optional[str] = None,
    factors: Optional[List[str]] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """Record a mood entry and return it formatted."""
    entry = await mood_service.create_entry(
        user_id=user_id,
        score=score,
        mood=mood,
        assessment_result=assessment_result,
        factors=factors,
        notes=notes,
    )
    return format_mood_entry(entry)


async def list_mood_entries_pipeline(
    mood_service: MoodService,
    user_id: str,
    limit: int = 30,
    offset: int = 0,
) -> Dict[str, Any]:
    """
    Get mood entry history with pagination.

    Returns:
        dict with entries list and total count
    """
    entries = await mood_service.list_entries(user_id, limit=limit, offset=offset)
    total = await mood_service.count_entries(user_id)

    return {
        "entries": [format_mood_entry(e) for e in entries],
        "total": total,
    }


async def get_mood_summary_pipeline(
    checkin_analytics: CheckInAnalytics,
    user_id: str,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    summary = await checkin_analytics.get_mood_summary(user_id, today=today)
    summary["lastAssessment"] = iso(summary["lastAssessment"])
    return summary


# =============================================================================
# Stress assessments
# =============================================================================

async def create_stress_assessment_pipeline(
    stress_service: StressService,
    user_id: str,
    score: float,
    symptoms: Optional[List[str]] = None,
    triggers: Optional[List[str]] = None,
    notes: Optional[str] = None,
    responses: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    assessment = await stress_service.create_assessment(
        user_id=user_id,
        score=score,
        symptoms=symptoms,
        triggers=triggers,
        notes=notes,
        responses=responses,
    )
    return format_stress_assessment(assessment)


async def list_stress_assessments_pipeline(
    stress_service: StressService,
    checkin_analytics: CheckInAnalytics,
    user_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = 50,
) -> List[Dict[str, Any]]:
    """Assessments newest first, optionally limited to a day range (inclusive)."""
    start, end = checkin_analytics.day_range(start_date, end_date)
    assessments = await stress_service.list_assessments(user_id, start=start, end=end, limit=limit)
    return [format_stress_assessment(a) for a in assessments]


async def get_stress_report_pipeline(
    checkin_analytics: CheckInAnalytics,
    user_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Dict[str, Any]:
    return await checkin_analytics.get_stress_report(user_id, start_date, end_date)


async def get_assessment_metrics_pipeline(
    checkin_analytics: CheckInAnalytics,
    user_id: str,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    metrics = await checkin_analytics.get_assessment_metrics(user_id, today=today)
    metrics["lastAssessmentAt"] = iso(metrics["lastAssessmentAt"])
    return metrics


# =============================================================================
# Journal entries
# =============================================================================

async def list_journal_entries_pipeline(
    journal_service: JournalService,
    user_id: str,
    include_private: bool = True,
    limit: int = 20,
    offset: int = 0,
) -> Dict[str, Any]:
    entries = await journal_service.list_entries(
        user_id,
        include_private=include_private,
        limit=limit,
        offset=offset,
    )
    total = await journal_service.count_entries(user_id, include_private=include_private)

    return {
        "entries": [format_journal_entry(e) for e in entries],
        "total": total,
    }


# =============================================================================
# Formatters
# =============================================================================

def format_mood_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    """Format mood entry document for API response."""
    return {
        "id": str(entry["_id"]),
        "score": entry["score"],
        "mood": entry.get("mood"),
        "assessmentResult": entry.get("assessmentResult", ""),
        "factors": entry.get("factors", []),
        "notes": entry.get("notes", ""),
        "createdAt": iso(entry.get("createdAt")),
        "updatedAt": iso(entry.get("updatedAt")),
    }


def format_stress_assessment(assessment: Dict[str, Any]) -> Dict[str, Any]:
    """Format stress assessment document for API response."""
    return {
        "id": str(assessment["_id"]),
        "score": assessment["score"],
        "symptoms": assessment.get("symptoms", []),
        "triggers": assessment.get("triggers", []),
        "notes": assessment.get("notes", ""),
        "responses": assessment.get("responses"),
        "createdAt": iso(assessment.get("createdAt")),
    }


def format_journal_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    """Format journal entry document for API response."""
    return {
        "id": str(entry["_id"]),
        "title": entry.get("title", ""),
        "content": entry["content"],
        "moodId": str_id(entry.get("moodId")),
        "tags": entry.get("tags", []),
        "private": entry.get("private", True),
        "createdAt": iso(entry.get("createdAt")),
        "updatedAt": iso(entry.get("updatedAt")),
    }
