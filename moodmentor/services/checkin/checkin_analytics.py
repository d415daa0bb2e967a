"""
Check-in analytics service.

Builds summaries, reports and patient metrics on top of the pure
consistency calculator. Everything is derived on read.
"""

import logging
from collections import Counter
from datetime import date, datetime, time, timedelta
from typing import List, Dict, Any, Optional, Tuple

import pytz

from moodmentor.services.checkin.consistency import (
    CheckIn,
    calculate_consistency,
    consistency_score,
    resolve_timezone,
    to_calendar_day,
)
from moodmentor.services.checkin.mood_service import MoodService
from moodmentor.services.checkin.stress_service import StressService

logger = logging.getLogger(__name__)

TOP_LABELS = 5
NO_MOOD_DATA = "No data"
STATUS_COMPLETED = "Completed"
STATUS_NO_CHECKINS = "No check-ins yet"


class CheckInAnalytics:
    """
    Analytics over mood entries and stress assessments.
    """

    def __init__(
        self,
        mood_service: MoodService,
        stress_service: StressService,
        timezone_name: str = "UTC",
        lookback_days: int = 365,
    ):
        """
        Initialize CheckInAnalytics.

        Args:
            mood_service: For fetching mood entries
            stress_service: For fetching stress assessments
            timezone_name: IANA zone used to bucket check-ins into days
            lookback_days: How far back summaries look
        """
        self._mood_service = mood_service
        self._stress_service = stress_service
        self._tz = resolve_timezone(timezone_name)
        self._lookback_days = lookback_days

    def today(self) -> date:
        """Current calendar day in the configured zone."""
        return datetime.now(self._tz).date()

    async def get_mood_summary(self, user_id: str, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Summarize a user's mood entries.

        Returns:
            dict with keys:
                - totalEntries: int
                - averageScore: float (one decimal)
                - lastAssessment: datetime or None
                - mostFrequentMood: str ("No data" when nothing is labelled)
                - streakDays: int
                - trend: "improving" | "declining" | "stable"
        """
        entries = await self._mood_service.get_entries_for_period(user_id, self._lookback_days)
        metrics = self._metrics(entries, today)

        moods = Counter(e["mood"] for e in entries if e.get("mood"))
        most_frequent = moods.most_common(1)[0][0] if moods else NO_MOOD_DATA

        return {
            "totalEntries": metrics.total_entries,
            "averageScore": round(metrics.average_score, 1),
            "lastAssessment": metrics.last_entry_timestamp,
            "mostFrequentMood": most_frequent,
            "streakDays": metrics.streak_days,
            "trend": metrics.trend,
        }

    async def get_stress_report(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Aggregate stress assessments between two calendar days (both inclusive).

        Returns:
            dict with averageScore, totalAssessments, commonSymptoms and
            commonTriggers (top 5 each, most frequent first)
        """
        start, end = self.day_range(start_date, end_date)
        assessments = await self._stress_service.list_assessments(user_id, start=start, end=end)

        if not assessments:
            return {
                "averageScore": 0,
                "totalAssessments": 0,
                "commonSymptoms": [],
                "commonTriggers": [],
            }

        metrics = self._metrics(assessments, higher_is_better=False)

        return {
            "averageScore": round(metrics.average_score, 1),
            "totalAssessments": len(assessments),
            "commonSymptoms": _top_labels(assessments, "symptoms"),
            "commonTriggers": _top_labels(assessments, "triggers"),
        }

    async def get_assessment_metrics(self, user_id: str, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Stress dashboard metrics. A falling stress score counts as improving.
        """
        assessments = await self._stress_service.get_assessments_for_period(user_id, self._lookback_days)
        metrics = self._metrics(assessments, today, higher_is_better=False)

        latest = assessments[0] if assessments else None

        return {
            "stressLevel": latest.get("score", 0) if latest else 0,
            "lastAssessmentAt": metrics.last_entry_timestamp,
            "streakCount": metrics.streak_days,
            "consistencyScore": consistency_score(metrics.total_entries),
            "trend": metrics.trend,
            "firstCheckInDate": self._first_day(assessments, today),
        }

    async def get_patient_metrics(self, patient_id: str, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Metrics a mentor sees on a patient's profile, derived from mood entries.

        Stress level is approximated as the inverse of the average mood.
        """
        entries = await self._mood_service.get_entries_for_period(patient_id, self._lookback_days)
        metrics = self._metrics(entries, today)

        mood_score = round(metrics.average_score, 1)

        return {
            "userId": patient_id,
            "moodScore": mood_score,
            "stressLevel": round(max(0.0, 10 - mood_score), 1),
            "consistency": consistency_score(metrics.total_entries),
            "lastCheckInStatus": STATUS_COMPLETED if metrics.total_entries else STATUS_NO_CHECKINS,
            "streak": metrics.streak_days,
            "firstCheckInDate": self._first_day(entries, today),
            "trend": metrics.trend,
        }

    def day_range(
        self,
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> Tuple[Optional[datetime], Optional[datetime]]:
        """UTC bounds covering whole calendar days in the configured zone."""
        start = self._day_start(start_date) if start_date else None
        end = self._day_start(end_date + timedelta(days=1)) - timedelta(microseconds=1) if end_date else None
        return start, end

    def _metrics(
        self,
        documents: List[Dict[str, Any]],
        today: Optional[date] = None,
        higher_is_better: bool = True,
    ):
        checkins = [CheckIn.from_document(doc) for doc in documents]
        return calculate_consistency(
            checkins,
            today=today or self.today(),
            tz=self._tz,
            higher_is_better=higher_is_better,
        )

    def _first_day(self, documents: List[Dict[str, Any]], today: Optional[date]) -> str:
        days = [
            to_calendar_day(c.timestamp, self._tz)
            for c in (CheckIn.from_document(doc) for doc in documents)
            if c.timestamp is not None
        ]
        first = min(days) if days else (today or self.today())
        return format_day(first)

    def _day_start(self, day: date) -> datetime:
        naive = datetime.combine(day, time.min)
        if hasattr(self._tz, "localize"):
            return self._tz.localize(naive).astimezone(pytz.utc)
        return naive.replace(tzinfo=self._tz).astimezone(pytz.utc)


def format_day(day: date) -> str:
    """Format as e.g. 'Mar 5, 2024'."""
    return f"{day:%b} {day.day}, {day.year}"


def _top_labels(documents: List[Dict[str, Any]], field: str) -> List[str]:
    counts = Counter()
    for doc in documents:
        counts.update(doc.get(field) or [])
    return [label for label, _ in counts.most_common(TOP_LABELS)]
