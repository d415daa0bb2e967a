"""Unit tests for CheckInAnalytics (summaries, reports, patient metrics)."""

import pytest
from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from moodmentor.services.checkin.checkin_analytics import CheckInAnalytics, format_day


TODAY = date(2024, 3, 15)


def stamp(days_back: int, hour: int = 12) -> datetime:
    day = TODAY - timedelta(days=days_back)
    return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


# ─────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def mood_service():
    service = MagicMock()
    service.get_entries_for_period = AsyncMock(return_value=[])
    return service


@pytest.fixture
def stress_service():
    service = MagicMock()
    service.list_assessments = AsyncMock(return_value=[])
    service.get_assessments_for_period = AsyncMock(return_value=[])
    return service


@pytest.fixture
def analytics(mood_service, stress_service):
    return CheckInAnalytics(mood_service, stress_service, timezone_name="UTC", lookback_days=365)


@pytest.fixture
def mood_entries(sample_user_id):
    """Newest first, like MoodService returns them."""
    user_id = ObjectId(sample_user_id)
    return [
        {"userId": user_id, "score": 5, "mood": "Happy", "createdAt": stamp(0)},
        {"userId": user_id, "score": 6, "mood": "Sad", "createdAt": stamp(1)},
        {"userId": user_id, "score": 7, "mood": "Happy", "createdAt": stamp(2)},
        {"userId": user_id, "score": 2, "mood": "Calm", "createdAt": stamp(4)},
    ]


# ─────────────────────────────────────────────────────────────────
# Mood summary
# ─────────────────────────────────────────────────────────────────


class TestMoodSummary:
    @pytest.mark.asyncio
    async def test_no_entries(self, analytics, sample_user_id):
        summary = await analytics.get_mood_summary(sample_user_id, today=TODAY)

        assert summary == {
            "totalEntries": 0,
            "averageScore": 0,
            "lastAssessment": None,
            "mostFrequentMood": "No data",
            "streakDays": 0,
            "trend": "stable",
        }

    @pytest.mark.asyncio
    async def test_summary_from_entries(self, analytics, mood_service, mood_entries, sample_user_id):
        mood_service.get_entries_for_period.return_value = mood_entries

        summary = await analytics.get_mood_summary(sample_user_id, today=TODAY)

        assert summary["totalEntries"] == 4
        assert summary["averageScore"] == 5.0
        assert summary["lastAssessment"] == stamp(0)
        assert summary["mostFrequentMood"] == "Happy"
        assert summary["streakDays"] == 3
        assert summary["trend"] == "declining"
        mood_service.get_entries_for_period.assert_awaited_once_with(sample_user_id, 365)

    @pytest.mark.asyncio
    async def test_average_rounded_to_one_decimal(self, analytics, mood_service, sample_user_id):
        mood_service.get_entries_for_period.return_value = [
            {"score": 7, "createdAt": stamp(0)},
            {"score": 8, "createdAt": stamp(1)},
            {"score": 8, "createdAt": stamp(2)},
        ]

        summary = await analytics.get_mood_summary(sample_user_id, today=TODAY)

        assert summary["averageScore"] == 7.7

    @pytest.mark.asyncio
    async def test_unlabelled_entries_have_no_frequent_mood(self, analytics, mood_service, sample_user_id):
        mood_service.get_entries_for_period.return_value = [{"score": 4, "mood": None, "createdAt": stamp(0)}]

        summary = await analytics.get_mood_summary(sample_user_id, today=TODAY)

        assert summary["mostFrequentMood"] == "No data"
        assert summary["totalEntries"] == 1


# ─────────────────────────────────────────────────────────────────
# Stress report and assessment metrics
# ─────────────────────────────────────────────────────────────────


class TestStressReport:
    @pytest.mark.asyncio
    async def test_empty_report(self, analytics, sample_user_id):
        report = await analytics.get_stress_report(sample_user_id, TODAY, TODAY)

        assert report == {
            "averageScore": 0,
            "totalAssessments": 0,
            "commonSymptoms": [],
            "commonTriggers": [],
        }

    @pytest.mark.asyncio
    async def test_end_date_is_inclusive(self, analytics, stress_service, sample_user_id):
        await analytics.get_stress_report(sample_user_id, date(2024, 3, 1), TODAY)

        kwargs = stress_service.list_assessments.call_args.kwargs
        assert kwargs["start"] == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert kwargs["end"] == datetime(2024, 3, 15, 23, 59, 59, 999999, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_report_aggregates_labels(self, analytics, stress_service, sample_user_id):
        stress_service.list_assessments.return_value = [
            {"score": 8, "symptoms": ["headache", "fatigue"], "triggers": ["work"], "createdAt": stamp(0)},
            {"score": 6, "symptoms": ["headache"], "triggers": ["work", "family"], "createdAt": stamp(1)},
            {"score": 4, "symptoms": ["headache", "fatigue", "insomnia"], "triggers": [], "createdAt": stamp(2)},
        ]

        report = await analytics.get_stress_report(sample_user_id, date(2024, 3, 1), TODAY)

        assert report["averageScore"] == 6.0
        assert report["totalAssessments"] == 3
        assert report["commonSymptoms"] == ["headache", "fatigue", "insomnia"]
        assert report["commonTriggers"] == ["work", "family"]

    @pytest.mark.asyncio
    async def test_report_keeps_top_five_labels(self, analytics, stress_service, sample_user_id):
        symptoms = ["a", "b", "c", "d", "e", "f"]
        stress_service.list_assessments.return_value = [
            {"score": 5, "symptoms": symptoms[: n + 1], "createdAt": stamp(n)}
            for n in range(6)
        ]

        report = await analytics.get_stress_report(sample_user_id, None, None)

        assert report["commonSymptoms"] == ["a", "b", "c", "d", "e"]


class TestAssessmentMetrics:
    @pytest.mark.asyncio
    async def test_falling_stress_is_improving(self, analytics, stress_service, sample_user_id):
        stress_service.get_assessments_for_period.return_value = [
            {"score": 3, "createdAt": stamp(0)},
            {"score": 6, "createdAt": stamp(1)},
        ]

        metrics = await analytics.get_assessment_metrics(sample_user_id, today=TODAY)

        assert metrics == {
            "stressLevel": 3,
            "lastAssessmentAt": stamp(0),
            "streakCount": 2,
            "consistencyScore": 10,
            "trend": "improving",
            "firstCheckInDate": "Mar 14, 2024",
        }

    @pytest.mark.asyncio
    async def test_no_assessments(self, analytics, sample_user_id):
        metrics = await analytics.get_assessment_metrics(sample_user_id, today=TODAY)

        assert metrics["stressLevel"] == 0
        assert metrics["lastAssessmentAt"] is None
        assert metrics["consistencyScore"] == 0
        assert metrics["firstCheckInDate"] == "Mar 15, 2024"


# ─────────────────────────────────────────────────────────────────
# Patient metrics
# ─────────────────────────────────────────────────────────────────


class TestPatientMetrics:
    @pytest.mark.asyncio
    async def test_metrics_from_mood_entries(self, analytics, mood_service, mood_entries, sample_user_id):
        mood_service.get_entries_for_period.return_value = mood_entries

        metrics = await analytics.get_patient_metrics(sample_user_id, today=TODAY)

        assert metrics == {
            "userId": sample_user_id,
            "moodScore": 5.0,
            "stressLevel": 5.0,
            "consistency": 20,
            "lastCheckInStatus": "Completed",
            "streak": 3,
            "firstCheckInDate": "Mar 11, 2024",
            "trend": "declining",
        }

    @pytest.mark.asyncio
    async def test_patient_without_checkins(self, analytics, sample_user_id):
        metrics = await analytics.get_patient_metrics(sample_user_id, today=TODAY)

        assert metrics["moodScore"] == 0
        assert metrics["stressLevel"] == 10
        assert metrics["consistency"] == 0
        assert metrics["lastCheckInStatus"] == "No check-ins yet"
        assert metrics["streak"] == 0
        assert metrics["firstCheckInDate"] == "Mar 15, 2024"

    @pytest.mark.asyncio
    async def test_days_follow_configured_zone(self, mood_service, stress_service, sample_user_id):
        analytics = CheckInAnalytics(mood_service, stress_service, timezone_name="Asia/Tokyo")
        mood_service.get_entries_for_period.return_value = [
            {"score": 5, "createdAt": datetime(2024, 3, 15, 0, 30, tzinfo=timezone.utc)},
            {"score": 5, "createdAt": datetime(2024, 3, 14, 23, 30, tzinfo=timezone.utc)},
        ]

        metrics = await analytics.get_patient_metrics(sample_user_id, today=TODAY)

        assert metrics["streak"] == 1


class TestFormatDay:
    def test_format_day(self):
        assert format_day(date(2024, 3, 5)) == "Mar 5, 2024"
        assert format_day(date(2023, 12, 25)) == "Dec 25, 2023"
