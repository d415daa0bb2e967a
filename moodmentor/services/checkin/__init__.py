"""Check-in services: mood entries, stress assessments, journal entries and analytics."""

from moodmentor.services.checkin.consistency import (
    CheckIn,
    ConsistencyMetrics,
    InvalidCheckInInput,
    calculate_consistency,
    calculate_streak,
    calculate_trend,
    consistency_score,
)
from moodmentor.services.checkin.mood_service import MoodService
from moodmentor.services.checkin.stress_service import StressService
from moodmentor.services.checkin.journal_service import JournalService
from moodmentor.services.checkin.checkin_analytics import CheckInAnalytics

__all__ = [
    "CheckIn",
    "ConsistencyMetrics",
    "InvalidCheckInInput",
    "calculate_consistency",
    "calculate_streak",
    "calculate_trend",
    "consistency_score",
    "MoodService",
    "StressService",
    "JournalService",
    "CheckInAnalytics",
]
