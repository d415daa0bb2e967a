"""
MoodMentor application settings.

Extends the base settings with check-in, booking and messaging options.
"""

from typing import List
from common.config import BaseAppSettings


class Settings(BaseAppSettings):
    """MoodMentor-specific settings."""

    API_PREFIX: str = "/api"

    # ==========================================================================
    # Check-in Settings
    # ==========================================================================
    # Calendar days for streaks are taken in this zone for every check-in type
    STREAK_TIMEZONE: str = "UTC"

    # How far back summaries, streaks and metrics look
    CHECKIN_LOOKBACK_DAYS: int = 365

    MAX_NOTES_LENGTH: int = 1000
    MAX_JOURNAL_LENGTH: int = 10000

    # ==========================================================================
    # Booking Settings
    # ==========================================================================
    # Bookable session start times, comma-separated HH:MM
    BOOKING_SLOTS: str = "09:00,10:00,11:00,12:00,13:00,14:00,15:00,16:00,17:00"

    # ==========================================================================
    # Messaging Settings
    # ==========================================================================
    MAX_MESSAGE_LENGTH: int = 2000

    # ==========================================================================
    # Offline Sync
    # ==========================================================================
    OFFLINE_QUEUE_BACKEND: str = "mongo"  # "mongo" or "memory"
    MAX_SYNC_BATCH: int = 100
    # Failed saves before a queued item is set aside for the client
    MAX_SYNC_ATTEMPTS: int = 5

    def get_booking_slots(self) -> List[str]:
        """Parse BOOKING_SLOTS into a sorted list of HH:MM strings."""
        return sorted(slot.strip() for slot in self.BOOKING_SLOTS.split(",") if slot.strip())


# Global settings instance
settings = Settings()
