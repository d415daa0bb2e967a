"""
FastAPI dependencies for the MoodMentor application.

Provides dependency injection for all services. Every service is built
once at startup from the same database handle.
"""

from typing import Annotated, Optional, Dict, Any

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.auth import AuthProvider, JWTAuth, create_auth_dependency
from common.utils.exceptions import ForbiddenException, UnauthorizedException
from moodmentor.config import Settings

# Check-in services
from moodmentor.services.checkin.mood_service import MoodService
from moodmentor.services.checkin.stress_service import StressService
from moodmentor.services.checkin.journal_service import JournalService
from moodmentor.services.checkin.checkin_analytics import CheckInAnalytics

# User services
from moodmentor.services.user.user_service import UserService

# Booking services
from moodmentor.services.bookings.booking_service import BookingService
from moodmentor.services.bookings.review_service import ReviewService
from moodmentor.services.bookings.mentor_service import MentorService

# Messaging services
from moodmentor.services.messaging.message_service import MessageService

# Notification services
from moodmentor.services.notifications.notification_service import NotificationService
from moodmentor.services.notifications.preferences_service import PreferencesService

# Sync services
from moodmentor.services.sync.offline_queue import OfflineQueue, create_offline_queue
from moodmentor.services.sync.sync_service import SyncService


# ─────────────────────────────────────────────────────────────────
# Global service instances
# ─────────────────────────────────────────────────────────────────

# Auth
_auth_provider: Optional[AuthProvider] = None

# User
_user_service: Optional[UserService] = None

# Check-in
_mood_service: Optional[MoodService] = None
_stress_service: Optional[StressService] = None
_journal_service: Optional[JournalService] = None
_checkin_analytics: Optional[CheckInAnalytics] = None

# Bookings
_booking_service: Optional[BookingService] = None
_review_service: Optional[ReviewService] = None
_mentor_service: Optional[MentorService] = None

# Messaging
_message_service: Optional[MessageService] = None

# Notifications
_notification_service: Optional[NotificationService] = None
_preferences_service: Optional[PreferencesService] = None

# Sync
_offline_queue: Optional[OfflineQueue] = None
_sync_service: Optional[SyncService] = None


# ─────────────────────────────────────────────────────────────────
# Initialization
# ─────────────────────────────────────────────────────────────────

def init_auth_services(settings: Settings) -> None:
    """Initialize the token verifier."""
    global _auth_provider

    _auth_provider = JWTAuth(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def init_user_services(db: AsyncIOMotorDatabase) -> None:
    """Initialize user services."""
    global _user_service

    _user_service = UserService(db=db)


def init_checkin_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """Initialize check-in services."""
    global _mood_service, _stress_service, _journal_service, _checkin_analytics

    _mood_service = MoodService(db=db, max_notes_length=settings.MAX_NOTES_LENGTH)
    _stress_service = StressService(db=db, max_notes_length=settings.MAX_NOTES_LENGTH)
    _journal_service = JournalService(db=db, max_content_length=settings.MAX_JOURNAL_LENGTH)
    _checkin_analytics = CheckInAnalytics(
        mood_service=_mood_service,
        stress_service=_stress_service,
        timezone_name=settings.STREAK_TIMEZONE,
        lookback_days=settings.CHECKIN_LOOKBACK_DAYS,
    )


def init_booking_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """Initialize booking, review and mentor services."""
    global _booking_service, _review_service, _mentor_service

    _booking_service = BookingService(
        db=db,
        slots=settings.get_booking_slots(),
        timezone_name=settings.STREAK_TIMEZONE,
    )
    _review_service = ReviewService(db=db)
    _mentor_service = MentorService(
        user_service=_user_service,
        booking_service=_booking_service,
        review_service=_review_service,
    )


def init_messaging_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """Initialize messaging services."""
    global _message_service

    _message_service = MessageService(db=db, max_message_length=settings.MAX_MESSAGE_LENGTH)


def init_notification_services(db: AsyncIOMotorDatabase) -> None:
    """Initialize notification services."""
    global _notification_service, _preferences_service

    _notification_service = NotificationService(db=db)
    _preferences_service = PreferencesService(db=db)


def init_sync_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """Initialize offline sync. Requires check-in services."""
    global _offline_queue, _sync_service

    _offline_queue = create_offline_queue(settings.OFFLINE_QUEUE_BACKEND, db=db)
    _sync_service = SyncService(
        queue=_offline_queue,
        stress_service=_stress_service,
        max_batch=settings.MAX_SYNC_BATCH,
        max_attempts=settings.MAX_SYNC_ATTEMPTS,
    )


def init_all_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """
    Initialize all services at application startup.

    Args:
        db: MongoDB database connection
        settings: Application settings
    """
    init_auth_services(settings)
    init_user_services(db)
    init_checkin_services(db, settings)
    init_booking_services(db, settings)
    init_messaging_services(db, settings)
    init_notification_services(db)
    init_sync_services(db, settings)


async def ensure_indexes() -> None:
    """Create the indexes services rely on. Safe to call on every startup."""
    await get_booking_service().ensure_indexes()
    await get_review_service().ensure_indexes()
    await get_message_service().ensure_indexes()

    ensure_queue_indexes = getattr(_offline_queue, "ensure_indexes", None)
    if ensure_queue_indexes:
        await ensure_queue_indexes()


# ─────────────────────────────────────────────────────────────────
# Auth getters
# ─────────────────────────────────────────────────────────────────

def get_auth_provider() -> AuthProvider:
    """Get token verifier instance."""
    if _auth_provider is None:
        raise RuntimeError("Auth services not initialized.")
    return _auth_provider


get_current_user_id = create_auth_dependency(get_auth_provider)


def get_user_service() -> UserService:
    """Get user service instance."""
    if _user_service is None:
        raise RuntimeError("User services not initialized.")
    return _user_service


async def require_auth(
    user_id: Annotated[str, Depends(get_current_user_id)],
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> Dict[str, Any]:
    """Dependency that requires an authenticated, active user."""
    user = await user_service.get_user(user_id)

    if not user:
        raise UnauthorizedException(message="User not found", code="USER_NOT_FOUND")

    if UserService.is_suspended(user):
        raise ForbiddenException(message="Account is suspended", code="ACCOUNT_SUSPENDED")

    return user


async def require_mentor(user: Annotated[Dict[str, Any], Depends(require_auth)]) -> Dict[str, Any]:
    """Dependency that requires the user to be a mood mentor."""
    if not UserService.is_mentor(user):
        raise ForbiddenException(message="Mood mentor access required", code="MENTOR_REQUIRED")
    return user


# ─────────────────────────────────────────────────────────────────
# Check-in getters
# ─────────────────────────────────────────────────────────────────

def get_mood_service() -> MoodService:
    """Get mood service instance."""
    if _mood_service is None:
        raise RuntimeError("Check-in services not initialized.")
    return _mood_service


def get_stress_service() -> StressService:
    """Get stress service instance."""
    if _stress_service is None:
        raise RuntimeError("Check-in services not initialized.")
    return _stress_service


def get_journal_service() -> JournalService:
    """Get journal service instance."""
    if _journal_service is None:
        raise RuntimeError("Check-in services not initialized.")
    return _journal_service


def get_checkin_analytics() -> CheckInAnalytics:
    """Get check-in analytics instance."""
    if _checkin_analytics is None:
        raise RuntimeError("Check-in services not initialized.")
    return _checkin_analytics


# ─────────────────────────────────────────────────────────────────
# Booking getters
# ─────────────────────────────────────────────────────────────────

def get_booking_service() -> BookingService:
    """Get booking service instance."""
    if _booking_service is None:
        raise RuntimeError("Booking services not initialized.")
    return _booking_service


def get_review_service() -> ReviewService:
    """Get review service instance."""
    if _review_service is None:
        raise RuntimeError("Booking services not initialized.")
    return _review_service


def get_mentor_service() -> MentorService:
    """Get mentor service instance."""
    if _mentor_service is None:
        raise RuntimeError("Booking services not initialized.")
    return _mentor_service


# ─────────────────────────────────────────────────────────────────
# Messaging / notification / sync getters
# ─────────────────────────────────────────────────────────────────

def get_message_service() -> MessageService:
    """Get message service instance."""
    if _message_service is None:
        raise RuntimeError("Messaging services not initialized.")
    return _message_service


def get_notification_service() -> NotificationService:
    """Get notification service instance."""
    if _notification_service is None:
        raise RuntimeError("Notification services not initialized.")
    return _notification_service


def get_preferences_service() -> PreferencesService:
    """Get preferences service instance."""
    if _preferences_service is None:
        raise RuntimeError("Notification services not initialized.")
    return _preferences_service


def get_sync_service() -> SyncService:
    """Get sync service instance."""
    if _sync_service is None:
        raise RuntimeError("Sync services not initialized.")
    return _sync_service
