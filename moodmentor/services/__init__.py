"""
MoodMentor Services.

All service classes organized by feature.
"""

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
from moodmentor.services.sync.offline_queue import OfflineQueue, MongoOfflineQueue, InMemoryOfflineQueue
from moodmentor.services.sync.sync_service import SyncService
