"""
MoodMentor API Routers.

All routers are included under the configured API prefix.
"""

from moodmentor.routers.checkin import mood_router, stress_router, journal_router
from moodmentor.routers.patients import router as patients_router
from moodmentor.routers.bookings import router as bookings_router
from moodmentor.routers.mentors import router as mentors_router
from moodmentor.routers.conversations import router as conversations_router
from moodmentor.routers.notifications import router as notifications_router
from moodmentor.routers.sync import router as sync_router

all_routers = [
    mood_router,
    stress_router,
    journal_router,
    patients_router,
    bookings_router,
    mentors_router,
    conversations_router,
    notifications_router,
    sync_router,
]
