"""
Pydantic schemas for API request/response validation.
"""

from moodmentor.schemas.checkin import *
from moodmentor.schemas.bookings import *
from moodmentor.schemas.messaging import *
from moodmentor.schemas.notifications import *
from moodmentor.schemas.sync import *
