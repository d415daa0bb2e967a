"""
Pydantic models for bookings, reviews and mentors.
"""

from typing import Optional, Literal

from pydantic import AliasChoices, BaseModel, Field


DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}$"


class BookingRequest(BaseModel):
    """POST /api/bookings"""
    mentorId: str = Field(
        ...,
        validation_alias=AliasChoices("mentorId", "ambassadorId"),
        description="Mood mentor user ID (ambassadorId accepted for older clients)",
    )
    date: str = Field(..., pattern=DATE_PATTERN, description="YYYY-MM-DD")
    time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    notes: Optional[str] = None


class BookingUpdateRequest(BaseModel):
    """PATCH /api/bookings/{booking_id}"""
    date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    notes: Optional[str] = None
    status: Optional[Literal["pending", "confirmed", "cancelled", "completed"]] = None


class ReviewRequest(BaseModel):
    """POST /api/bookings/{booking_id}/reviews"""
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
