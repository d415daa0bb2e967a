"""
Booking service for mentor sessions.

Handles slot availability, booking creation, rescheduling and status
changes between a patient and a mood mentor.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from common.utils.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from common.utils.ids import to_object_id
from moodmentor.services.checkin.consistency import resolve_timezone

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
STATUS_COMPLETED = "completed"

BOOKING_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_CANCELLED, STATUS_COMPLETED)
FINAL_STATUSES = (STATUS_CANCELLED, STATUS_COMPLETED)

# (from, to) -> roles allowed to make the change
STATUS_TRANSITIONS = {
    (STATUS_PENDING, STATUS_CONFIRMED): ("mentor",),
    (STATUS_PENDING, STATUS_CANCELLED): ("mentor", "patient"),
    (STATUS_CONFIRMED, STATUS_CANCELLED): ("mentor", "patient"),
    (STATUS_CONFIRMED, STATUS_COMPLETED): ("mentor",),
}

MAX_NOTES_LENGTH = 1000


class BookingService:
    """
    Manages session bookings.

    A booking occupies its (mentor, date, time) slot until it is
    cancelled. The slot is guarded by a unique partial index on active
    bookings so two concurrent requests cannot both take it.
    """

    DATE_FORMAT = "%Y-%m-%d"
    TIME_FORMAT = "%H:%M"

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        slots: List[str],
        timezone_name: str = "UTC",
    ):
        """
        Initialize BookingService.

        Args:
            db: MongoDB database connection
            slots: Bookable start times (HH:MM)
            timezone_name: Zone the date/time of a booking is expressed in
        """
        self._db = db
        self._collection = db["bookings"]
        self._slots = sorted(slots)
        self._tz = resolve_timezone(timezone_name)

    @property
    def slots(self) -> List[str]:
        return list(self._slots)

    async def ensure_indexes(self) -> None:
        """Create the slot uniqueness index (idempotent)."""
        await self._collection.create_index(
            [("mentorId", ASCENDING), ("date", ASCENDING), ("time", ASCENDING)],
            unique=True,
            partialFilterExpression={"active": True},
            name="active_slot_unique",
        )
        await self._collection.create_index([("userId", ASCENDING), ("date", ASCENDING)])

    # ─────────────────────────────────────────────────────────────────
    # Availability
    # ─────────────────────────────────────────────────────────────────

    async def get_available_slots(
        self,
        mentor_id: str,
        date: str,
        now: Optional[datetime] = None,
    ) -> List[str]:
        """
        Configured slots on a day minus those already booked.

        Slots already in the past are left out too.

        Args:
            mentor_id: Mentor's user ID
            date: Day as YYYY-MM-DD
            now: Reference time (defaults to current time)
        """
        self._parse_date(date)

        cursor = self._collection.find({
            "mentorId": to_object_id(mentor_id, "mentorId"),
            "date": date,
            "status": {"$ne": STATUS_CANCELLED},
        })
        booked = {b["time"] for b in await cursor.to_list(length=None)}

        now = now or datetime.now(timezone.utc)
        return [
            slot for slot in self._slots
            if slot not in booked and self.to_datetime(date, slot) > now
        ]

    async def is_slot_available(
        self,
        mentor_id: str,
        date: str,
        time: str,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        query: Dict[str, Any] = {
            "mentorId": to_object_id(mentor_id, "mentorId"),
            "date": date,
            "time": time,
            "status": {"$ne": STATUS_CANCELLED},
        }
        if exclude_booking_id:
            query["_id"] = {"$ne": to_object_id(exclude_booking_id, "bookingId")}

        return await self._collection.find_one(query) is None

    # ─────────────────────────────────────────────────────────────────
    # CRUD
    # ─────────────────────────────────────────────────────────────────

    async def create_booking(
        self,
        user_id: str,
        mentor_id: str,
        date: str,
        time: str,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Book a session for a patient.

        Raises:
            ValidationException: Bad date/time, slot not offered or in the past
            ConflictException: Slot already taken
        """
        if user_id == mentor_id:
            raise ValidationException(message="You cannot book a session with yourself", code="INVALID_BOOKING")

        self._validate_slot(date, time, now)
        self._validate_notes(notes)

        if not await self.is_slot_available(mentor_id, date, time):
            raise ConflictException(message="This time slot is no longer available", code="SLOT_UNAVAILABLE")

        created_at = datetime.now(timezone.utc)
        booking = {
            "userId": to_object_id(user_id, "userId"),
            "mentorId": to_object_id(mentor_id, "mentorId"),
            "date": date,
            "time": time,
            "notes": notes.strip() if notes else "",
            "status": STATUS_PENDING,
            "active": True,
            "createdAt": created_at,
            "updatedAt": created_at,
        }

        try:
            result = await self._collection.insert_one(booking)
        except DuplicateKeyError:
            raise ConflictException(message="This time slot is no longer available", code="SLOT_UNAVAILABLE")

        booking["_id"] = result.inserted_id

        logger.info(f"Booking created for user {user_id} with mentor {mentor_id} on {date} {time}")
        return booking

    async def get_booking(self, booking_id: str, user_id: str) -> Dict[str, Any]:
        """
        Get a booking the user takes part in (as patient or mentor).

        Raises:
            NotFoundException: Booking missing or user not a party to it
        """
        uid = to_object_id(user_id, "userId")
        booking = await self._collection.find_one({
            "_id": to_object_id(booking_id, "bookingId"),
            "$or": [{"userId": uid}, {"mentorId": uid}],
        })
        if not booking:
            raise NotFoundException(message="Booking not found", code="BOOKING_NOT_FOUND")
        return booking

    async def list_bookings(
        self,
        user_id: str,
        as_mentor: bool = False,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Bookings for a patient (their own) or a mentor (with them), latest first.
        """
        field = "mentorId" if as_mentor else "userId"
        query: Dict[str, Any] = {field: to_object_id(user_id, "userId")}

        if status:
            if status not in BOOKING_STATUSES:
                raise ValidationException(message=f"Unknown status: {status}", code="VALIDATION_ERROR")
            query["status"] = status

        cursor = self._collection.find(query).sort([("date", -1), ("time", -1)])
        return await cursor.to_list(length=None)

    async def update_booking(
        self,
        booking_id: str,
        user_id: str,
        changes: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Reschedule, edit notes or change the status of a booking.

        Args:
            booking_id: Booking ID
            user_id: Acting user (patient or mentor on the booking)
            changes: Any of date, time, notes, status

        Raises:
            ConflictException: Booking is final, or new slot is taken
            ForbiddenException: Status change not allowed for this party
        """
        booking = await self.get_booking(booking_id, user_id)
        role = "mentor" if str(booking["mentorId"]) == user_id else "patient"

        if booking["status"] in FINAL_STATUSES:
            raise ConflictException(
                message=f"Booking is already {booking['status']}",
                code="BOOKING_CLOSED",
            )

        updates: Dict[str, Any] = {}

        new_status = changes.get("status")
        if new_status and new_status != booking["status"]:
            self._check_transition(booking["status"], new_status, role)
            updates["status"] = new_status
            updates["active"] = new_status != STATUS_CANCELLED

        new_date = changes.get("date") or booking["date"]
        new_time = changes.get("time") or booking["time"]
        if (new_date, new_time) != (booking["date"], booking["time"]):
            if updates.get("status") == STATUS_CANCELLED:
                raise ValidationException(
                    message="Cannot reschedule and cancel in one request",
                    code="VALIDATION_ERROR",
                )
            self._validate_slot(new_date, new_time, now)
            if not await self.is_slot_available(str(booking["mentorId"]), new_date, new_time, booking_id):
                raise ConflictException(message="This time slot is no longer available", code="SLOT_UNAVAILABLE")
            updates["date"] = new_date
            updates["time"] = new_time

        if "notes" in changes:
            self._validate_notes(changes["notes"])
            updates["notes"] = (changes["notes"] or "").strip()

        if not updates:
            return booking

        updates["updatedAt"] = datetime.now(timezone.utc)

        try:
            updated = await self._collection.find_one_and_update(
                {"_id": booking["_id"], "status": booking["status"]},
                {"$set": updates},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictException(message="This time slot is no longer available", code="SLOT_UNAVAILABLE")

        if not updated:
            raise ConflictException(message="Booking was changed by someone else", code="BOOKING_CHANGED")

        logger.info(f"Booking {booking_id} updated by {role} {user_id}: {sorted(updates)}")
        return updated

    async def cancel_booking(self, booking_id: str, user_id: str) -> Dict[str, Any]:
        """Cancel a booking; either party may cancel while it is open."""
        return await self.update_booking(booking_id, user_id, {"status": STATUS_CANCELLED})

    async def has_relationship(self, mentor_id: str, patient_id: str) -> bool:
        """True if the mentor has at least one booking with the patient."""
        count = await self._collection.count_documents(
            {
                "mentorId": to_object_id(mentor_id, "mentorId"),
                "userId": to_object_id(patient_id, "patientId"),
            },
            limit=1,
        )
        return count > 0

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    def to_datetime(self, date: str, time: str) -> datetime:
        """Start of a slot as an aware UTC datetime."""
        naive = datetime.strptime(f"{date} {time}", f"{self.DATE_FORMAT} {self.TIME_FORMAT}")
        if hasattr(self._tz, "localize"):
            local = self._tz.localize(naive)
        else:
            local = naive.replace(tzinfo=self._tz)
        return local.astimezone(timezone.utc)

    def session_datetime(self, booking: Dict[str, Any]) -> datetime:
        return self.to_datetime(booking["date"], booking["time"])

    def _check_transition(self, current: str, new: str, role: str) -> None:
        if new not in BOOKING_STATUSES:
            raise ValidationException(message=f"Unknown status: {new}", code="VALIDATION_ERROR")

        allowed = STATUS_TRANSITIONS.get((current, new))
        if allowed is None:
            raise ConflictException(
                message=f"Cannot change booking from {current} to {new}",
                code="INVALID_STATUS_TRANSITION",
            )
        if role not in allowed:
            raise ForbiddenException(
                message=f"Only the mentor can mark a booking {new}",
                code="STATUS_CHANGE_NOT_ALLOWED",
            )

    def _parse_date(self, date: str) -> None:
        try:
            datetime.strptime(date, self.DATE_FORMAT)
        except (TypeError, ValueError):
            raise ValidationException(message="Date must be YYYY-MM-DD", code="VALIDATION_ERROR")

    def _validate_slot(self, date: str, time: str, now: Optional[datetime]) -> None:
        self._parse_date(date)

        if time not in self._slots:
            raise ValidationException(
                message=f"Time must be one of: {', '.join(self._slots)}",
                code="INVALID_SLOT",
            )

        now = now or datetime.now(timezone.utc)
        if self.to_datetime(date, time) <= now:
            raise ValidationException(message="Cannot book a slot in the past", code="SLOT_IN_PAST")

    def _validate_notes(self, notes: Optional[str]) -> None:
        if notes is None:
            return
        if not isinstance(notes, str):
            raise ValidationException(message="Field 'notes' must be a string", code="VALIDATION_ERROR")
        if len(notes.strip()) > MAX_NOTES_LENGTH:
            raise ValidationException(
                message=f"Field 'notes' cannot exceed {MAX_NOTES_LENGTH} characters",
                code="VALIDATION_ERROR",
            )
