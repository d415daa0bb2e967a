"""Unit tests for BookingService, ReviewService and MentorService."""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from common.utils.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from moodmentor.services.bookings.booking_service import BookingService
from moodmentor.services.bookings.mentor_service import MentorService, satisfaction_percentage
from moodmentor.services.bookings.review_service import ReviewService


NOW = datetime(2024, 3, 14, 12, 0, tzinfo=timezone.utc)


# ─────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def mentor_id():
    return str(ObjectId())


@pytest.fixture
def booking_service(mock_db):
    return BookingService(mock_db, slots=["10:00", "09:00"], timezone_name="UTC")


@pytest.fixture
def pending_booking(sample_user_id, mentor_id):
    return {
        "_id": ObjectId(),
        "userId": ObjectId(sample_user_id),
        "mentorId": ObjectId(mentor_id),
        "date": "2024-03-20",
        "time": "09:00",
        "notes": "",
        "status": "pending",
        "active": True,
    }


# ─────────────────────────────────────────────────────────────────
# Availability
# ─────────────────────────────────────────────────────────────────


class TestAvailability:
    def test_slots_are_sorted(self, booking_service):
        assert booking_service.slots == ["09:00", "10:00"]

    @pytest.mark.asyncio
    async def test_booked_slots_are_excluded(self, booking_service, mock_collection, cursor_factory, mentor_id):
        mock_collection.find.return_value = cursor_factory([{"time": "09:00"}])

        slots = await booking_service.get_available_slots(mentor_id, "2024-03-15", now=NOW)

        assert slots == ["10:00"]
        query = mock_collection.find.call_args[0][0]
        assert query["status"] == {"$ne": "cancelled"}

    @pytest.mark.asyncio
    async def test_past_slots_are_excluded(self, booking_service, mock_collection, cursor_factory, mentor_id):
        mock_collection.find.return_value = cursor_factory([])

        slots = await booking_service.get_available_slots(mentor_id, "2024-03-14", now=NOW)

        assert slots == []

    @pytest.mark.asyncio
    async def test_bad_date_rejected(self, booking_service, mentor_id):
        with pytest.raises(ValidationException):
            await booking_service.get_available_slots(mentor_id, "15/03/2024", now=NOW)

    def test_slot_time_uses_booking_zone(self, mock_db):
        service = BookingService(mock_db, slots=["09:00"], timezone_name="Europe/Stockholm")

        assert service.to_datetime("2024-03-15", "09:00") == datetime(2024, 3, 15, 8, 0, tzinfo=timezone.utc)


# ─────────────────────────────────────────────────────────────────
# create_booking
# ─────────────────────────────────────────────────────────────────


class TestCreateBooking:
    @pytest.mark.asyncio
    async def test_creates_pending_booking(self, booking_service, mock_collection, sample_user_id, mentor_id):
        mock_collection.find_one.return_value = None
        mock_collection.insert_one.return_value = MagicMock(inserted_id=ObjectId())

        booking = await booking_service.create_booking(
            sample_user_id, mentor_id, "2024-03-15", "10:00", notes=" first session ", now=NOW
        )

        assert booking["status"] == "pending"
        assert booking["active"] is True
        assert booking["mentorId"] == ObjectId(mentor_id)
        assert booking["notes"] == "first session"

    @pytest.mark.asyncio
    async def test_slot_not_offered(self, booking_service, sample_user_id, mentor_id):
        with pytest.raises(ValidationException) as exc_info:
            await booking_service.create_booking(sample_user_id, mentor_id, "2024-03-15", "09:30", now=NOW)

        assert exc_info.value.code == "INVALID_SLOT"

    @pytest.mark.asyncio
    async def test_slot_in_past(self, booking_service, sample_user_id, mentor_id):
        with pytest.raises(ValidationException) as exc_info:
            await booking_service.create_booking(sample_user_id, mentor_id, "2024-03-14", "10:00", now=NOW)

        assert exc_info.value.code == "SLOT_IN_PAST"

    @pytest.mark.asyncio
    async def test_cannot_book_yourself(self, booking_service, sample_user_id):
        with pytest.raises(ValidationException) as exc_info:
            await booking_service.create_booking(sample_user_id, sample_user_id, "2024-03-15", "10:00", now=NOW)

        assert exc_info.value.code == "INVALID_BOOKING"

    @pytest.mark.asyncio
    async def test_taken_slot_conflicts(self, booking_service, mock_collection, sample_user_id, mentor_id):
        mock_collection.find_one.return_value = {"_id": ObjectId()}

        with pytest.raises(ConflictException) as exc_info:
            await booking_service.create_booking(sample_user_id, mentor_id, "2024-03-15", "10:00", now=NOW)

        assert exc_info.value.code == "SLOT_UNAVAILABLE"
        mock_collection.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_insert_conflicts(self, booking_service, mock_collection, sample_user_id, mentor_id):
        mock_collection.find_one.return_value = None
        mock_collection.insert_one.side_effect = DuplicateKeyError("active_slot_unique")

        with pytest.raises(ConflictException) as exc_info:
            await booking_service.create_booking(sample_user_id, mentor_id, "2024-03-15", "10:00", now=NOW)

        assert exc_info.value.code == "SLOT_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_ensure_indexes_guards_active_slots(self, booking_service, mock_collection):
        await booking_service.ensure_indexes()

        first = mock_collection.create_index.call_args_list[0]
        assert first.kwargs["unique"] is True
        assert first.kwargs["partialFilterExpression"] == {"active": True}


# ─────────────────────────────────────────────────────────────────
# update_booking
# ─────────────────────────────────────────────────────────────────


class TestUpdateBooking:
    @pytest.mark.asyncio
    async def test_booking_not_found(self, booking_service, mock_collection, sample_user_id):
        mock_collection.find_one.return_value = None

        with pytest.raises(NotFoundException) as exc_info:
            await booking_service.update_booking(str(ObjectId()), sample_user_id, {"status": "cancelled"})

        assert exc_info.value.code == "BOOKING_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_mentor_confirms(self, booking_service, mock_collection, pending_booking, mentor_id):
        mock_collection.find_one.return_value = pending_booking
        mock_collection.find_one_and_update.return_value = {**pending_booking, "status": "confirmed"}

        updated = await booking_service.update_booking(
            str(pending_booking["_id"]), mentor_id, {"status": "confirmed"}, now=NOW
        )

        assert updated["status"] == "confirmed"
        query, update = mock_collection.find_one_and_update.call_args[0]
        assert query == {"_id": pending_booking["_id"], "status": "pending"}
        assert update["$set"]["status"] == "confirmed"
        assert update["$set"]["active"] is True

    @pytest.mark.asyncio
    async def test_patient_cannot_confirm(self, booking_service, mock_collection, pending_booking, sample_user_id):
        mock_collection.find_one.return_value = pending_booking

        with pytest.raises(ForbiddenException) as exc_info:
            await booking_service.update_booking(
                str(pending_booking["_id"]), sample_user_id, {"status": "confirmed"}, now=NOW
            )

        assert exc_info.value.code == "STATUS_CHANGE_NOT_ALLOWED"

    @pytest.mark.asyncio
    async def test_pending_cannot_complete(self, booking_service, mock_collection, pending_booking, mentor_id):
        mock_collection.find_one.return_value = pending_booking

        with pytest.raises(ConflictException) as exc_info:
            await booking_service.update_booking(
                str(pending_booking["_id"]), mentor_id, {"status": "completed"}, now=NOW
            )

        assert exc_info.value.code == "INVALID_STATUS_TRANSITION"

    @pytest.mark.asyncio
    async def test_closed_booking_is_final(self, booking_service, mock_collection, pending_booking, mentor_id):
        mock_collection.find_one.return_value = {**pending_booking, "status": "cancelled"}

        with pytest.raises(ConflictException) as exc_info:
            await booking_service.update_booking(
                str(pending_booking["_id"]), mentor_id, {"status": "confirmed"}, now=NOW
            )

        assert exc_info.value.code == "BOOKING_CLOSED"

    @pytest.mark.asyncio
    async def test_cancel_releases_slot(self, booking_service, mock_collection, pending_booking, sample_user_id):
        mock_collection.find_one.return_value = pending_booking
        mock_collection.find_one_and_update.return_value = {**pending_booking, "status": "cancelled"}

        await booking_service.cancel_booking(str(pending_booking["_id"]), sample_user_id)

        update = mock_collection.find_one_and_update.call_args[0][1]["$set"]
        assert update["status"] == "cancelled"
        assert update["active"] is False

    @pytest.mark.asyncio
    async def test_reschedule_checks_new_slot(self, booking_service, mock_collection, pending_booking, sample_user_id):
        mock_collection.find_one.side_effect = [pending_booking, None]
        mock_collection.find_one_and_update.return_value = pending_booking

        await booking_service.update_booking(
            str(pending_booking["_id"]), sample_user_id, {"date": "2024-03-21", "time": "10:00"}, now=NOW
        )

        availability_query = mock_collection.find_one.call_args_list[1][0][0]
        assert availability_query["_id"] == {"$ne": pending_booking["_id"]}
        update = mock_collection.find_one_and_update.call_args[0][1]["$set"]
        assert update["date"] == "2024-03-21"
        assert update["time"] == "10:00"

    @pytest.mark.asyncio
    async def test_reschedule_and_cancel_rejected(self, booking_service, mock_collection, pending_booking, sample_user_id):
        mock_collection.find_one.return_value = pending_booking

        with pytest.raises(ValidationException):
            await booking_service.update_booking(
                str(pending_booking["_id"]),
                sample_user_id,
                {"status": "cancelled", "date": "2024-03-21"},
                now=NOW,
            )

    @pytest.mark.asyncio
    async def test_no_changes_returns_booking(self, booking_service, mock_collection, pending_booking, sample_user_id):
        mock_collection.find_one.return_value = pending_booking

        result = await booking_service.update_booking(
            str(pending_booking["_id"]), sample_user_id, {"status": "pending", "date": "2024-03-20"}, now=NOW
        )

        assert result is pending_booking
        mock_collection.find_one_and_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_change_detected(self, booking_service, mock_collection, pending_booking, mentor_id):
        mock_collection.find_one.return_value = pending_booking
        mock_collection.find_one_and_update.return_value = None

        with pytest.raises(ConflictException) as exc_info:
            await booking_service.update_booking(
                str(pending_booking["_id"]), mentor_id, {"status": "confirmed"}, now=NOW
            )

        assert exc_info.value.code == "BOOKING_CHANGED"

    @pytest.mark.asyncio
    async def test_has_relationship(self, booking_service, mock_collection, sample_user_id, mentor_id):
        mock_collection.count_documents.return_value = 1

        assert await booking_service.has_relationship(mentor_id, sample_user_id) is True
        assert mock_collection.count_documents.call_args.kwargs["limit"] == 1


# ─────────────────────────────────────────────────────────────────
# ReviewService
# ─────────────────────────────────────────────────────────────────


class TestReviewService:
    @pytest.fixture
    def review_service(self, multi_db):
        return ReviewService(multi_db)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 6, 4.5, True])
    async def test_rating_must_be_one_to_five(self, review_service, collections, sample_user_id, rating):
        with pytest.raises(ValidationException):
            await review_service.create_review(str(ObjectId()), sample_user_id, rating)

        collections["bookings"].find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_booking_must_be_completed(self, review_service, collections, pending_booking, sample_user_id):
        collections["bookings"].find_one.return_value = pending_booking

        with pytest.raises(ValidationException) as exc_info:
            await review_service.create_review(str(pending_booking["_id"]), sample_user_id, 5)

        assert exc_info.value.code == "REVIEW_NOT_ALLOWED"

    @pytest.mark.asyncio
    async def test_one_review_per_booking(self, review_service, collections, pending_booking, sample_user_id):
        collections["bookings"].find_one.return_value = {**pending_booking, "status": "completed"}
        collections["reviews"].find_one.return_value = {"_id": ObjectId()}

        with pytest.raises(ConflictException) as exc_info:
            await review_service.create_review(str(pending_booking["_id"]), sample_user_id, 5)

        assert exc_info.value.code == "REVIEW_EXISTS"

    @pytest.mark.asyncio
    async def test_creates_review_for_mentor(self, review_service, collections, pending_booking, sample_user_id, mentor_id):
        collections["bookings"].find_one.return_value = {**pending_booking, "status": "completed"}
        collections["reviews"].find_one.return_value = None
        collections["reviews"].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        review = await review_service.create_review(
            str(pending_booking["_id"]), sample_user_id, 4, comment=" Helpful "
        )

        assert review["mentorId"] == ObjectId(mentor_id)
        assert review["rating"] == 4
        assert review["comment"] == "Helpful"

    @pytest.mark.asyncio
    async def test_rating_summary_defaults(self, review_service, collections, mentor_id):
        summary = await review_service.get_rating_summary(mentor_id)

        assert summary == {"average": 0, "count": 0}

    @pytest.mark.asyncio
    async def test_rating_summaries_keyed_by_mentor(self, review_service, collections, cursor_factory, mentor_id):
        collections["reviews"].aggregate.return_value = cursor_factory(
            [{"_id": ObjectId(mentor_id), "average": 4.5, "count": 2}]
        )

        summaries = await review_service.get_rating_summaries([mentor_id])

        assert summaries == {mentor_id: {"average": 4.5, "count": 2}}


# ─────────────────────────────────────────────────────────────────
# MentorService
# ─────────────────────────────────────────────────────────────────


class TestMentorService:
    @pytest.fixture
    def patient_ids(self):
        return [str(ObjectId()) for _ in range(3)]

    @pytest.fixture
    def mentor_bookings(self, patient_ids):
        a, b, c = (ObjectId(p) for p in patient_ids)
        return [
            {"userId": a, "date": "2024-03-20", "time": "09:00", "status": "confirmed"},
            {"userId": a, "date": "2024-03-10", "time": "09:00", "status": "completed"},
            {"userId": b, "date": "2024-03-21", "time": "10:00", "status": "cancelled"},
            {"userId": c, "date": "2024-03-22", "time": "09:00", "status": "pending"},
        ]

    @pytest.fixture
    def user_service(self):
        return MagicMock()

    @pytest.fixture
    def review_service(self):
        service = MagicMock()
        service.get_rating_summary = AsyncMock(return_value={"average": 4.5, "count": 2})
        return service

    @pytest.fixture
    def mentor_service(self, user_service, booking_service, review_service, mentor_bookings):
        booking_service.list_bookings = AsyncMock(return_value=mentor_bookings)
        return MentorService(user_service, booking_service, review_service)

    def test_satisfaction_percentage(self):
        assert satisfaction_percentage(4.5) == 90
        assert satisfaction_percentage(0) == 0
        assert satisfaction_percentage(None) == 0

    @pytest.mark.asyncio
    async def test_get_stats(self, mentor_service, mentor_id):
        stats = await mentor_service.get_stats(mentor_id, now=NOW)

        assert stats == {
            "patientsCount": 3,
            "appointmentsCount": 1,
            "ratingPercentage": 90,
            "reviewsCount": 2,
        }

    @pytest.mark.asyncio
    async def test_get_clients(self, mentor_service, user_service, patient_ids, mentor_id):
        a, b, c = patient_ids
        user_service.get_users = AsyncMock(return_value={
            a: {"name": "Anna Svensson", "email": "anna@example.com"},
            b: {"email": "erik@example.com"},
        })

        clients = await mentor_service.get_clients(mentor_id, now=NOW)

        first = clients[0]
        assert first["id"] == a
        assert first["fullName"] == "Anna Svensson"
        assert first["lastSession"] == datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc)
        assert first["nextSession"] == datetime(2024, 3, 20, 9, 0, tzinfo=timezone.utc)
        assert first["totalSessions"] == 2
        assert first["status"] == "active"

        others = {client["id"]: client for client in clients[1:]}
        assert others[b]["fullName"] == "erik@example.com"
        assert others[b]["nextSession"] is None
        assert others[b]["status"] == "inactive"
        assert others[c]["fullName"] == "Unknown user"
        assert others[c]["email"] is None
        assert others[c]["status"] == "inactive"

    @pytest.mark.asyncio
    async def test_list_mentors(self, user_service, booking_service):
        rated, unrated = ObjectId(), ObjectId()
        user_service.get_mentors = AsyncMock(return_value=[
            {"_id": rated, "name": "Dr. Lind", "bio": "CBT", "specialty": "Anxiety"},
            {"_id": unrated, "name": "Sam"},
        ])
        review_service = MagicMock()
        review_service.get_rating_summaries = AsyncMock(
            return_value={str(rated): {"average": 4.26, "count": 5}}
        )
        service = MentorService(user_service, booking_service, review_service)

        mentors = await service.list_mentors()

        assert mentors[0] == {
            "id": str(rated),
            "name": "Dr. Lind",
            "bio": "CBT",
            "specialty": "Anxiety",
            "rating": 4.3,
            "totalRatings": 5,
            "satisfaction": 85,
        }
        assert mentors[1]["rating"] == 0
        assert mentors[1]["satisfaction"] == 0
