"""
Stress assessment CRUD service.

Assessments are append-only: once recorded they are never edited.
"""

import logging
from datetime import datetime, timezone, timedelta
from typing import Optional, List, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.utils.exceptions import ValidationException
from common.utils.ids import to_object_id
from moodmentor.services.checkin.validators import CheckInValidator, clean_labels

logger = logging.getLogger(__name__)


class StressService:
    """
    Handles stress assessment storage and retrieval.
    """

    MAX_LIMIT = 100

    def __init__(self, db: AsyncIOMotorDatabase, max_notes_length: int = 1000):
        """
        Initialize StressService.

        Args:
            db: MongoDB database connection
            max_notes_length: Limit for the notes field
        """
        self._db = db
        self._collection = db["stressAssessments"]
        self._max_notes_length = max_notes_length

    async def create_assessment(
        self,
        user_id: str,
        score: float,
        symptoms: Optional[List[str]] = None,
        triggers: Optional[List[str]] = None,
        notes: Optional[str] = None,
        responses: Optional[Dict[str, Any]] = None,
        recorded_at: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Record a stress assessment.

        Args:
            user_id: Patient's user ID
            score: Stress score (0-10, stored with one decimal)
            symptoms: Reported symptoms
            triggers: Reported triggers
            notes: Optional free text
            responses: Raw questionnaire answers
            recorded_at: When the patient took the assessment (offline
                submissions arrive later than they were taken)

        Returns:
            Saved assessment document

        Raises:
            ValidationException: Invalid score, labels or notes
        """
        for is_valid, error in (
            CheckInValidator.validate_score("stress", score),
            CheckInValidator.validate_labels("symptoms", symptoms),
            CheckInValidator.validate_labels("triggers", triggers),
            CheckInValidator.validate_text("notes", notes, self._max_notes_length),
        ):
            if not is_valid:
                raise ValidationException(message=error, code="VALIDATION_ERROR")

        if responses is not None and not isinstance(responses, dict):
            raise ValidationException(message="Field 'responses' must be an object", code="VALIDATION_ERROR")

        now = datetime.now(timezone.utc)
        if recorded_at is None:
            recorded_at = now
        elif recorded_at.tzinfo is None:
            recorded_at = recorded_at.replace(tzinfo=timezone.utc)

        if recorded_at > now:
            raise ValidationException(
                message="Assessment time cannot be in the future",
                code="VALIDATION_ERROR",
            )

        assessment = {
            "userId": to_object_id(user_id, "userId"),
            "score": round(float(score), 1),
            "symptoms": clean_labels(symptoms),
            "triggers": clean_labels(triggers),
            "notes": notes.strip() if notes else "",
            "responses": responses,
            "createdAt": recorded_at,
            "updatedAt": now,
        }

        result = await self._collection.insert_one(assessment)
        assessment["_id"] = result.inserted_id

        logger.info(f"Stress assessment recorded for user {user_id}")
        return assessment

    async def list_assessments(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Get assessments newest first, optionally within [start, end].

        Args:
            user_id: Patient's user ID
            start: Inclusive lower bound on createdAt
            end: Inclusive upper bound on createdAt
            limit: Max records (capped at MAX_LIMIT); None returns all
        """
        query: Dict[str, Any] = {"userId": to_object_id(user_id, "userId")}

        if start or end:
            query["createdAt"] = {}
            if start:
                query["createdAt"]["$gte"] = start
            if end:
                query["createdAt"]["$lte"] = end

        cursor = self._collection.find(query).sort("createdAt", -1)
        if limit is not None:
            limit = min(limit, self.MAX_LIMIT)
            cursor = cursor.limit(limit)

        return await cursor.to_list(length=limit)

    async def get_assessments_for_period(self, user_id: str, days: int) -> List[Dict[str, Any]]:
        """All assessments within the last N days, newest first."""
        since = datetime.now(timezone.utc) - timedelta(days=days)
        return await self.list_assessments(user_id, start=since)
