"""
FastAPI router for mood mentor endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response
from moodmentor.dependencies import (
    require_auth,
    get_mentor_service,
    get_review_service,
    get_user_service,
)
from moodmentor.services.bookings.mentor_service import MentorService
from moodmentor.services.bookings.review_service import ReviewService
from moodmentor.services.user.user_service import UserService
from moodmentor.pipelines import bookings as pipelines

router = APIRouter(prefix="/mood-mentors", tags=["mood-mentors"])


@router.get("")
async def list_mentors(
    user: Annotated[dict, Depends(require_auth)],
    mentor_service: Annotated[MentorService, Depends(get_mentor_service)],
):
    """All mood mentors with rating and satisfaction figures."""
    mentors = await mentor_service.list_mentors()
    return success_response(mentors)


@router.get("/{mentor_id}/stats")
async def get_mentor_stats(
    mentor_id: str,
    user: Annotated[dict, Depends(require_auth)],
    mentor_service: Annotated[MentorService, Depends(get_mentor_service)],
):
    """Dashboard figures; a mentor can only see their own."""
    stats = await pipelines.get_mentor_stats_pipeline(mentor_service, user, mentor_id)
    return success_response(stats)


@router.get("/{mentor_id}/clients")
async def get_mentor_clients(
    mentor_id: str,
    user: Annotated[dict, Depends(require_auth)],
    mentor_service: Annotated[MentorService, Depends(get_mentor_service)],
):
    clients = await pipelines.get_mentor_clients_pipeline(mentor_service, user, mentor_id)
    return success_response(clients)


@router.get("/{mentor_id}/reviews")
async def get_mentor_reviews(
    mentor_id: str,
    user: Annotated[dict, Depends(require_auth)],
    review_service: Annotated[ReviewService, Depends(get_review_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    result = await pipelines.list_reviews_pipeline(review_service, user_service, mentor_id)
    return success_response(result)
