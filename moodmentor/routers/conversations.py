"""
FastAPI router for patient/mentor messaging.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from common.utils import success_response, paginated_response
from moodmentor.dependencies import (
    require_auth,
    get_message_service,
    get_notification_service,
    get_user_service,
)
from moodmentor.services.messaging.message_service import MessageService
from moodmentor.services.notifications.notification_service import NotificationService
from moodmentor.services.user.user_service import UserService
from moodmentor.schemas.messaging import ConversationRequest, MessageRequest
from moodmentor.pipelines import messaging as pipelines

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("")
async def list_conversations(
    user: Annotated[dict, Depends(require_auth)],
    message_service: Annotated[MessageService, Depends(get_message_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    conversations = await pipelines.list_conversations_pipeline(message_service, user_service, user)
    return success_response(conversations)


@router.post("", status_code=201)
async def start_conversation(
    body: ConversationRequest,
    user: Annotated[dict, Depends(require_auth)],
    message_service: Annotated[MessageService, Depends(get_message_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Open the conversation with a mentor (or patient), optionally with a first message."""
    conversation = await pipelines.start_conversation_pipeline(
        message_service=message_service,
        user_service=user_service,
        notification_service=notification_service,
        user=user,
        participant_id=body.participantId,
        initial_message=body.initialMessage,
    )
    return success_response(conversation)


@router.get("/{conversation_id}/messages")
async def get_messages(
    conversation_id: str,
    user: Annotated[dict, Depends(require_auth)],
    message_service: Annotated[MessageService, Depends(get_message_service)],
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Messages in a conversation, oldest first."""
    result = await pipelines.get_messages_pipeline(message_service, user, conversation_id, limit, offset)
    return paginated_response(result["messages"], result["total"], limit, offset)


@router.post("/{conversation_id}/messages", status_code=201)
async def send_message(
    conversation_id: str,
    body: MessageRequest,
    user: Annotated[dict, Depends(require_auth)],
    message_service: Annotated[MessageService, Depends(get_message_service)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
):
    message = await pipelines.send_message_pipeline(
        message_service,
        notification_service,
        user,
        conversation_id,
        body.content,
    )
    return success_response(message)


@router.post("/{conversation_id}/read")
async def mark_conversation_read(
    conversation_id: str,
    user: Annotated[dict, Depends(require_auth)],
    message_service: Annotated[MessageService, Depends(get_message_service)],
):
    """Mark every message addressed to the user as read."""
    count = await message_service.mark_as_read(conversation_id, str(user["_id"]))
    return success_response({"markedCount": count})


@router.delete("/messages/{message_id}")
async def delete_message(
    message_id: str,
    user: Annotated[dict, Depends(require_auth)],
    message_service: Annotated[MessageService, Depends(get_message_service)],
):
    await message_service.delete_message(message_id, str(user["_id"]))
    return success_response(message="Message deleted")
