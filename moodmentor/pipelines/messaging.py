"""
Messaging pipeline functions.

Orchestrates conversations between a patient and a mood mentor and the
in-app notification sent for each new message.
"""

import logging
from typing import Optional, List, Dict, Any

from common.utils.exceptions import NotFoundException, ValidationException
from moodmentor.pipelines.formatting import iso
from moodmentor.services.messaging.message_service import MessageService
from moodmentor.services.notifications.notification_service import NotificationService
from moodmentor.services.user.user_service import UserService

logger = logging.getLogger(__name__)


async def start_conversation_pipeline(
    message_service: MessageService,
    user_service: UserService,
    notification_service: NotificationService,
    user: Dict[str, Any],
    participant_id: str,
    initial_message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Open (or reopen) the conversation between the user and another party.

    One side must be a mood mentor and the other a patient.

    Raises:
        NotFoundException: Other participant does not exist
        ValidationException: Both sides are mentors or both are patients
    """
    other = await user_service.get_user(participant_id)
    if not other:
        raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

    user_id = str(user["_id"])
    user_is_mentor = UserService.is_mentor(user)

    if user_is_mentor == UserService.is_mentor(other):
        raise ValidationException(
            message="Conversations are between a patient and a mood mentor",
            code="INVALID_CONVERSATION",
        )

    if user_is_mentor:
        conversation = await message_service.get_or_create_conversation(participant_id, user_id)
    else:
        conversation = await message_service.get_or_create_conversation(user_id, participant_id)

    if initial_message and initial_message.strip():
        await send_message_pipeline(
            message_service,
            notification_service,
            user,
            str(conversation["_id"]),
            initial_message,
        )
        conversation = await message_service.get_conversation(str(conversation["_id"]), user_id)

    return _format_conversation(conversation, other, unread=0)


async def list_conversations_pipeline(
    message_service: MessageService,
    user_service: UserService,
    user: Dict[str, Any],
) -> List[Dict[str, Any]]:
    """The user's conversations with the other party's name and unread count."""
    user_id = str(user["_id"])
    conversations = await message_service.list_conversations(user_id)

    other_ids = [MessageService.other_participant(c, user_id) for c in conversations]
    others = await user_service.get_users(other_ids)

    result = []
    for conversation, other_id in zip(conversations, other_ids):
        unread = await message_service.count_unread(str(conversation["_id"]), user_id)
        result.append(_format_conversation(conversation, others.get(other_id), unread))
    return result


async def get_messages_pipeline(
    message_service: MessageService,
    user: Dict[str, Any],
    conversation_id: str,
    limit: int = 50,
    offset: int = 0,
) -> Dict[str, Any]:
    messages = await message_service.get_messages(conversation_id, str(user["_id"]), limit=limit, offset=offset)
    total = await message_service.count_messages(conversation_id)

    return {
        "messages": [format_message(m) for m in messages],
        "total": total,
    }


async def send_message_pipeline(
    message_service: MessageService,
    notification_service: NotificationService,
    user: Dict[str, Any],
    conversation_id: str,
    content: str,
) -> Dict[str, Any]:
    """Send a message and notify the recipient."""
    message = await message_service.send_message(conversation_id, str(user["_id"]), content)

    await notification_service.create_message_notification(
        recipient_id=str(message["recipientId"]),
        sender_name=UserService.display_name(user),
        conversation_id=conversation_id,
        preview=message["content"],
    )

    return format_message(message)


def format_message(message: Dict[str, Any]) -> Dict[str, Any]:
    """Format message document for API response."""
    return {
        "id": str(message["_id"]),
        "conversationId": str(message["conversationId"]),
        "senderId": str(message["senderId"]),
        "recipientId": str(message["recipientId"]),
        "content": message["content"],
        "read": message.get("read", False),
        "createdAt": iso(message.get("createdAt")),
    }


def _format_conversation(
    conversation: Dict[str, Any],
    other: Optional[Dict[str, Any]],
    unread: int,
) -> Dict[str, Any]:
    return {
        "id": str(conversation["_id"]),
        "patientId": str(conversation["patientId"]),
        "mentorId": str(conversation["mentorId"]),
        "withName": UserService.display_name(other),
        "unreadCount": unread,
        "createdAt": iso(conversation.get("createdAt")),
        "lastMessageAt": iso(conversation.get("lastMessageAt")),
    }
