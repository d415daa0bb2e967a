"""
Patient/mentor messaging service.

One conversation per (patient, mentor) pair (collection: conversations),
one document per message (collection: messages).
"""

import logging
from datetime import datetime, timezone
from typing import List, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument

from common.utils.exceptions import ForbiddenException, NotFoundException, ValidationException
from common.utils.ids import to_object_id

logger = logging.getLogger(__name__)


class MessageService:
    """Handles conversations and the messages inside them."""

    MAX_LIMIT = 100

    def __init__(self, db: AsyncIOMotorDatabase, max_message_length: int = 2000):
        self._db = db
        self._conversations = db["conversations"]
        self._messages = db["messages"]
        self._max_message_length = max_message_length

    async def ensure_indexes(self) -> None:
        await self._conversations.create_index(
            [("patientId", ASCENDING), ("mentorId", ASCENDING)],
            unique=True,
        )
        await self._messages.create_index([("conversationId", ASCENDING), ("createdAt", ASCENDING)])

    async def get_or_create_conversation(self, patient_id: str, mentor_id: str) -> Dict[str, Any]:
        """Return the pair's conversation, creating it on first contact."""
        if patient_id == mentor_id:
            raise ValidationException(message="Cannot start a conversation with yourself", code="INVALID_CONVERSATION")

        now = datetime.now(timezone.utc)
        pair = {
            "patientId": to_object_id(patient_id, "patientId"),
            "mentorId": to_object_id(mentor_id, "mentorId"),
        }

        conversation = await self._conversations.find_one_and_update(
            pair,
            {"$setOnInsert": {**pair, "createdAt": now, "lastMessageAt": None}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

        logger.debug(f"Conversation {conversation['_id']} ready for patient {patient_id} and mentor {mentor_id}")
        return conversation

    async def get_conversation(self, conversation_id: str, user_id: str) -> Dict[str, Any]:
        """
        Get a conversation the user takes part in.

        Raises:
            NotFoundException: Conversation does not exist
            ForbiddenException: User is not a participant
        """
        conversation = await self._conversations.find_one({
            "_id": to_object_id(conversation_id, "conversationId"),
        })
        if not conversation:
            raise NotFoundException(message="Conversation not found", code="CONVERSATION_NOT_FOUND")

        if user_id not in self.participants(conversation):
            raise ForbiddenException(
                message="You are not part of this conversation",
                code="NOT_A_PARTICIPANT",
            )
        return conversation

    async def list_conversations(self, user_id: str) -> List[Dict[str, Any]]:
        """Conversations the user is in, most recently active first."""
        uid = to_object_id(user_id, "userId")
        cursor = self._conversations.find({"$or": [{"patientId": uid}, {"mentorId": uid}]})
        cursor = cursor.sort([("lastMessageAt", -1), ("createdAt", -1)])
        return await cursor.to_list(length=None)

    async def send_message(self, conversation_id: str, sender_id: str, content: str) -> Dict[str, Any]:
        """
        Post a message; the recipient is the other participant.

        Raises:
            ValidationException: Empty or overlong content
        """
        content = content.strip() if content else ""

        if not content:
            raise ValidationException(message="Message content cannot be empty", code="EMPTY_MESSAGE")

        if len(content) > self._max_message_length:
            raise ValidationException(
                message=f"Message cannot exceed {self._max_message_length} characters",
                code="MESSAGE_TOO_LONG",
            )

        conversation = await self.get_conversation(conversation_id, sender_id)
        recipient_id = self.other_participant(conversation, sender_id)

        now = datetime.now(timezone.utc)
        message = {
            "conversationId": conversation["_id"],
            "senderId": to_object_id(sender_id, "senderId"),
            "recipientId": to_object_id(recipient_id, "recipientId"),
            "content": content,
            "read": False,
            "createdAt": now,
        }

        result = await self._messages.insert_one(message)
        message["_id"] = result.inserted_id

        await self._conversations.update_one(
            {"_id": conversation["_id"]},
            {"$set": {"lastMessageAt": now}},
        )

        logger.info(f"Message sent in conversation {conversation_id} by user {sender_id}")
        return message

    async def get_messages(
        self,
        conversation_id: str,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Messages in a conversation, oldest first."""
        conversation = await self.get_conversation(conversation_id, user_id)
        limit = min(limit, self.MAX_LIMIT)

        cursor = self._messages.find({"conversationId": conversation["_id"]})
        cursor = cursor.sort("createdAt", 1).skip(offset).limit(limit)
        return await cursor.to_list(length=limit)

    async def count_messages(self, conversation_id: str) -> int:
        return await self._messages.count_documents({
            "conversationId": to_object_id(conversation_id, "conversationId"),
        })

    async def count_unread(self, conversation_id: str, user_id: str) -> int:
        return await self._messages.count_documents({
            "conversationId": to_object_id(conversation_id, "conversationId"),
            "recipientId": to_object_id(user_id, "userId"),
            "read": False,
        })

    async def mark_as_read(self, conversation_id: str, user_id: str) -> int:
        """
        Mark every message addressed to the user in a conversation as read.

        Returns:
            Number of messages marked
        """
        conversation = await self.get_conversation(conversation_id, user_id)

        result = await self._messages.update_many(
            {
                "conversationId": conversation["_id"],
                "recipientId": to_object_id(user_id, "userId"),
                "read": False,
            },
            {"$set": {"read": True, "readAt": datetime.now(timezone.utc)}},
        )

        logger.info(f"Marked {result.modified_count} messages as read in conversation {conversation_id} for user {user_id}")
        return result.modified_count

    async def delete_message(self, message_id: str, user_id: str) -> None:
        """Delete a message; only its sender may do so."""
        message = await self._messages.find_one({"_id": to_object_id(message_id, "messageId")})
        if not message:
            raise NotFoundException(message="Message not found", code="MESSAGE_NOT_FOUND")

        if str(message["senderId"]) != user_id:
            raise ForbiddenException(message="You can only delete your own messages", code="NOT_MESSAGE_SENDER")

        await self._messages.delete_one({"_id": message["_id"]})
        logger.info(f"Message {message_id} deleted by user {user_id}")

    @staticmethod
    def participants(conversation: Dict[str, Any]) -> List[str]:
        return [str(conversation["patientId"]), str(conversation["mentorId"])]

    @staticmethod
    def other_participant(conversation: Dict[str, Any], user_id: str) -> str:
        patient_id, mentor_id = MessageService.participants(conversation)
        return mentor_id if user_id == patient_id else patient_id
