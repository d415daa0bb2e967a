"""
Pydantic models for conversations and messages.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class ConversationRequest(BaseModel):
    """POST /api/conversations"""
    participantId: str = Field(
        ...,
        validation_alias=AliasChoices("participantId", "mentorId", "patientId", "ambassadorId"),
        description="The other participant's user ID",
    )
    initialMessage: Optional[str] = None


class MessageRequest(BaseModel):
    """POST /api/conversations/{conversation_id}/messages"""
    content: str = Field(..., min_length=1)
