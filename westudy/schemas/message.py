from typing import List, Optional
from pydantic import BaseModel, Field, UUID4, field_validator
from datetime import datetime

from westudy.schemas.user import UserSummary


class ChatMessage(BaseModel):
    id: UUID4
    conversation_id: UUID4
    sender_id: UUID4
    text: str
    timestamp: datetime


class ChatConversation(BaseModel):
    id: UUID4
    listing_id: Optional[UUID4] = None
    created_at: Optional[datetime] = None
    participants: List[UserSummary] = []
    other_participant: Optional[UserSummary] = None
    last_message: Optional[ChatMessage] = None
    unread_count: int = 0


# POST /messages/conversations
class ConversationCreate(BaseModel):
    participant_ids: List[UUID4] = Field(min_length=1, max_length=10)
    listing_id: Optional[UUID4] = None


# POST /messages/conversations/{id}
class MessageCreate(BaseModel):
    content: str = Field(max_length=5000)

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message content must not be empty")
        return v
