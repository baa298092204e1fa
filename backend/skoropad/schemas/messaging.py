import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from skoropad.schemas.user import UserPublic

class MessageCreate(BaseModel):
    # conversation_id is resolved by the server, never accepted from the client
    receiver_id: uuid.UUID
    advertisement_id: Optional[uuid.UUID] = None
    content: str = Field(..., min_length=1, max_length=4000)

class ReplyCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)

class ConversationStart(BaseModel):
    recipient_id: uuid.UUID
    advertisement_id: Optional[uuid.UUID] = None

class MessageRead(BaseModel):
    id: uuid.UUID
    conversation_id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    advertisement_id: Optional[uuid.UUID] = None
    content: str
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class ConversationRead(BaseModel):
    id: uuid.UUID
    user1_id: uuid.UUID
    user2_id: uuid.UUID
    advertisement_id: Optional[uuid.UUID] = None
    last_message_id: Optional[uuid.UUID] = None
    user1_unread_count: int
    user2_unread_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class ConversationSummary(ConversationRead):
    other_user: Optional[UserPublic] = None
    advertisement_title: Optional[str] = None
    unread_count: int = 0
    last_message: Optional[MessageRead] = None

class MarkReadResponse(BaseModel):
    conversation_id: uuid.UUID
    messages_marked: int
    unread_count: int

class UnreadTotal(BaseModel):
    unread: int
