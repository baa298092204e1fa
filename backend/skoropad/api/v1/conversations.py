# backend/skoropad/api/v1/conversations.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from skoropad.core.security import get_current_user
from skoropad.db.database import get_db
from skoropad.db.models.user import User
from skoropad.schemas.messaging import (
    ConversationRead,
    ConversationStart,
    ConversationSummary,
    MarkReadResponse,
    MessageCreate,
    MessageRead,
    ReplyCreate,
    UnreadTotal,
)
from skoropad.services import messaging_service

router = APIRouter(prefix="/conversations", tags=["conversations"])
messages_router = APIRouter(prefix="/messages", tags=["conversations"])

@messages_router.post("/", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
async def send_message(
    message_in: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Sends a direct message. The conversation is resolved (or created) on the
    server from the sender, receiver and advertisement.
    """
    return await messaging_service.send_message(
        db,
        current_user,
        message_in.receiver_id,
        message_in.content,
        message_in.advertisement_id,
    )

@router.get("/", response_model=List[ConversationSummary])
async def list_conversations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await messaging_service.list_conversations(db, current_user)

@router.get("/unread", response_model=UnreadTotal)
async def unread_total(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"unread": await messaging_service.unread_total(db, current_user)}

@router.post("/start", response_model=ConversationRead)
async def start_conversation(
    start_in: ConversationStart,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Returns the existing conversation (200) or opens one with a greeting (201)."""
    conversation, created = await messaging_service.start_conversation(
        db, current_user, start_in.recipient_id, start_in.advertisement_id
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return conversation

@router.get("/{conversation_id}", response_model=ConversationRead)
async def read_conversation(
    conversation_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await messaging_service.get_conversation_for(db, conversation_id, current_user)

@router.get("/{conversation_id}/messages", response_model=List[MessageRead])
async def list_messages(
    conversation_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await messaging_service.list_messages(db, conversation_id, current_user)

@router.post("/{conversation_id}/messages", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
async def reply(
    conversation_id: uuid.UUID,
    reply_in: ReplyCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await messaging_service.reply(db, conversation_id, current_user, reply_in.content)

@router.post("/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_read(
    conversation_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await messaging_service.mark_conversation_read(db, conversation_id, current_user)

@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await messaging_service.delete_conversation(db, conversation_id, current_user)
    return None
