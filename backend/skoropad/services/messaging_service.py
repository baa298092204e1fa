# backend/skoropad/services/messaging_service.py
import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skoropad.db.database_redis import RedisManager
from skoropad.db.models.advertisement import Advertisement
from skoropad.db.models.conversation import Conversation, Message
from skoropad.db.models.user import User

logger = logging.getLogger(__name__)

GREETING_MESSAGE = "Hi! I'm interested in your advertisement."


def canonical_pair(user_a: uuid.UUID, user_b: uuid.UUID) -> Tuple[uuid.UUID, uuid.UUID]:
    """
    Orders two participants so the same pair always maps to one row.
    uuid.UUID ordering matches PostgreSQL's byte-wise uuid ordering.
    """
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


def _conversation_lookup(user1_id: uuid.UUID, user2_id: uuid.UUID, advertisement_id: Optional[uuid.UUID]):
    return select(Conversation).where(
        Conversation.user1_id == user1_id,
        Conversation.user2_id == user2_id,
        # NULL-safe: two "no advertisement" conversations must match
        Conversation.advertisement_id.is_not_distinct_from(advertisement_id),
    )


async def find_conversation(
    db: AsyncSession,
    user_a: uuid.UUID,
    user_b: uuid.UUID,
    advertisement_id: Optional[uuid.UUID] = None,
) -> Optional[Conversation]:
    user1_id, user2_id = canonical_pair(user_a, user_b)
    result = await db.execute(_conversation_lookup(user1_id, user2_id, advertisement_id))
    return result.scalar_one_or_none()


async def resolve_conversation(
    db: AsyncSession,
    user_a: uuid.UUID,
    user_b: uuid.UUID,
    advertisement_id: Optional[uuid.UUID] = None,
) -> Conversation:
    """
    Lookup-or-create for (canonical pair, advertisement).

    Creation runs in a SAVEPOINT. If a concurrent request created the same
    conversation first, the unique constraints reject our insert, the
    savepoint is rolled back and the winner's row is returned instead.
    The caller's transaction stays open.
    """
    conversation = await find_conversation(db, user_a, user_b, advertisement_id)
    if conversation is not None:
        return conversation

    user1_id, user2_id = canonical_pair(user_a, user_b)
    conversation = Conversation(
        user1_id=user1_id,
        user2_id=user2_id,
        advertisement_id=advertisement_id,
        user1_unread_count=0,
        user2_unread_count=0,
    )
    try:
        async with db.begin_nested():
            db.add(conversation)
    except IntegrityError:
        winner = await find_conversation(db, user_a, user_b, advertisement_id)
        if winner is None:
            raise
        logger.info(
            "[Messaging] Conversation %s/%s (ad=%s) created concurrently, reusing %s",
            user1_id, user2_id, advertisement_id, winner.id,
        )
        return winner

    logger.info("[Messaging] Created conversation %s for %s/%s (ad=%s)", conversation.id, user1_id, user2_id, advertisement_id)
    return conversation


async def send_message(
    db: AsyncSession,
    sender: User,
    receiver_id: uuid.UUID,
    content: str,
    advertisement_id: Optional[uuid.UUID] = None,
) -> Message:
    """
    Stores a message and keeps its conversation consistent, as one unit of work:
    1. resolve (or create) the conversation for the canonical pair
    2. insert the message already attached to it
    3. move last_message_id and bump the receiver's unread counter
    Then publishes a best-effort notification to the receiver.
    """
    content = (content or "").strip()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message content is empty")
    if receiver_id == sender.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot send a message to yourself")

    receiver = await db.get(User, receiver_id)
    if receiver is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receiver not found")
    if advertisement_id is not None and await db.get(Advertisement, advertisement_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Advertisement not found")

    conversation = await resolve_conversation(db, sender.id, receiver_id, advertisement_id)

    message = Message(
        id=uuid.uuid4(),
        conversation_id=conversation.id,
        sender_id=sender.id,
        receiver_id=receiver_id,
        advertisement_id=advertisement_id,
        content=content,
        is_read=False,
    )
    db.add(message)
    await db.flush()

    values = {"last_message_id": message.id, "updated_at": datetime.utcnow()}
    # increment in SQL so concurrent senders never lose an update
    if receiver_id == conversation.user1_id:
        values["user1_unread_count"] = Conversation.user1_unread_count + 1
    else:
        values["user2_unread_count"] = Conversation.user2_unread_count + 1
    await db.execute(
        update(Conversation)
        .where(Conversation.id == conversation.id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )

    await db.commit()
    await db.refresh(conversation)
    await db.refresh(message)

    await _notify_receiver(sender, message)
    return message


async def _notify_receiver(sender: User, message: Message):
    payload = {
        "type": "NEW_MESSAGE",
        "conversation_id": str(message.conversation_id),
        "message_id": str(message.id),
        "from_user_id": str(sender.id),
        "sender_nickname": sender.nickname,
        "message": message.content,
        "created_at": message.created_at.isoformat(),
    }
    try:
        await RedisManager.publish_chat_notification(message.receiver_id, payload)
    except Exception as e:
        logger.warning("[Messaging] Redis publish failed (%s -> %s): %s", sender.id, message.receiver_id, e)


async def start_conversation(
    db: AsyncSession,
    sender: User,
    recipient_id: uuid.UUID,
    advertisement_id: Optional[uuid.UUID] = None,
) -> Tuple[Conversation, bool]:
    """
    Opens the conversation with `recipient_id` about an advertisement.
    An existing conversation is returned as is; otherwise the greeting
    message is sent, which creates it. Returns (conversation, created).
    """
    if recipient_id == sender.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot start a conversation with yourself")

    existing = await find_conversation(db, sender.id, recipient_id, advertisement_id)
    if existing is not None:
        return existing, False

    message = await send_message(db, sender, recipient_id, GREETING_MESSAGE, advertisement_id)
    conversation = await db.get(Conversation, message.conversation_id)
    return conversation, True


async def get_conversation_for(db: AsyncSession, conversation_id: uuid.UUID, user: User) -> Conversation:
    """Non-participants get a 404, as if the row did not exist."""
    conversation = await db.get(Conversation, conversation_id)
    if conversation is None or not conversation.has_participant(user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return conversation


async def reply(db: AsyncSession, conversation_id: uuid.UUID, sender: User, content: str) -> Message:
    """Sends to the other participant, keeping the conversation's advertisement."""
    conversation = await get_conversation_for(db, conversation_id, sender)
    return await send_message(
        db,
        sender,
        conversation.other_participant(sender.id),
        content,
        conversation.advertisement_id,
    )


async def list_messages(db: AsyncSession, conversation_id: uuid.UUID, user: User) -> List[Message]:
    await get_conversation_for(db, conversation_id, user)
    stmt = (
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.asc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def mark_conversation_read(db: AsyncSession, conversation_id: uuid.UUID, user: User) -> dict:
    """
    Flips the participant's unread messages and zeroes their counter slot.
    Both updates commit together, so flags and counter cannot disagree.
    """
    conversation = await get_conversation_for(db, conversation_id, user)

    flipped = await db.execute(
        update(Message)
        .where(
            Message.conversation_id == conversation.id,
            Message.receiver_id == user.id,
            Message.is_read.is_(False),
        )
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )

    slot = "user1_unread_count" if user.id == conversation.user1_id else "user2_unread_count"
    await db.execute(
        update(Conversation)
        .where(Conversation.id == conversation.id)
        .values({slot: 0})
        .execution_options(synchronize_session=False)
    )

    await db.commit()
    await db.refresh(conversation)
    return {
        "conversation_id": conversation.id,
        "messages_marked": flipped.rowcount or 0,
        "unread_count": conversation.unread_count_for(user.id),
    }


async def list_conversations(db: AsyncSession, user: User) -> List[dict]:
    """
    The user's conversations, most recent activity first, each with the other
    participant's public profile, advertisement title, the caller's unread
    count and the last message.
    """
    stmt = (
        select(Conversation)
        .where(or_(Conversation.user1_id == user.id, Conversation.user2_id == user.id))
        .order_by(Conversation.updated_at.desc())
    )
    conversations = (await db.execute(stmt)).scalars().all()
    if not conversations:
        return []

    other_ids = {c.other_participant(user.id) for c in conversations}
    ad_ids = {c.advertisement_id for c in conversations if c.advertisement_id}
    last_ids = {c.last_message_id for c in conversations if c.last_message_id}

    users = {u.id: u for u in (await db.execute(select(User).where(User.id.in_(other_ids)))).scalars()}
    titles = {}
    if ad_ids:
        rows = await db.execute(select(Advertisement.id, Advertisement.title).where(Advertisement.id.in_(ad_ids)))
        titles = {ad_id: title for ad_id, title in rows}
    last_messages = {}
    if last_ids:
        last_messages = {m.id: m for m in (await db.execute(select(Message).where(Message.id.in_(last_ids)))).scalars()}

    summaries = []
    for c in conversations:
        summaries.append({
            "id": c.id,
            "user1_id": c.user1_id,
            "user2_id": c.user2_id,
            "advertisement_id": c.advertisement_id,
            "last_message_id": c.last_message_id,
            "user1_unread_count": c.user1_unread_count,
            "user2_unread_count": c.user2_unread_count,
            "created_at": c.created_at,
            "updated_at": c.updated_at,
            "other_user": users.get(c.other_participant(user.id)),
            "advertisement_title": titles.get(c.advertisement_id),
            "unread_count": c.unread_count_for(user.id),
            "last_message": last_messages.get(c.last_message_id),
        })
    return summaries


async def unread_total(db: AsyncSession, user: User) -> int:
    stmt = select(
        func.coalesce(
            func.sum(
                case(
                    (Conversation.user1_id == user.id, Conversation.user1_unread_count),
                    else_=Conversation.user2_unread_count,
                )
            ),
            0,
        )
    ).where(or_(Conversation.user1_id == user.id, Conversation.user2_id == user.id))
    return int((await db.execute(stmt)).scalar_one())


async def delete_conversation(db: AsyncSession, conversation_id: uuid.UUID, user: User):
    conversation = await get_conversation_for(db, conversation_id, user)
    await db.execute(delete(Message).where(Message.conversation_id == conversation.id))
    await db.execute(delete(Conversation).where(Conversation.id == conversation.id))
    await db.commit()
    logger.info("[Messaging] Conversation %s deleted by %s", conversation_id, user.id)
