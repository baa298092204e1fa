# backend/skoropad/db/models/conversation.py
import uuid
from sqlalchemy import Integer, Text, Boolean, DateTime, ForeignKey, Uuid, UniqueConstraint, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import Optional, List, TYPE_CHECKING
from skoropad.db.database import Base

if TYPE_CHECKING:
    from skoropad.db.models.advertisement import Advertisement

class Conversation(Base):
    """
    One row per (canonical pair, advertisement). user1_id is always the
    smaller id of the pair.
    """
    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("user1_id", "user2_id", "advertisement_id", name="uq_conversations_pair_ad"),
        # NULLs are distinct in the constraint above, so "no advertisement"
        # conversations need their own partial index.
        Index(
            "uq_conversations_pair_no_ad",
            "user1_id",
            "user2_id",
            unique=True,
            postgresql_where=text("advertisement_id IS NULL"),
            sqlite_where=text("advertisement_id IS NULL"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user1_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    user2_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    advertisement_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("advertisements.id", ondelete="CASCADE"), nullable=True, index=True
    )

    # plain column: messages already reference conversations
    last_message_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    user1_unread_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    user2_unread_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    advertisement: Mapped[Optional["Advertisement"]] = relationship("Advertisement")
    messages: Mapped[List["Message"]] = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )

    def has_participant(self, user_id: uuid.UUID) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def other_participant(self, user_id: uuid.UUID) -> uuid.UUID:
        return self.user2_id if user_id == self.user1_id else self.user1_id

    def unread_count_for(self, user_id: uuid.UUID) -> int:
        return self.user1_unread_count if user_id == self.user1_id else self.user2_unread_count


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    conversation_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    receiver_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    advertisement_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("advertisements.id", ondelete="CASCADE"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    conversation: Mapped["Conversation"] = relationship("Conversation", back_populates="messages")
