import uuid
from decimal import Decimal
from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, Numeric, JSON, Uuid, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import Optional, List, TYPE_CHECKING
from skoropad.db.database import Base

if TYPE_CHECKING:
    from skoropad.db.models.user import User

class Advertisement(Base):
    __tablename__ = "advertisements"
    __table_args__ = (
        CheckConstraint(
            "discord_contact IS NOT NULL OR telegram_contact IS NOT NULL",
            name="ck_advertisements_contact",
        ),
        Index("ix_advertisements_category_subcategory", "category", "subcategory"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    subcategory: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    images: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)  # ordered image URLs

    discord_contact: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    telegram_contact: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    is_vip: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    author: Mapped["User"] = relationship("User", back_populates="advertisements")

    def __str__(self) -> str:
        return self.title
