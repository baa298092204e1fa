# backend/skoropad/db/models/user.py
import uuid
from sqlalchemy import String, Boolean, DateTime, Enum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from skoropad.db.database import Base
from skoropad.core.roles import UserRole
from datetime import datetime
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from skoropad.db.models.advertisement import Advertisement

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    nickname: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        default=UserRole.USER,
        nullable=False,
        index=True,
    )
    is_banned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    advertisements: Mapped[List["Advertisement"]] = relationship(
        "Advertisement",
        back_populates="author",
        cascade="all, delete-orphan",
    )

    def __str__(self) -> str:
        return self.nickname
