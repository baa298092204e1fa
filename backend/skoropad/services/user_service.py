# backend/skoropad/services/user_service.py
import logging
import uuid
from datetime import timedelta
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skoropad.core.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    create_access_token,
    get_password_hash,
    verify_password,
)
from skoropad.db.models.user import User

logger = logging.getLogger(__name__)

async def get_user_by_nickname(db: AsyncSession, nickname: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.nickname == nickname))
    return result.scalar_one_or_none()

async def get_user_or_404(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user

async def register_user(db: AsyncSession, user_in) -> User:
    """
    Registration: nickname must be unique, password is stored as a bcrypt hash.
    """
    if await get_user_by_nickname(db, user_in.nickname):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Nickname is already taken")

    new_user = User(
        nickname=user_in.nickname,
        password_hash=get_password_hash(user_in.password),
    )
    db.add(new_user)
    try:
        await db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration of the same nickname
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Nickname is already taken")
    await db.refresh(new_user)
    logger.info("Registered user %s (%s)", new_user.nickname, new_user.id)
    return new_user

async def authenticate_user(db: AsyncSession, nickname: str, password: str) -> Optional[dict]:
    """
    Login: verifies credentials and issues a bearer token.
    Returns None on bad credentials; banned accounts get a 403.
    """
    user = await get_user_by_nickname(db, nickname)
    if not user or not verify_password(password, user.password_hash):
        return None

    if user.is_banned:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is banned")

    access_token = create_access_token(
        data={"sub": str(user.id)},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user_id": user.id,
        "nickname": user.nickname,
        "role": user.role,
    }

async def update_profile(db: AsyncSession, user: User, user_in) -> User:
    """Self-service update. Role and ban flag are not reachable from here."""
    data = user_in.model_dump(exclude_unset=True)

    nickname = data.get("nickname")
    if nickname and nickname != user.nickname:
        if await get_user_by_nickname(db, nickname):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Nickname is already taken")
        user.nickname = nickname

    if data.get("password"):
        user.password_hash = get_password_hash(data["password"])

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Nickname is already taken")
    await db.refresh(user)
    return user

async def search_users(db: AsyncSession, query: Optional[str] = None, limit: int = 50):
    stmt = select(User).order_by(User.created_at.desc()).limit(limit)
    if query:
        stmt = stmt.where(User.nickname.ilike(f"%{query}%"))
    result = await db.execute(stmt)
    return result.scalars().all()
