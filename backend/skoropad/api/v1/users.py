import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from skoropad.core.security import get_current_user
from skoropad.db.database import get_db
from skoropad.db.models.user import User
from skoropad.schemas.user import UserPublic, UserRead, UserUpdate
from skoropad.services import user_service

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/me", response_model=UserRead)
async def read_me(current_user: User = Depends(get_current_user)):
    return current_user

@router.patch("/me", response_model=UserRead)
async def update_me(
    user_in: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Updates the caller's nickname and/or password."""
    return await user_service.update_profile(db, current_user, user_in)

@router.get("/", response_model=List[UserPublic])
async def list_users(query: Optional[str] = None, db: AsyncSession = Depends(get_db)):
    return await user_service.search_users(db, query)

@router.get("/{user_id}", response_model=UserPublic)
async def read_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await user_service.get_user_or_404(db, user_id)
