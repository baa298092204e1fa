# backend/skoropad/api/v1/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from skoropad.db.database import get_db
from skoropad.schemas.user import UserCreate, UserLogin, UserRead, Token
from skoropad.services import user_service

router = APIRouter()

def _bad_credentials():
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Incorrect nickname or password",
        headers={"WWW-Authenticate": "Bearer"},
    )

@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(user_in: UserCreate, db: AsyncSession = Depends(get_db)):
    """Registration. Returns the created profile."""
    return await user_service.register_user(db, user_in)

@router.post("/login", response_model=Token)
async def login(user_in: UserLogin, db: AsyncSession = Depends(get_db)):
    auth_result = await user_service.authenticate_user(db, user_in.nickname, user_in.password)
    if not auth_result:
        raise _bad_credentials()
    return auth_result

@router.post("/token", response_model=Token)
async def login_form(form: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    """OAuth2 password flow, used by the Swagger UI Authorize button."""
    auth_result = await user_service.authenticate_user(db, form.username, form.password)
    if not auth_result:
        raise _bad_credentials()
    return auth_result
