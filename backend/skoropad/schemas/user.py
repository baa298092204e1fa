import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from skoropad.core.roles import UserRole

def _clean_nickname(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if len(value) < 3:
        raise ValueError("nickname must be at least 3 characters")
    return value

class UserCreate(BaseModel):
    nickname: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=72)

    @field_validator("nickname")
    @classmethod
    def strip_nickname(cls, value: Optional[str]) -> Optional[str]:
        return _clean_nickname(value)

class UserLogin(BaseModel):
    nickname: str
    password: str

class UserUpdate(BaseModel):
    nickname: Optional[str] = Field(None, min_length=3, max_length=50)
    password: Optional[str] = Field(None, min_length=6, max_length=72)

    @field_validator("nickname")
    @classmethod
    def strip_nickname(cls, value: Optional[str]) -> Optional[str]:
        return _clean_nickname(value)

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: uuid.UUID
    nickname: str
    role: UserRole

class UserPublic(BaseModel):
    id: uuid.UUID
    nickname: str
    role: UserRole

    model_config = ConfigDict(from_attributes=True)

class UserRead(UserPublic):
    is_banned: bool
    created_at: datetime
