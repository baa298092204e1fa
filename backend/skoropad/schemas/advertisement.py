import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from skoropad.schemas.user import UserPublic

CONTACT_REQUIRED = "At least one contact (Discord or Telegram) is required"

def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None

class AdvertisementBase(BaseModel):
    category: str = Field(..., min_length=1, max_length=100)
    subcategory: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    images: List[str] = []
    discord_contact: Optional[str] = Field(None, max_length=100)
    telegram_contact: Optional[str] = Field(None, max_length=100)
    price: Optional[float] = Field(None, ge=0)

class AdvertisementCreate(AdvertisementBase):
    @field_validator("discord_contact", "telegram_contact")
    @classmethod
    def normalize_contact(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def check_contact(self):
        if self.discord_contact is None and self.telegram_contact is None:
            raise ValueError(CONTACT_REQUIRED)
        return self

class AdvertisementUpdate(BaseModel):
    """Partial update; the contact rule is checked against the merged row."""
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, min_length=1, max_length=100)
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    images: Optional[List[str]] = None
    discord_contact: Optional[str] = Field(None, max_length=100)
    telegram_contact: Optional[str] = Field(None, max_length=100)
    price: Optional[float] = Field(None, ge=0)

    @field_validator("category", "subcategory", "title", "description", "images")
    @classmethod
    def reject_null(cls, value):
        # omit a field to keep it; these columns are NOT NULL
        if value is None:
            raise ValueError("field cannot be null")
        return value

    @field_validator("discord_contact", "telegram_contact")
    @classmethod
    def normalize_contact(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)

class AdvertisementRead(AdvertisementBase):
    id: uuid.UUID
    user_id: uuid.UUID
    is_vip: bool
    created_at: datetime
    author: Optional[UserPublic] = None

    model_config = ConfigDict(from_attributes=True)

class ImageUploadResponse(BaseModel):
    url: str
    content_type: str
    size: int
