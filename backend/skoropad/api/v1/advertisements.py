# backend/skoropad/api/v1/advertisements.py
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from skoropad.core.security import get_current_user
from skoropad.db.database import get_db
from skoropad.db.models.user import User
from skoropad.schemas.advertisement import (
    AdvertisementCreate,
    AdvertisementRead,
    AdvertisementUpdate,
    ImageUploadResponse,
)
from skoropad.services import advertisement_service, storage_service

router = APIRouter(prefix="/advertisements", tags=["advertisements"])

@router.get("/", response_model=List[AdvertisementRead])
async def list_advertisements(
    category: Optional[str] = None,
    subcategory: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None,
    q: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Public listing, VIP listings first, then newest."""
    return await advertisement_service.list_advertisements(
        db,
        category=category,
        subcategory=subcategory,
        user_id=user_id,
        search=q,
        limit=limit,
        offset=offset,
    )

@router.post("/", response_model=AdvertisementRead, status_code=status.HTTP_201_CREATED)
async def create_advertisement(
    ad_in: AdvertisementCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await advertisement_service.create_advertisement(db, current_user, ad_in)

@router.post("/images", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
):
    """Stores one listing image and returns the URL to put in `images`."""
    return await storage_service.save_image(file)

@router.get("/{ad_id}", response_model=AdvertisementRead)
async def read_advertisement(ad_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await advertisement_service.get_advertisement(db, ad_id)

@router.patch("/{ad_id}", response_model=AdvertisementRead)
async def update_advertisement(
    ad_id: uuid.UUID,
    ad_in: AdvertisementUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await advertisement_service.update_advertisement(db, current_user, ad_id, ad_in)

@router.delete("/{ad_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_advertisement(
    ad_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await advertisement_service.delete_advertisement(db, current_user, ad_id)
    return None
