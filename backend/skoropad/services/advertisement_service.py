# backend/skoropad/services/advertisement_service.py
import logging
import uuid
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from skoropad.core.roles import Capability
from skoropad.db.models.advertisement import Advertisement
from skoropad.db.models.user import User
from skoropad.schemas.advertisement import CONTACT_REQUIRED
from skoropad.services import audit_service

logger = logging.getLogger(__name__)

def _ensure_contact(discord_contact: Optional[str], telegram_contact: Optional[str]):
    if not discord_contact and not telegram_contact:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=CONTACT_REQUIRED)

async def get_advertisement(db: AsyncSession, ad_id: uuid.UUID) -> Advertisement:
    stmt = (
        select(Advertisement)
        .options(selectinload(Advertisement.author))
        .where(Advertisement.id == ad_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    ad = result.scalar_one_or_none()
    if ad is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Advertisement not found")
    return ad

async def list_advertisements(
    db: AsyncSession,
    category: Optional[str] = None,
    subcategory: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    vip_first: bool = True,
    limit: int = 50,
    offset: int = 0,
):
    """Public listing. `search` matches title, description and author nickname."""
    stmt = select(Advertisement).join(Advertisement.author).options(selectinload(Advertisement.author))

    if category:
        stmt = stmt.where(Advertisement.category == category)
    if subcategory:
        stmt = stmt.where(Advertisement.subcategory == subcategory)
    if user_id:
        stmt = stmt.where(Advertisement.user_id == user_id)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(
                Advertisement.title.ilike(pattern),
                Advertisement.description.ilike(pattern),
                User.nickname.ilike(pattern),
            )
        )

    order = [Advertisement.created_at.desc(), Advertisement.id]
    if vip_first:
        order.insert(0, Advertisement.is_vip.desc())
    stmt = stmt.order_by(*order).offset(offset).limit(limit)

    result = await db.execute(stmt)
    return result.scalars().all()

async def create_advertisement(db: AsyncSession, author: User, ad_in) -> Advertisement:
    """
    Creates a listing owned by `author`. Authors whose role grants VIP
    listings start out promoted; afterwards the flag is managed separately.
    """
    _ensure_contact(ad_in.discord_contact, ad_in.telegram_contact)

    ad = Advertisement(
        user_id=author.id,
        category=ad_in.category,
        subcategory=ad_in.subcategory,
        title=ad_in.title,
        description=ad_in.description,
        images=list(ad_in.images),
        discord_contact=ad_in.discord_contact,
        telegram_contact=ad_in.telegram_contact,
        price=ad_in.price,
        is_vip=author.role.can(Capability.VIP_LISTINGS),
    )
    db.add(ad)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=CONTACT_REQUIRED)

    logger.info("Advertisement %s created by %s", ad.id, author.id)
    return await get_advertisement(db, ad.id)

async def update_advertisement(db: AsyncSession, user: User, ad_id: uuid.UUID, ad_in) -> Advertisement:
    ad = await get_advertisement(db, ad_id)
    if ad.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only edit your own advertisements")

    data = ad_in.model_dump(exclude_unset=True)
    discord_contact = data.get("discord_contact", ad.discord_contact)
    telegram_contact = data.get("telegram_contact", ad.telegram_contact)
    _ensure_contact(discord_contact, telegram_contact)

    for key, value in data.items():
        setattr(ad, key, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=CONTACT_REQUIRED)
    return await get_advertisement(db, ad_id)

async def delete_advertisement(db: AsyncSession, user: User, ad_id: uuid.UUID):
    """
    Owners delete their own listings. Staff may delete any listing; that
    path is audited like the panel action.
    """
    ad = await get_advertisement(db, ad_id)
    is_owner = ad.user_id == user.id
    if not is_owner and not user.role.can(Capability.MANAGE_ADVERTISEMENTS):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only delete your own advertisements")

    details = {
        "advertisement_id": str(ad.id),
        "advertisement_title": ad.title,
        "advertisement_author": ad.author.nickname if ad.author else None,
    }
    owner_id = ad.user_id

    await db.delete(ad)
    await db.commit()
    logger.info("Advertisement %s deleted by %s", ad_id, user.id)

    if not is_owner:
        await audit_service.record_action(db, user.id, "delete_advertisement", owner_id, details)
