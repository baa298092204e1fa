# backend/skoropad/api/v1/admin.py
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from skoropad.core.roles import Capability, require_capability
from skoropad.core.security import get_current_user
from skoropad.db.database import get_db
from skoropad.db.models.user import User
from skoropad.schemas.admin import AdminLogRead, DataExport, PanelStats, RoleChange, VipChange
from skoropad.schemas.advertisement import AdvertisementRead
from skoropad.schemas.user import UserRead
from skoropad.services import admin_service

router = APIRouter(prefix="/admin", tags=["admin"])

async def get_panel_user(current_user: User = Depends(get_current_user)) -> User:
    """Only moderators and admins may use the panel."""
    require_capability(current_user.role, Capability.ENTER_PANEL)
    return current_user

@router.get("/stats", response_model=PanelStats)
async def get_stats(actor: User = Depends(get_panel_user), db: AsyncSession = Depends(get_db)):
    return await admin_service.get_stats(db, actor)

@router.get("/users", response_model=List[UserRead])
async def list_users(
    search: Optional[str] = None,
    actor: User = Depends(get_panel_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.list_users(db, actor, search)

@router.post("/users/{user_id}/ban", response_model=UserRead)
async def ban_user(user_id: uuid.UUID, actor: User = Depends(get_panel_user), db: AsyncSession = Depends(get_db)):
    return await admin_service.ban_user(db, actor, user_id)

@router.post("/users/{user_id}/unban", response_model=UserRead)
async def unban_user(user_id: uuid.UUID, actor: User = Depends(get_panel_user), db: AsyncSession = Depends(get_db)):
    return await admin_service.unban_user(db, actor, user_id)

@router.put("/users/{user_id}/role", response_model=UserRead)
async def change_role(
    user_id: uuid.UUID,
    role_in: RoleChange,
    actor: User = Depends(get_panel_user),
    db: AsyncSession = Depends(get_db),
):
    """Admins only. Other admins cannot be modified."""
    return await admin_service.change_role(db, actor, user_id, role_in.role)

@router.get("/advertisements", response_model=List[AdvertisementRead])
async def list_advertisements(
    search: Optional[str] = None,
    actor: User = Depends(get_panel_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.list_advertisements(db, actor, search)

@router.delete("/advertisements/{ad_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_advertisement(ad_id: uuid.UUID, actor: User = Depends(get_panel_user), db: AsyncSession = Depends(get_db)):
    await admin_service.delete_advertisement(db, actor, ad_id)
    return None

@router.put("/advertisements/{ad_id}/vip", response_model=AdvertisementRead)
async def set_advertisement_vip(
    ad_id: uuid.UUID,
    vip_in: VipChange,
    actor: User = Depends(get_panel_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.set_advertisement_vip(db, actor, ad_id, vip_in.is_vip)

@router.get("/logs", response_model=List[AdminLogRead])
async def list_logs(
    limit: int = Query(50, ge=1, le=500),
    actor: User = Depends(get_panel_user),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.list_logs(db, actor, limit)

@router.get("/export", response_model=DataExport)
async def export_data(actor: User = Depends(get_panel_user), db: AsyncSession = Depends(get_db)):
    return await admin_service.export_data(db, actor)
