# backend/skoropad/services/admin_service.py
import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from skoropad.core.roles import Capability, UserRole, ensure_assignable_role, ensure_can_act_on, require_capability
from skoropad.db.models.advertisement import Advertisement
from skoropad.db.models.user import User
from skoropad.services import advertisement_service, audit_service, user_service

logger = logging.getLogger(__name__)

# --- User actions ---

async def _set_banned(db: AsyncSession, actor: User, target_id: uuid.UUID, banned: bool) -> User:
    require_capability(actor.role, Capability.BAN_USERS)
    target = await user_service.get_user_or_404(db, target_id)
    ensure_can_act_on(actor, target)

    target.is_banned = banned
    await db.commit()

    action = "ban" if banned else "unban"
    logger.info("[Admin] %s: %s -> %s", action, actor.nickname, target.nickname)
    await audit_service.record_action(
        db, actor.id, action, target.id,
        {"action": action, "target_nickname": target.nickname},
    )
    # a failed audit append rolls the session back and expires target
    await db.refresh(target)
    return target

async def ban_user(db: AsyncSession, actor: User, target_id: uuid.UUID) -> User:
    return await _set_banned(db, actor, target_id, True)

async def unban_user(db: AsyncSession, actor: User, target_id: uuid.UUID) -> User:
    return await _set_banned(db, actor, target_id, False)

async def change_role(db: AsyncSession, actor: User, target_id: uuid.UUID, new_role: UserRole) -> User:
    require_capability(actor.role, Capability.CHANGE_ROLES)
    ensure_assignable_role(new_role)
    target = await user_service.get_user_or_404(db, target_id)
    ensure_can_act_on(actor, target)

    previous_role = target.role
    target.role = new_role
    await db.commit()

    action = f"role_to_{new_role.value}"
    logger.info("[Admin] %s: %s -> %s (%s)", action, actor.nickname, target.nickname, previous_role.value)
    await audit_service.record_action(
        db, actor.id, action, target.id,
        {
            "action": "role",
            "new_role": new_role.value,
            "previous_role": previous_role.value,
            "target_nickname": target.nickname,
        },
    )
    await db.refresh(target)
    return target

# --- Advertisement actions ---

def _advertisement_details(ad: Advertisement) -> dict:
    return {
        "advertisement_id": str(ad.id),
        "advertisement_title": ad.title,
        "advertisement_author": ad.author.nickname if ad.author else None,
    }

async def delete_advertisement(db: AsyncSession, actor: User, ad_id: uuid.UUID):
    require_capability(actor.role, Capability.MANAGE_ADVERTISEMENTS)
    ad = await advertisement_service.get_advertisement(db, ad_id)
    details = _advertisement_details(ad)
    owner_id = ad.user_id

    await db.delete(ad)
    await db.commit()

    logger.info("[Admin] delete_advertisement %s by %s", ad_id, actor.nickname)
    await audit_service.record_action(db, actor.id, "delete_advertisement", owner_id, details)

async def set_advertisement_vip(db: AsyncSession, actor: User, ad_id: uuid.UUID, is_vip: bool) -> Advertisement:
    require_capability(actor.role, Capability.MANAGE_ADVERTISEMENTS)
    ad = await advertisement_service.get_advertisement(db, ad_id)

    ad.is_vip = is_vip
    await db.commit()

    action = "promote_advertisement" if is_vip else "demote_advertisement"
    logger.info("[Admin] %s %s by %s", action, ad_id, actor.nickname)
    await audit_service.record_action(db, actor.id, action, ad.user_id, _advertisement_details(ad))
    return await advertisement_service.get_advertisement(db, ad_id)

# --- Panel reads ---

async def list_users(db: AsyncSession, actor: User, search: Optional[str] = None, limit: int = 200):
    require_capability(actor.role, Capability.ENTER_PANEL)
    return await user_service.search_users(db, search, limit=limit)

async def list_advertisements(db: AsyncSession, actor: User, search: Optional[str] = None, limit: int = 200):
    require_capability(actor.role, Capability.ENTER_PANEL)
    return await advertisement_service.list_advertisements(db, search=search, vip_first=False, limit=limit)

async def list_logs(db: AsyncSession, actor: User, limit: int = 50):
    require_capability(actor.role, Capability.VIEW_AUDIT_LOG)
    entries = await audit_service.list_logs(db, limit=limit)
    return [audit_service.to_read_dict(e) for e in entries]

async def get_stats(db: AsyncSession, actor: User) -> dict:
    require_capability(actor.role, Capability.ENTER_PANEL)

    async def count(stmt) -> int:
        return int((await db.execute(stmt)).scalar_one())

    return {
        "total_users": await count(select(func.count(User.id))),
        "total_ads": await count(select(func.count(Advertisement.id))),
        "vip_users": await count(select(func.count(User.id)).where(User.role == UserRole.VIP)),
        "banned_users": await count(select(func.count(User.id)).where(User.is_banned.is_(True))),
    }

async def export_data(db: AsyncSession, actor: User) -> dict:
    """
    Panel snapshot. Password hashes are never included; the audit log only
    for actors allowed to read it.
    """
    require_capability(actor.role, Capability.ENTER_PANEL)
    users = await user_service.search_users(db, limit=10_000)
    ads = await advertisement_service.list_advertisements(db, vip_first=False, limit=10_000)
    logs = []
    if actor.role.can(Capability.VIEW_AUDIT_LOG):
        logs = [audit_service.to_read_dict(e) for e in await audit_service.list_logs(db, limit=10_000)]
    return {
        "users": users,
        "advertisements": ads,
        "logs": logs,
        "timestamp": datetime.utcnow(),
    }
