# backend/skoropad/services/audit_service.py
import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from skoropad.db.models.admin_log import AdminLog

logger = logging.getLogger(__name__)

async def record_action(
    db: AsyncSession,
    admin_id: uuid.UUID,
    action: str,
    target_user_id: Optional[uuid.UUID] = None,
    details: Optional[dict] = None,
) -> Optional[AdminLog]:
    """
    Appends an audit record in its own transaction, after the primary
    mutation has committed. Failures are logged and swallowed: the primary
    action is never rolled back because of the audit trail.
    """
    entry = AdminLog(
        admin_id=admin_id,
        action=action,
        target_user_id=target_user_id,
        details=details or {},
    )
    try:
        db.add(entry)
        await db.commit()
    except Exception as e:
        logger.warning("[Audit] Failed to log action %s by %s: %s", action, admin_id, e)
        await db.rollback()
        return None

    logger.info("[Audit] %s by %s (target=%s)", action, admin_id, target_user_id)
    return entry

async def list_logs(db: AsyncSession, limit: int = 50, offset: int = 0):
    stmt = (
        select(AdminLog)
        .options(selectinload(AdminLog.admin), selectinload(AdminLog.target_user))
        .order_by(AdminLog.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return result.scalars().all()

def to_read_dict(entry: AdminLog) -> dict:
    return {
        "id": entry.id,
        "admin_id": entry.admin_id,
        "action": entry.action,
        "target_user_id": entry.target_user_id,
        "details": entry.details or {},
        "created_at": entry.created_at,
        "admin_nickname": entry.admin.nickname if entry.admin else None,
        "target_nickname": entry.target_user.nickname if entry.target_user else None,
    }
