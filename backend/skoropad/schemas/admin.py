import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict

from skoropad.core.roles import UserRole
from skoropad.schemas.user import UserRead
from skoropad.schemas.advertisement import AdvertisementRead

class RoleChange(BaseModel):
    role: UserRole

class VipChange(BaseModel):
    is_vip: bool

class AdminLogRead(BaseModel):
    id: uuid.UUID
    admin_id: Optional[uuid.UUID] = None
    action: str
    target_user_id: Optional[uuid.UUID] = None
    details: Dict[str, Any] = {}
    created_at: datetime
    admin_nickname: Optional[str] = None
    target_nickname: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class PanelStats(BaseModel):
    total_users: int
    total_ads: int
    vip_users: int
    banned_users: int

class DataExport(BaseModel):
    users: List[UserRead]
    advertisements: List[AdvertisementRead]
    logs: List[AdminLogRead]
    timestamp: datetime
