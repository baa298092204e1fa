# backend/skoropad/core/roles.py
import enum
from typing import FrozenSet

from fastapi import HTTPException, status


class UserRole(str, enum.Enum):
    USER = "user"
    VIP = "vip"
    MODERATOR = "moderator"
    ADMIN = "admin"
    LEGEND = "Legend"

    @property
    def tier(self) -> int:
        return ROLE_TIERS[self]

    @property
    def capabilities(self) -> FrozenSet["Capability"]:
        return ROLE_CAPABILITIES[self]

    def can(self, capability: "Capability") -> bool:
        return capability in ROLE_CAPABILITIES[self]


class Capability(str, enum.Enum):
    ENTER_PANEL = "enter_panel"
    BAN_USERS = "ban_users"
    MANAGE_ADVERTISEMENTS = "manage_advertisements"
    VIEW_AUDIT_LOG = "view_audit_log"
    CHANGE_ROLES = "change_roles"
    VIP_LISTINGS = "vip_listings"


# Legend is a display tier on par with vip; it carries no panel rights.
ROLE_TIERS = {
    UserRole.USER: 0,
    UserRole.VIP: 1,
    UserRole.LEGEND: 1,
    UserRole.MODERATOR: 2,
    UserRole.ADMIN: 3,
}

_STAFF = frozenset({
    Capability.ENTER_PANEL,
    Capability.BAN_USERS,
    Capability.MANAGE_ADVERTISEMENTS,
    Capability.VIP_LISTINGS,
})

ROLE_CAPABILITIES = {
    UserRole.USER: frozenset(),
    UserRole.VIP: frozenset({Capability.VIP_LISTINGS}),
    UserRole.LEGEND: frozenset({Capability.VIP_LISTINGS}),
    UserRole.MODERATOR: _STAFF,
    UserRole.ADMIN: _STAFF | {Capability.VIEW_AUDIT_LOG, Capability.CHANGE_ROLES},
}

# Roles that are never valid targets of an admin action.
PROTECTED_ROLES = frozenset({UserRole.ADMIN})


def require_capability(role: UserRole, capability: Capability):
    """Raises 403 unless the role grants the capability."""
    if not role.can(capability):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )


def ensure_can_act_on(actor, target):
    """
    Guards user-targeted admin actions (ban, unban, role change).
    Nobody acts on themselves, and nobody acts on an admin.
    """
    if actor.id == target.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot perform this action on yourself")
    if target.role in PROTECTED_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrators cannot be modified")


def ensure_assignable_role(role: UserRole):
    """Admins are created with create_admin.py, never through the panel."""
    if role in PROTECTED_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This role cannot be assigned from the panel")
