from sqladmin import ModelView
from starlette.requests import Request
from skoropad.core.roles import Capability, UserRole
from skoropad.db.models.user import User
from skoropad.db.models.advertisement import Advertisement
from skoropad.db.models.conversation import Conversation
from skoropad.db.models.admin_log import AdminLog

class ReadOnlyView(ModelView):
    """
    Back-office views are read-only. Bans, role changes and listing
    moderation go through /v1/admin so every change is audited.
    """
    can_create = False
    can_edit = False
    can_delete = False
    can_export = True

class UserAdmin(ReadOnlyView, model=User):
    column_list = [User.id, User.nickname, User.role, User.is_banned, User.created_at]
    column_searchable_list = [User.nickname]
    column_sortable_list = [User.created_at, User.nickname]
    column_details_exclude_list = [User.password_hash]
    column_export_exclude_list = [User.password_hash]
    icon = "fa-solid fa-user"

class AdvertisementAdmin(ReadOnlyView, model=Advertisement):
    column_list = [
        Advertisement.id,
        Advertisement.title,
        Advertisement.category,
        Advertisement.subcategory,
        Advertisement.price,
        Advertisement.is_vip,
        Advertisement.created_at,
    ]
    column_searchable_list = [Advertisement.title, Advertisement.description]
    column_sortable_list = [Advertisement.created_at, Advertisement.is_vip]
    icon = "fa-solid fa-bullhorn"

class ConversationAdmin(ReadOnlyView, model=Conversation):
    column_list = [
        Conversation.id,
        Conversation.user1_id,
        Conversation.user2_id,
        Conversation.advertisement_id,
        Conversation.user1_unread_count,
        Conversation.user2_unread_count,
        Conversation.updated_at,
    ]
    column_sortable_list = [Conversation.updated_at]
    icon = "fa-solid fa-comments"

class AdminLogAdmin(ReadOnlyView, model=AdminLog):
    column_list = [AdminLog.created_at, AdminLog.action, AdminLog.admin_id, AdminLog.target_user_id, AdminLog.details]
    column_sortable_list = [AdminLog.created_at]
    column_default_sort = ("created_at", True)
    icon = "fa-solid fa-history"

    def is_accessible(self, request: Request) -> bool:
        role = request.session.get("role")
        return role is not None and UserRole(role).can(Capability.VIEW_AUDIT_LOG)

    def is_visible(self, request: Request) -> bool:
        return self.is_accessible(request)

ADMIN_VIEWS = [UserAdmin, AdvertisementAdmin, ConversationAdmin, AdminLogAdmin]
