import uuid
from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request
from sqlalchemy import select
from skoropad.core import config
from skoropad.core.roles import Capability
from skoropad.db.database import AsyncSessionLocal
from skoropad.db.models.user import User
from skoropad.core.security import verify_password

class AdminAuth(AuthenticationBackend):
    async def login(self, request: Request) -> bool:
        form = await request.form()
        nickname = form.get("username")
        password = form.get("password")

        async with AsyncSessionLocal() as session:
            stmt = select(User).where(User.nickname == nickname)
            result = await session.execute(stmt)
            user = result.scalar_one_or_none()

            if not user or not verify_password(password or "", user.password_hash):
                return False

            # panel roles only, and never a banned account
            if user.is_banned or not user.role.can(Capability.ENTER_PANEL):
                return False

            request.session.update({"user_id": str(user.id), "role": user.role.value})
            return True

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        user_id = request.session.get("user_id")
        if not user_id:
            return False

        # role or ban may have changed since login
        async with AsyncSessionLocal() as session:
            user = await session.get(User, uuid.UUID(user_id))
            if user is None or user.is_banned or not user.role.can(Capability.ENTER_PANEL):
                request.session.clear()
                return False
            request.session["role"] = user.role.value
        return True

authentication_backend = AdminAuth(secret_key=config.ADMIN_SESSION_SECRET)
