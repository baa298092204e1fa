import asyncio
import getpass
import sys
import os
from sqlalchemy import select

# allow running from backend/ without installing the package
sys.path.append(os.getcwd())

from skoropad.db.database import AsyncSessionLocal, init_db
from skoropad.db.models.user import User
from skoropad.core.roles import UserRole
from skoropad.core.security import get_password_hash

async def create_superuser():
    nickname = input("Enter Admin Nickname: ").strip()
    password = getpass.getpass("Enter Admin Password: ")

    await init_db()

    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.nickname == nickname)
        existing = (await session.execute(stmt)).scalar_one_or_none()
        if existing:
            if existing.role == UserRole.ADMIN:
                print(f"User {nickname} is already an admin.")
                return
            print(f"User {nickname} exists, granting admin role...")
            existing.role = UserRole.ADMIN
            existing.is_banned = False
            await session.commit()
            return

        print("Creating admin...")
        session.add(
            User(
                nickname=nickname,
                password_hash=get_password_hash(password),
                role=UserRole.ADMIN,
            )
        )
        await session.commit()
        print(f"Admin '{nickname}' created successfully!")

if __name__ == "__main__":
    asyncio.run(create_superuser())
