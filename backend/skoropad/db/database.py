from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from typing import AsyncGenerator
import logging

from skoropad.core import config

logger = logging.getLogger(__name__)

engine = create_async_engine(config.DATABASE_URL, echo=config.SQL_ECHO)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

class Base(DeclarativeBase):
    pass

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session

def load_models():
    """Import every model module so Base.metadata knows all tables."""
    from skoropad.db.models import user, advertisement, conversation, admin_log  # noqa: F401

async def init_db():
    """
    Creates missing tables on startup and, when SEED_DEMO_DATA is set,
    inserts the demo accounts and listings.
    """
    load_models()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if config.SEED_DEMO_DATA:
        async with AsyncSessionLocal() as session:
            await seed_demo_data(session)

async def seed_demo_data(session: AsyncSession):
    from sqlalchemy import select
    from skoropad.db.models.user import User
    from skoropad.db.models.advertisement import Advertisement
    from skoropad.core.roles import UserRole
    from skoropad.core.security import get_password_hash

    demo_hashed_pwd = get_password_hash("password123")

    async def get_or_create_user(nickname: str, role: UserRole) -> User:
        res = await session.execute(select(User).where(User.nickname == nickname))
        user_obj = res.scalar_one_or_none()
        if not user_obj:
            logger.info("Creating demo user %s (%s)", nickname, role.value)
            user_obj = User(nickname=nickname, password_hash=demo_hashed_pwd, role=role)
            session.add(user_obj)
            await session.flush()
        return user_obj

    admin = await get_or_create_user("admin", UserRole.ADMIN)
    await get_or_create_user("moderator", UserRole.MODERATOR)
    seller = await get_or_create_user("seller", UserRole.VIP)
    await get_or_create_user("buyer", UserRole.USER)

    ad_res = await session.execute(select(Advertisement).where(Advertisement.user_id == seller.id))
    if ad_res.first() is None:
        session.add(
            Advertisement(
                user_id=seller.id,
                category="furniture",
                subcategory="chairs",
                title="Chair",
                description="Wooden chair, good condition",
                telegram_contact="@seller",
                price=250,
                is_vip=True,
            )
        )

    await session.commit()
    logger.info("Demo data ready (admin id=%s)", admin.id)
