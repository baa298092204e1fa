import os
import tempfile

# must be set before skoropad.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="skoropad-uploads-")
os.environ["REDIS_URL"] = ""

import pytest
import httpx
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from skoropad.core.roles import UserRole
from skoropad.core.security import create_access_token, get_password_hash
from skoropad.db.database import Base, get_db, load_models
from skoropad.db.models.user import User
from skoropad.main import app

TEST_PASSWORD = "password123"
_password_hash = None


def _hashed_test_password() -> str:
    global _password_hash
    if _password_hash is None:
        _password_hash = get_password_hash(TEST_PASSWORD)
    return _password_hash


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    # let SQLAlchemy drive BEGIN/SAVEPOINT instead of the sqlite3 module
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    load_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    async def _make_user(nickname: str, role: UserRole = UserRole.USER, is_banned: bool = False) -> User:
        async with session_factory() as session:
            user = User(
                nickname=nickname,
                password_hash=_hashed_test_password(),
                role=role,
                is_banned=is_banned,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user
    return _make_user


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers
