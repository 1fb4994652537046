# tests/conftest.py
import os
import tempfile
from collections.abc import AsyncIterator
from datetime import datetime, timedelta
from itertools import count

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="unknown-items-uploads-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from unknown_items.core.security import create_access_token, get_password_hash
from unknown_items.db.base import Base
from unknown_items.db.session import get_db
from unknown_items.main import app
from unknown_items.models.enums import Category, MysteryStatus, UserRole
from unknown_items.models.post import Post
from unknown_items.models.user import Profile, User

TEST_DB_URL = "sqlite+aiosqlite://"
TEST_PASSWORD = "secret123"
BASE_TIME = datetime(2026, 1, 1, 12, 0, 0)

_POST_ORDER_COUNTER = count(1)


@pytest.fixture()
async def engine():
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
async def db_session(engine) -> AsyncIterator[AsyncSession]:
    SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with SessionLocal() as session:
        yield session


@pytest.fixture(autouse=True)
def override_session_dependency(db_session: AsyncSession):
    async def _get_db_override():
        # No rollback on error: it would expire the fixture objects the test still holds
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = _get_db_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
async def client() -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client


async def create_user(
    db: AsyncSession,
    username: str,
    email: str | None = None,
    role: UserRole = UserRole.USER,
) -> User:
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        password_hash=get_password_hash(TEST_PASSWORD),
        role=role,
    )
    user.profile = Profile(display_name=username.title(), interests=[])
    db.add(user)
    await db.commit()
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
async def user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "mulder")


@pytest.fixture()
async def other_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "scully")


@pytest.fixture()
async def admin_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "skinner", role=UserRole.ADMIN)


@pytest.fixture()
def user_headers(user: User) -> dict[str, str]:
    return auth_headers(user)


@pytest.fixture()
def other_headers(other_user: User) -> dict[str, str]:
    return auth_headers(other_user)


@pytest.fixture()
def admin_headers(admin_user: User) -> dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture()
def make_post(db_session: AsyncSession):
    """Insert a post directly; each call is one minute newer than the last unless created_at is given."""

    async def _make_post(
        author: User,
        title: str | None = None,
        category: Category = Category.UNKNOWN_FACTS,
        mystery_status: MysteryStatus = MysteryStatus.UNSOLVED,
        views_count: int = 0,
        published: bool = True,
        created_at: datetime | None = None,
    ) -> Post:
        n = next(_POST_ORDER_COUNTER)
        post = Post(
            author_id=author.id,
            title=title or f"Mystery #{n}",
            content=f"Something strange happened, case {n}.",
            category=category,
            mystery_status=mystery_status,
            views_count=views_count,
            published=published,
            created_at=created_at or BASE_TIME + timedelta(minutes=n),
        )
        db_session.add(post)
        await db_session.commit()
        return post

    return _make_post
