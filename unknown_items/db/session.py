"""Async database session and engine."""
import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from unknown_items.core.config import settings
from unknown_items.core.logging import mask_database_url

logger = logging.getLogger(__name__)

logger.info("Database URL: %s", mask_database_url(settings.DATABASE_URL))

_engine_kwargs: dict = {"echo": settings.DEBUG, "pool_pre_ping": True}
if not settings.DATABASE_URL.startswith("sqlite"):
    _engine_kwargs.update(pool_size=10, max_overflow=20, connect_args={"timeout": 10})

engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs)


class Base(DeclarativeBase):
    pass


async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
