"""Async engine, declarative base and the per-request session."""
import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from uboard.core.config import settings

logger = logging.getLogger(__name__)


def engine_options(url: str) -> dict:
    """Pool settings for server databases. SQLite keeps its default pool."""
    options = {"echo": settings.DEBUG}
    if make_url(url).get_backend_name() != "sqlite":
        options.update(pool_pre_ping=True, pool_size=10, max_overflow=20)
    return options


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))
logger.info("Database: %s", make_url(settings.DATABASE_URL).render_as_string(hide_password=True))


class Base(DeclarativeBase):
    pass


async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def ping() -> None:
    """Round-trip to the database. Raises if it is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session and one transaction per request.

    Everything a controller writes (a post and its tag links, a check-in and
    the row lock taken to count it) commits together when the request
    succeeds and is rolled back when it raises.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
