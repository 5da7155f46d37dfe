"""
Database engine and per-request sessions.

PostgreSQL (asyncpg) in deployment; the sqlite+aiosqlite URL used by the
test suite gets the same session factory without pool sizing.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from swiftdrop.app.core.config import settings


def _engine_options() -> dict:
    options = {"echo": settings.db_echo, "future": True}
    if not settings.database_url.startswith("sqlite"):
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow
    return options


engine = create_async_engine(settings.database_url, **_engine_options())

# Parcels stay readable after commit, handlers serialize them afterwards
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db():
    """One session per request, closed when the response is done."""
    async with AsyncSessionLocal() as session:
        yield session
