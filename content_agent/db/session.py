from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from content_agent.config import settings

# Base class for models
Base = declarative_base()

# Engine is created on first use so importing the models never opens a pool
_engine: Optional[AsyncEngine] = None


def create_engine_for_url(database_url: str) -> AsyncEngine:
    options = {"pool_pre_ping": True, "echo": settings.log_sql}
    if not database_url.startswith("sqlite"):
        options.update(pool_size=20, max_overflow=10)
    return create_async_engine(database_url, **options)


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = create_engine_for_url(settings.database_url)
    return _engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def dispose_engine() -> None:
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
