"""Async SQLAlchemy engine and session factory.

Usage in routes:
    from fileshare.database import get_db

    @router.post("/items")
    async def create_item(db: AsyncSession = Depends(get_db)):
        db.add(Item())
        await db.commit()
"""
from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from fileshare.config import Settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine. Pool sizing only applies to server databases."""
    kwargs = {"echo": False, "pool_pre_ping": True}
    if make_url(settings.DATABASE_URL).get_backend_name() != "sqlite":
        kwargs.update(pool_size=10, max_overflow=20)
    return create_async_engine(settings.DATABASE_URL, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db(request: Request):
    """FastAPI dependency that yields an async DB session."""
    async with request.app.state.context.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
