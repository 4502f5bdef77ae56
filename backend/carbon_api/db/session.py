from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from carbon_api.core.config import settings


def engine_options(url: str) -> dict[str, Any]:
    """Pool options for server databases; SQLite (tests, local runs) takes none."""
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_recycle": 300,  # seconds
    }


def build_engine(url: str) -> AsyncEngine:
    return create_async_engine(url, echo=False, **engine_options(url))


engine: AsyncEngine = build_engine(settings.DATABASE_URL_ASYNC_CLEAN)

# expire_on_commit=False: services keep returning rows after committing.
AsyncSessionLocal = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One AsyncSession per request, closed when the request is done."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
