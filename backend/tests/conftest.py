from __future__ import annotations

import os

# Settings() needs a database URL at import time; tests use in-memory SQLite.
os.environ.setdefault("DATABASE_URL_ASYNC", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from carbon_api.db.base import Base
from carbon_api.db.session import get_db
import carbon_api.models  # noqa: F401

from helpers import FakeNormativeServer


# ---------------------------------------------------------
# Engine + schema lifecycle (fresh in-memory DB per test)
# ---------------------------------------------------------
@pytest_asyncio.fixture()
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture()
def sessionmaker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# ---------------------------------------------------------
# DB session for setup, services and assertions
# ---------------------------------------------------------
@pytest_asyncio.fixture()
async def db(sessionmaker):
    async with sessionmaker() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------
# FastAPI app + dependency override
# ---------------------------------------------------------
@pytest.fixture()
def app(sessionmaker):
    from carbon_api.main import create_application

    fastapi_app = create_application()

    async def _override_get_db():
        async with sessionmaker() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------
# Normative server
# ---------------------------------------------------------
@pytest.fixture()
def normative_server() -> FakeNormativeServer:
    return FakeNormativeServer()
