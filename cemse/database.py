"""
Database connection for PostgreSQL (production) or SQLite (local dev / tests).

Env vars (set in deployment variables or .env):
    DATABASE_URL  -- full postgres:// connection string
    DATABASE_URL_FALLBACK -- optional sqlite+aiosqlite:///./local.db for local dev
"""

from __future__ import annotations

import json
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from cemse import config


def resolve_database_url(raw_url: str = None) -> str:
    """Normalise a DATABASE_URL into an async driver URL."""
    raw_url = raw_url if raw_url is not None else os.environ.get("DATABASE_URL", "")
    if not raw_url:
        return config.DATABASE_URL_FALLBACK
    # Hosting providers give postgres:// but asyncpg needs postgresql+asyncpg://
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return raw_url


def json_dumps(value) -> str:
    """JSON column serializer; keeps accented text readable for ILIKE matching."""
    return json.dumps(value, ensure_ascii=False)


DATABASE_URL = resolve_database_url()

engine = create_async_engine(DATABASE_URL, echo=False, json_serializer=json_dumps)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


class Gateway:
    """
    Read-only access point to the relational store.

    Every service goes through a gateway instead of holding a session, so
    independent lookups can each open their own session and run
    concurrently (an AsyncSession must not be shared between tasks).
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            yield session

    async def all(self, stmt) -> list:
        """Execute a select and return ORM scalars."""
        async with self.session() as session:
            return list((await session.execute(stmt)).scalars().all())

    async def rows(self, stmt) -> list:
        """Execute a select and return raw row tuples."""
        async with self.session() as session:
            return list((await session.execute(stmt)).all())

    async def scalar(self, stmt):
        async with self.session() as session:
            return (await session.execute(stmt)).scalar()


_gateway = Gateway(async_session)


def get_gateway() -> Gateway:
    """FastAPI dependency returning the process-wide gateway."""
    return _gateway


async def init_db(bind: AsyncEngine = None):
    """Create all tables (safe to call multiple times)."""
    # Models must be registered on Base.metadata before create_all
    from cemse import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
