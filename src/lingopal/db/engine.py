"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

The engine is built from Settings during app startup and kept on app.state,
so nothing connects at import time and tests can swap the whole thing out
through dependency_overrides[get_db].
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import make_url, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from lingopal.config import Settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the engine. Connection pool: min 5, max 20 connections."""
    url = make_url(settings.database_url)
    kwargs: dict = {"echo": settings.debug, "pool_pre_ping": True}
    if url.get_backend_name() != "sqlite":
        kwargs.update(pool_size=5, max_overflow=15)
    return create_async_engine(url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory — each request gets its own session."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def check_connection(engine: AsyncEngine) -> None:
    """Run SELECT 1. Raises whatever the driver raises if the DB is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes."""
    factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()
