"""
PostgreSQL connection pool.

Stores use a raw asyncpg pool for their atomic statements. The pool is created
by the process entry point and handed to each store; nothing here is global.
"""

from __future__ import annotations

import json
from typing import Any, Protocol

import structlog
from sqlalchemy.ext.asyncio import create_async_engine

from brifify.config import Settings
from brifify.db.models import Base

logger = structlog.get_logger()


class RawQueryPool(Protocol):
    """Minimal protocol used by raw SQL callers."""

    def acquire(self) -> Any:
        ...


def asyncpg_dsn(database_url: str) -> str:
    """Convert a SQLAlchemy-style URL to the plain form asyncpg expects."""
    return database_url.replace("postgresql+asyncpg://", "postgresql://")


def sqlalchemy_url(database_url: str) -> str:
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


async def create_pool(settings: Settings):
    """Create an asyncpg pool with JSON/JSONB codecs registered."""
    import asyncpg

    async def _init_connection(conn: asyncpg.Connection) -> None:
        # asyncpg returns JSON/JSONB as strings by default.
        await conn.set_type_codec(
            "json",
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )
        await conn.set_type_codec(
            "jsonb",
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
            format="text",
        )

    min_size = max(1, int(settings.db_pool_min_size))
    pool = await asyncpg.create_pool(
        asyncpg_dsn(settings.database_url),
        init=_init_connection,
        min_size=min_size,
        max_size=max(min_size, int(settings.db_pool_max_size)),
        command_timeout=settings.db_command_timeout_seconds,
    )
    logger.info(
        "Database pool initialized",
        url=settings.database_url[:40] + "...",
        min_size=min_size,
        max_size=settings.db_pool_max_size,
    )
    return pool


async def close_pool(pool: Any) -> None:
    if pool is not None:
        await pool.close()
        logger.info("Database pool closed")


async def ensure_schema(settings: Settings) -> None:
    """Create missing tables from the SQLAlchemy models."""
    engine = create_async_engine(sqlalchemy_url(settings.database_url))
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured", tables=sorted(Base.metadata.tables))
    finally:
        await engine.dispose()
