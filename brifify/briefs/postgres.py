"""Postgres-backed brief store."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

import asyncpg
import structlog

from brifify.briefs.models import StoredBrief
from brifify.db.client import RawQueryPool
from brifify.kernel.errors import BriefStoreUnavailableError
from brifify.kernel.time import coerce_utc, utc_now
from brifify.reasoning.schemas import TechnicalBrief

logger = structlog.get_logger()

_BRIEF_COLUMNS = "user_id, brief_id, brief_data, created_at, updated_at, share_id"

_UNAVAILABLE_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


def _row_to_brief(row: Any) -> StoredBrief:
    return StoredBrief(
        user_id=row["user_id"],
        brief_id=row["brief_id"],
        brief=TechnicalBrief.model_validate(row["brief_data"]),
        created_at=coerce_utc(row["created_at"]),
        updated_at=coerce_utc(row["updated_at"]),
        share_id=row["share_id"],
    )


class PostgresBriefStore:
    def __init__(self, pool: RawQueryPool) -> None:
        self._pool = pool

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[Any]:
        try:
            async with self._pool.acquire() as conn:
                yield conn
        except _UNAVAILABLE_ERRORS as exc:
            logger.error("Brief store error", error=str(exc), error_type=type(exc).__name__)
            raise BriefStoreUnavailableError() from exc

    async def put(
        self,
        user_id: str,
        brief_id: str,
        brief: TechnicalBrief,
        *,
        created_at: datetime | None = None,
    ) -> StoredBrief:
        now = utc_now()
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO brief (user_id, brief_id, title, brief_data, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6)
                ON CONFLICT (user_id, brief_id)
                DO UPDATE SET
                    title = EXCLUDED.title,
                    brief_data = EXCLUDED.brief_data,
                    updated_at = EXCLUDED.updated_at
                RETURNING {_BRIEF_COLUMNS}
                """,
                user_id,
                brief_id,
                brief.project_title,
                brief.model_dump(exclude_none=True),
                created_at or now,
                now,
            )
        return _row_to_brief(row)

    async def get(self, user_id: str, brief_id: str) -> StoredBrief | None:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {_BRIEF_COLUMNS} FROM brief WHERE user_id = $1 AND brief_id = $2",
                user_id,
                brief_id,
            )
        return _row_to_brief(row) if row else None

    async def list_for_user(self, user_id: str) -> list[StoredBrief]:
        async with self._connection() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {_BRIEF_COLUMNS}
                FROM brief
                WHERE user_id = $1
                ORDER BY created_at DESC, brief_id DESC
                """,
                user_id,
            )
        return [_row_to_brief(row) for row in rows]

    async def delete(self, user_id: str, brief_id: str) -> bool:
        async with self._connection() as conn:
            deleted = await conn.fetchval(
                "DELETE FROM brief WHERE user_id = $1 AND brief_id = $2 RETURNING brief_id",
                user_id,
                brief_id,
            )
        return deleted is not None

    async def share(self, user_id: str, brief_id: str, share_id: str) -> StoredBrief | None:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE brief
                SET share_id = COALESCE(share_id, $3)
                WHERE user_id = $1 AND brief_id = $2
                RETURNING {_BRIEF_COLUMNS}
                """,
                user_id,
                brief_id,
                share_id,
            )
        return _row_to_brief(row) if row else None

    async def get_shared(self, share_id: str) -> StoredBrief | None:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {_BRIEF_COLUMNS} FROM brief WHERE share_id = $1",
                share_id,
            )
        return _row_to_brief(row) if row else None
