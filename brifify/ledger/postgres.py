"""Postgres-backed ledger store.

Atomicity lives in the SQL: create-if-absent is `INSERT ... ON CONFLICT`,
debit is `UPDATE ... WHERE tokens > 0`, and idempotent mutations claim their
key in `ledger_entry` inside the same transaction as the balance change.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg
import structlog

from brifify.db.client import RawQueryPool
from brifify.kernel.errors import (
    InsufficientTokensError,
    LedgerUnavailableError,
    UserNotFoundError,
)
from brifify.kernel.ids import new_prefixed_id
from brifify.kernel.time import coerce_utc, utc_now
from brifify.ledger.models import NewAccount, ResolvedAccount, UserAccount

logger = structlog.get_logger()

_ACCOUNT_COLUMNS = (
    "user_id, is_anonymous, tokens, email, identity_provider, external_id, created_at, last_updated"
)

_UNAVAILABLE_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


def _row_to_account(row: Any) -> UserAccount:
    return UserAccount(
        user_id=row["user_id"],
        is_anonymous=bool(row["is_anonymous"]),
        tokens=int(row["tokens"]),
        created_at=coerce_utc(row["created_at"]),
        last_updated=coerce_utc(row["last_updated"]),
        email=row["email"],
        identity_provider=row["identity_provider"],
        external_id=row["external_id"],
    )


class PostgresLedgerStore:
    def __init__(self, pool: RawQueryPool) -> None:
        self._pool = pool

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[Any]:
        try:
            async with self._pool.acquire() as conn:
                yield conn
        except _UNAVAILABLE_ERRORS as exc:
            logger.error("Ledger store error", error=str(exc), error_type=type(exc).__name__)
            raise LedgerUnavailableError() from exc

    async def get(self, user_id: str) -> UserAccount | None:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {_ACCOUNT_COLUMNS} FROM user_account WHERE user_id = $1",
                user_id,
            )
        return _row_to_account(row) if row else None

    async def create_if_absent(self, new: NewAccount) -> ResolvedAccount:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO user_account (
                    user_id, is_anonymous, tokens, email, identity_provider, external_id,
                    created_at, last_updated
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $7)
                ON CONFLICT (user_id)
                DO UPDATE SET last_updated = EXCLUDED.last_updated
                RETURNING {_ACCOUNT_COLUMNS}, (xmax = 0) AS inserted
                """,
                new.user_id,
                new.is_anonymous,
                int(new.tokens),
                new.email,
                new.identity_provider,
                new.external_id,
                utc_now(),
            )
        return ResolvedAccount(account=_row_to_account(row), is_new=bool(row["inserted"]))

    async def charge_one(self, user_id: str, *, idempotency_key: str | None = None) -> int:
        now = utc_now()
        async with self._connection() as conn:
            async with conn.transaction():
                claimed = await self._claim_entry(
                    conn,
                    idempotency_key=idempotency_key or new_prefixed_id("charge"),
                    user_id=user_id,
                    delta=-1,
                    reason="charge",
                    now=now,
                )
                if not claimed:
                    balance = await conn.fetchval(
                        "SELECT tokens FROM user_account WHERE user_id = $1",
                        user_id,
                    )
                    if balance is None:
                        raise UserNotFoundError(user_id=user_id)
                    logger.info("Charge already applied", user_id=user_id, idempotency_key=idempotency_key)
                    return int(balance)

                balance = await conn.fetchval(
                    """
                    UPDATE user_account
                    SET tokens = tokens - 1,
                        last_updated = $2
                    WHERE user_id = $1
                      AND tokens > 0
                    RETURNING tokens
                    """,
                    user_id,
                    now,
                )
                if balance is None:
                    # Raising rolls back the claimed entry with the transaction.
                    current = await conn.fetchval(
                        "SELECT tokens FROM user_account WHERE user_id = $1",
                        user_id,
                    )
                    if current is None:
                        raise UserNotFoundError(user_id=user_id)
                    raise InsufficientTokensError(balance=int(current))
        return int(balance)

    async def credit(
        self,
        new: NewAccount,
        amount: int,
        *,
        idempotency_key: str | None = None,
    ) -> int:
        now = utc_now()
        async with self._connection() as conn:
            async with conn.transaction():
                await conn.execute(
                    """
                    INSERT INTO user_account (
                        user_id, is_anonymous, tokens, email, identity_provider, external_id,
                        created_at, last_updated
                    )
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $7)
                    ON CONFLICT (user_id) DO NOTHING
                    """,
                    new.user_id,
                    new.is_anonymous,
                    int(new.tokens),
                    new.email,
                    new.identity_provider,
                    new.external_id,
                    now,
                )
                claimed = await self._claim_entry(
                    conn,
                    idempotency_key=idempotency_key or new_prefixed_id("credit"),
                    user_id=new.user_id,
                    delta=int(amount),
                    reason="credit",
                    now=now,
                )
                if not claimed:
                    logger.info(
                        "Credit already applied",
                        user_id=new.user_id,
                        idempotency_key=idempotency_key,
                    )
                    balance = await conn.fetchval(
                        "SELECT tokens FROM user_account WHERE user_id = $1",
                        new.user_id,
                    )
                    return int(balance)

                balance = await conn.fetchval(
                    """
                    UPDATE user_account
                    SET tokens = tokens + $2,
                        last_updated = $3
                    WHERE user_id = $1
                    RETURNING tokens
                    """,
                    new.user_id,
                    int(amount),
                    now,
                )
        return int(balance)

    async def _claim_entry(
        self,
        conn: Any,
        *,
        idempotency_key: str,
        user_id: str,
        delta: int,
        reason: str,
        now: Any,
    ) -> bool:
        claimed = await conn.fetchval(
            """
            INSERT INTO ledger_entry (idempotency_key, user_id, delta, reason, created_at)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (idempotency_key) DO NOTHING
            RETURNING idempotency_key
            """,
            idempotency_key,
            user_id,
            delta,
            reason,
            now,
        )
        return claimed is not None
