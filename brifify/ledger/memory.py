"""In-memory ledger backend for local development and tests."""

from __future__ import annotations

import asyncio
from dataclasses import replace

import structlog

from brifify.kernel.errors import InsufficientTokensError, UserNotFoundError
from brifify.kernel.time import utc_now
from brifify.ledger.models import NewAccount, ResolvedAccount, UserAccount

logger = structlog.get_logger()


class InMemoryLedgerStore:
    """Dict-backed ledger.

    A single asyncio.Lock plays the role of the database's atomic statements,
    so every mutation below is serialized exactly like its SQL counterpart.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, UserAccount] = {}
        self._applied_keys: set[str] = set()
        self._lock = asyncio.Lock()

    async def get(self, user_id: str) -> UserAccount | None:
        return self._accounts.get(user_id)

    async def create_if_absent(self, new: NewAccount) -> ResolvedAccount:
        async with self._lock:
            return self._create_if_absent_unlocked(new)

    def _create_if_absent_unlocked(self, new: NewAccount) -> ResolvedAccount:
        now = utc_now()
        existing = self._accounts.get(new.user_id)
        if existing is not None:
            touched = replace(existing, last_updated=now)
            self._accounts[new.user_id] = touched
            return ResolvedAccount(account=touched, is_new=False)

        account = UserAccount(
            user_id=new.user_id,
            is_anonymous=new.is_anonymous,
            tokens=new.tokens,
            created_at=now,
            last_updated=now,
            email=new.email,
            identity_provider=new.identity_provider,
            external_id=new.external_id,
        )
        self._accounts[new.user_id] = account
        return ResolvedAccount(account=account, is_new=True)

    async def charge_one(self, user_id: str, *, idempotency_key: str | None = None) -> int:
        async with self._lock:
            account = self._accounts.get(user_id)
            if account is None:
                raise UserNotFoundError(user_id=user_id)
            if idempotency_key and idempotency_key in self._applied_keys:
                logger.info("Charge already applied", user_id=user_id, idempotency_key=idempotency_key)
                return account.tokens
            if account.tokens <= 0:
                raise InsufficientTokensError(balance=account.tokens)

            updated = replace(account, tokens=account.tokens - 1, last_updated=utc_now())
            self._accounts[user_id] = updated
            if idempotency_key:
                self._applied_keys.add(idempotency_key)
            return updated.tokens

    async def credit(
        self,
        new: NewAccount,
        amount: int,
        *,
        idempotency_key: str | None = None,
    ) -> int:
        async with self._lock:
            account = self._create_if_absent_unlocked(new).account
            if idempotency_key and idempotency_key in self._applied_keys:
                logger.info("Credit already applied", user_id=new.user_id, idempotency_key=idempotency_key)
                return account.tokens

            updated = replace(account, tokens=account.tokens + amount, last_updated=utc_now())
            self._accounts[new.user_id] = updated
            if idempotency_key:
                self._applied_keys.add(idempotency_key)
            return updated.tokens
