"""Ledger store port.

Every mutation is a single atomic operation on the backing store. Callers never
read a balance, compute a new one and write it back.
"""

from __future__ import annotations

from typing import Protocol

from brifify.ledger.models import NewAccount, ResolvedAccount, UserAccount


class LedgerStore(Protocol):
    async def get(self, user_id: str) -> UserAccount | None:
        """Fetch an account without creating it."""
        ...

    async def create_if_absent(self, new: NewAccount) -> ResolvedAccount:
        """Insert `new` unless a row for `new.user_id` exists.

        Existing rows are returned untouched apart from `last_updated`.
        """
        ...

    async def charge_one(self, user_id: str, *, idempotency_key: str | None = None) -> int:
        """Decrement tokens by one with a floor of zero and return the new balance.

        Raises UserNotFoundError or InsufficientTokensError. A replayed
        `idempotency_key` returns the current balance without charging again.
        """
        ...

    async def credit(
        self,
        new: NewAccount,
        amount: int,
        *,
        idempotency_key: str | None = None,
    ) -> int:
        """Add `amount` tokens, creating the account from `new` if absent.

        A replayed `idempotency_key` returns the current balance unchanged.
        """
        ...
