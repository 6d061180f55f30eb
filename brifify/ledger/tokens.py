"""Token debit protocol."""

from __future__ import annotations

import structlog

from brifify.kernel.errors import InvalidInputError
from brifify.ledger.identity import require_client_id
from brifify.ledger.models import NewAccount, ProviderIdentity
from brifify.ledger.store import LedgerStore

logger = structlog.get_logger()


class TokenLedger:
    """
    Charges and credits usage tokens.

    `charge_one` is called once per synthesized brief, keyed by the brief id,
    and refuses to take the balance below zero even if an earlier balance
    check passed. `credit` is additive and safe to replay with the same key.
    """

    def __init__(self, store: LedgerStore, *, starting_tokens: int) -> None:
        self._store = store
        self._starting_tokens = starting_tokens

    async def charge_one(self, client_id: str | None, *, idempotency_key: str | None = None) -> int:
        user_id = require_client_id(client_id)
        balance = await self._store.charge_one(user_id, idempotency_key=idempotency_key)
        logger.info("Token charged", user_id=user_id, balance=balance, idempotency_key=idempotency_key)
        return balance

    async def credit(
        self,
        client_id: str | None,
        amount: int,
        *,
        idempotency_key: str | None = None,
        identity: ProviderIdentity | None = None,
    ) -> int:
        user_id = require_client_id(client_id)
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidInputError(message="tokens must be a positive number", meta={"tokens": amount})

        balance = await self._store.credit(
            NewAccount.for_client(user_id, starting_tokens=self._starting_tokens, identity=identity),
            amount,
            idempotency_key=idempotency_key,
        )
        logger.info(
            "Tokens credited",
            user_id=user_id,
            amount=amount,
            balance=balance,
            idempotency_key=idempotency_key,
        )
        return balance
