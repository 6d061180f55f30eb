"""Identity resolution: client identifier -> canonical ledger row."""

from __future__ import annotations

import structlog

from brifify.kernel.errors import InvalidInputError, UserNotFoundError
from brifify.ledger.models import NewAccount, ProviderIdentity, ResolvedAccount, UserAccount
from brifify.ledger.store import LedgerStore

logger = structlog.get_logger()


def require_client_id(client_id: str | None) -> str:
    value = (client_id or "").strip()
    if not value:
        raise InvalidInputError(message="Missing userId")
    return value


class IdentityResolver:
    """
    Maps an anonymous fingerprint or provider subject to its ledger row.

    Anonymous and registered identities stay separate rows; nothing here merges
    an anonymous balance into a later registered account.
    """

    def __init__(self, store: LedgerStore, *, starting_tokens: int) -> None:
        self._store = store
        self._starting_tokens = starting_tokens

    async def resolve(
        self,
        client_id: str | None,
        identity: ProviderIdentity | None = None,
    ) -> ResolvedAccount:
        user_id = require_client_id(client_id)
        resolved = await self._store.create_if_absent(
            NewAccount.for_client(user_id, starting_tokens=self._starting_tokens, identity=identity)
        )
        if resolved.is_new:
            logger.info(
                "User account created",
                user_id=user_id,
                is_anonymous=resolved.account.is_anonymous,
                tokens=resolved.account.tokens,
            )
        return resolved

    async def balance(self, client_id: str | None) -> int:
        resolved = await self.resolve(client_id)
        return resolved.account.tokens

    async def require(self, client_id: str | None) -> UserAccount:
        user_id = require_client_id(client_id)
        account = await self._store.get(user_id)
        if account is None:
            raise UserNotFoundError(user_id=user_id)
        return account
